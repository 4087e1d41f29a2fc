"""Scheduling of study reminder notifications and the outstanding-reports badge."""

from study_reminders.reminders.exceptions import (
    BackendError,
    ReminderConfigError,
    ReminderError,
    SyncInProgressError,
)
from study_reminders.reminders.models import (
    DeliveryEvent,
    DeliveryState,
    Notification,
    NotificationRecord,
    ReconcileOutcome,
    ReminderDescriptor,
    ReminderState,
    Report,
    SyncPhase,
    SyncResult,
)
from study_reminders.reminders.service import ReminderService

__all__ = [
    # Models
    "DeliveryEvent",
    "DeliveryState",
    "Notification",
    "NotificationRecord",
    "ReconcileOutcome",
    "ReminderDescriptor",
    "ReminderState",
    "Report",
    "SyncPhase",
    "SyncResult",
    # Service
    "ReminderService",
    # Exceptions
    "BackendError",
    "ReminderConfigError",
    "ReminderError",
    "SyncInProgressError",
]
