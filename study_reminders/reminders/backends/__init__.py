"""Notification and badge backends."""

from study_reminders.reminders.backends.base import BadgeBackend, NotificationBackend
from study_reminders.reminders.backends.memory import (
    InMemoryBadgeBackend,
    InMemoryNotificationBackend,
)

__all__ = [
    "BadgeBackend",
    "InMemoryBadgeBackend",
    "InMemoryNotificationBackend",
    "NotificationBackend",
]
