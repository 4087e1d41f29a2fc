"""Dependencies wiring the reminder service for API endpoints."""

import logging
from datetime import datetime
from functools import lru_cache

from study_reminders.reminders.backends import InMemoryBadgeBackend, InMemoryNotificationBackend
from study_reminders.reminders.calendar import AcceleratedClock, Clock, SystemClock
from study_reminders.reminders.config import get_reminder_settings
from study_reminders.reminders.service import ReminderService

logger = logging.getLogger(__name__)


@lru_cache
def get_notification_backend() -> InMemoryNotificationBackend:
    """Get the process-wide notification backend."""
    return InMemoryNotificationBackend()


@lru_cache
def get_badge_backend() -> InMemoryBadgeBackend:
    """Get the process-wide badge backend."""
    return InMemoryBadgeBackend()


@lru_cache
def get_reminder_service() -> ReminderService:
    """Get the process-wide reminder service.

    Deliveries from the notification backend are routed to the service's
    reconciler. With REMINDERS_CLOCK_ACCELERATION above 1 the service runs on
    an accelerated timeline starting now.

    :returns: Configured ReminderService instance.
    """
    settings = get_reminder_settings()
    clock: Clock
    if settings.clock_acceleration > 1:
        clock = AcceleratedClock(datetime.now(), settings.clock_acceleration)
    else:
        clock = SystemClock()

    notifications = get_notification_backend()
    service = ReminderService(
        notifications,
        get_badge_backend(),
        clock=clock,
        settings=settings,
    )
    notifications.set_listener(service.handle_delivery)
    logger.info(f"Reminder service created: acceleration={settings.clock_acceleration}")
    return service
