"""In-memory backends for running without a device, and for tests."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from study_reminders.reminders.calendar import to_local_naive
from study_reminders.reminders.models import DeliveryEvent, Notification

logger = logging.getLogger(__name__)

TriggerListener = Callable[[DeliveryEvent], None]


class InMemoryNotificationBackend:
    """Holds notifications in memory and delivers them on request."""

    def __init__(self, on_trigger: TriggerListener | None = None) -> None:
        """Initialise the backend.

        :param on_trigger: Called with an event for each delivered notification.
        """
        self._scheduled: list[Notification] = []
        self._triggered: list[Notification] = []
        self._on_trigger = on_trigger

    def set_listener(self, on_trigger: TriggerListener | None) -> None:
        """Replace the delivery listener."""
        self._on_trigger = on_trigger

    def get_scheduled(self) -> list[Notification]:
        """Get notifications that have not been delivered yet."""
        return list(self._scheduled)

    def get_triggered(self) -> list[Notification]:
        """Get notifications delivered at least once."""
        return list(self._triggered)

    def schedule(self, batch: list[Notification]) -> None:
        """Add a batch of notifications to the schedule."""
        self._scheduled.extend(batch)
        logger.debug(f"Scheduled {len(batch)} notifications")

    def cancel_all(self) -> None:
        """Drop every scheduled and delivered notification."""
        dropped = len(self._scheduled) + len(self._triggered)
        self._scheduled.clear()
        self._triggered.clear()
        logger.debug(f"Cancelled {dropped} notifications")

    def deliver_due(self, now: datetime) -> list[Notification]:
        """Deliver every scheduled notification whose firing time has passed.

        Notifications are delivered in schedule order and the listener is told
        about each one.

        :param now: Current time.
        :returns: The delivered notifications.
        """
        now = to_local_naive(now)
        due = [n for n in self._scheduled if to_local_naive(n.firing_time) <= now]
        if not due:
            return []

        due_ids = {id(n) for n in due}
        self._scheduled = [n for n in self._scheduled if id(n) not in due_ids]
        self._triggered.extend(due)
        logger.info(f"Delivered {len(due)} notifications")

        if self._on_trigger is not None:
            for notification in due:
                self._on_trigger(
                    DeliveryEvent(id=notification.id, payload_type=notification.payload_type)
                )
        return due


class InMemoryBadgeBackend:
    """Remembers the badge count it was last given."""

    def __init__(self) -> None:
        """Initialise with no badge shown."""
        self.count = 0
        self.history: list[int] = []

    def set(self, count: int) -> None:
        """Show a badge count."""
        self.count = count
        self.history.append(count)
        logger.debug(f"Badge set to {count}")
