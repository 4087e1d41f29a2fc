"""Protocols for the backends that display notifications and the badge."""

from typing import Protocol

from study_reminders.reminders.models import Notification


class NotificationBackend(Protocol):
    """Protocol for the local notification mechanism.

    Known to be unreliable: it re-fires trigger events and re-delivers already
    triggered notifications whenever new ones are scheduled. Callers work around
    that rather than expecting it to behave.
    """

    def get_scheduled(self) -> list[Notification]:
        """Get notifications that have not been delivered yet."""
        ...

    def get_triggered(self) -> list[Notification]:
        """Get notifications delivered at least once."""
        ...

    def schedule(self, batch: list[Notification]) -> None:
        """Schedule a batch of notifications, in the given order.

        :param batch: Notifications to schedule.
        """
        ...

    def cancel_all(self) -> None:
        """Cancel every scheduled and delivered notification."""
        ...


class BadgeBackend(Protocol):
    """Protocol for the app icon badge."""

    def set(self, count: int) -> None:
        """Show a badge count.

        :param count: Outstanding reports.
        """
        ...
