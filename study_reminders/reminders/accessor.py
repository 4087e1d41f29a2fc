"""Read the backend's current notifications, for diagnostics and tests."""

from study_reminders.reminders.backends.base import NotificationBackend
from study_reminders.reminders.calendar import to_local_naive
from study_reminders.reminders.models import DeliveryState, NotificationRecord


def list_notifications(backend: NotificationBackend) -> list[NotificationRecord]:
    """List scheduled and delivered notifications in firing order.

    :param backend: Notification backend to read.
    :returns: Notifications annotated with their delivery state.
    """
    records = [
        NotificationRecord(**notification.model_dump(), delivery_state=DeliveryState.SCHEDULED)
        for notification in backend.get_scheduled()
    ]
    records.extend(
        NotificationRecord(**notification.model_dump(), delivery_state=DeliveryState.TRIGGERED)
        for notification in backend.get_triggered()
    )
    records.sort(key=lambda record: to_local_naive(record.firing_time))
    return records
