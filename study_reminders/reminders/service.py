"""Reminder service: the sync / clear / list operations callers use."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from study_reminders.reminders.accessor import list_notifications
from study_reminders.reminders.backends.base import BadgeBackend, NotificationBackend
from study_reminders.reminders.calendar import Clock, SystemClock
from study_reminders.reminders.config import ReminderConfig, get_reminder_settings
from study_reminders.reminders.exceptions import ReminderConfigError
from study_reminders.reminders.models import (
    DeliveryEvent,
    NotificationRecord,
    ReminderDescriptor,
    ReminderState,
    Report,
    SyncResult,
)
from study_reminders.reminders.orchestrator import SyncOrchestrator
from study_reminders.reminders.reconciler import TriggerReconciler
from study_reminders.reminders.session import ReminderSession

logger = logging.getLogger(__name__)


def _validate_reports(
    state: ReminderState,
    reports: Sequence[Report | Mapping[str, Any]],
) -> list[Report]:
    """Validate reports against the reportable descriptors.

    :param state: Validated reminder state.
    :param reports: Reports as models or mappings.
    :returns: Validated reports.
    :raises ReminderConfigError: If a report is malformed or of an unknown type.
    """
    reportable = {d.type for d in state.descriptors if not d.reminder_only}
    validated = []
    for index, raw in enumerate(reports):
        try:
            report = Report.model_validate(raw)
        except ValidationError as e:
            raise ReminderConfigError(f"Invalid report at index {index}: {e}") from e
        if report.type not in reportable:
            raise ReminderConfigError(
                f"Report at index {index} has type {report.type!r}, "
                f"which is not a reportable reminder type"
            )
        validated.append(report)
    return validated


class ReminderService:
    """Keeps local notifications and the badge in line with reminders and reports.

    Call ``sync()`` whenever there is new information: at process start, when a
    study is created, when a report is submitted, and when reminder times
    change. Deliveries seen while the process is live go to
    ``handle_delivery()``.
    """

    def __init__(
        self,
        notifications: NotificationBackend,
        badge: BadgeBackend,
        clock: Clock | None = None,
        settings: ReminderConfig | None = None,
        session: ReminderSession | None = None,
    ) -> None:
        """Initialise the service and wire the reconciler to the session.

        :param notifications: Notification backend.
        :param badge: Badge backend.
        :param clock: Source of the current local time. Defaults to real time.
        :param settings: Reminder settings. If not provided, loads from env.
        :param session: Session to share. If not provided, creates a new one.
        """
        self._notifications = notifications
        self._clock = clock or SystemClock()
        self._settings = settings or get_reminder_settings()
        self._session = session or ReminderSession()
        self._orchestrator = SyncOrchestrator(
            self._session,
            notifications,
            badge,
            settings=self._settings,
            clock=self._clock,
        )
        self._reconciler = TriggerReconciler(self._session, self._orchestrator)
        self._session.register_handler(self._reconciler.handle)

    @property
    def session(self) -> ReminderSession:
        """The session holding the cached snapshot."""
        return self._session

    @property
    def reconciler(self) -> TriggerReconciler:
        """The delivery event reconciler."""
        return self._reconciler

    @property
    def clock(self) -> Clock:
        """The service's time source."""
        return self._clock

    def sync(
        self,
        descriptors: Sequence[ReminderDescriptor | Mapping[str, Any]],
        start_date: int,
        end_date: int,
        reports: Sequence[Report | Mapping[str, Any]] = (),
    ) -> SyncResult:
        """Replace the cached state and every scheduled notification.

        Idempotent: calling again with the same arguments schedules the same batch.

        :param descriptors: Reminder descriptors, types unique.
        :param start_date: Epoch seconds at local midnight of study day 1.
        :param end_date: Epoch seconds at local midnight after the last study day.
        :param reports: Reports filed so far.
        :returns: Result of the sync chain.
        :raises ReminderConfigError: If the input is malformed. Nothing is changed.
        :raises SyncInProgressError: If another sync holds the backend too long.
        :raises BackendError: If a backend call fails. The new state stays cached.
        """
        try:
            state = ReminderState.model_validate(
                {"descriptors": list(descriptors), "start_date": start_date, "end_date": end_date}
            )
        except ValidationError as e:
            raise ReminderConfigError(f"Invalid reminder configuration: {e}") from e
        validated_reports = _validate_reports(state, reports)

        self._session.commit(state, validated_reports)
        logger.info(
            f"Syncing reminders: descriptors={len(state.descriptors)}, "
            f"days={state.duration_days}, reports={len(validated_reports)}"
        )
        return self._orchestrator.run()

    def resync(self) -> SyncResult:
        """Run the sync chain again from the cached snapshot.

        :returns: Result of the sync chain.
        :raises ReminderError: If sync has never been called.
        """
        return self._orchestrator.run()

    def clear(self) -> None:
        """Cancel all notifications without rescheduling."""
        self._orchestrator.clear()

    def list_notifications(self) -> list[NotificationRecord]:
        """List the backend's notifications in firing order."""
        return list_notifications(self._notifications)

    def handle_delivery(self, event: DeliveryEvent) -> int:
        """Queue a delivery event for the reconciler.

        :param event: The delivery event.
        :returns: Number of events dispatched now.
        """
        return self._session.post_event(event)
