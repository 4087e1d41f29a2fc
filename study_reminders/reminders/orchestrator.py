"""Replace the scheduled notifications and the badge from the cached snapshot."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from study_reminders.reminders.backends.base import BadgeBackend, NotificationBackend
from study_reminders.reminders.builder import build_notifications
from study_reminders.reminders.calendar import (
    Clock,
    SystemClock,
    seconds_since_midnight,
    study_day,
    to_local_naive,
)
from study_reminders.reminders.config import ReminderConfig, get_reminder_settings
from study_reminders.reminders.exceptions import BackendError, ReminderError
from study_reminders.reminders.models import ReminderState, Report, SyncPhase, SyncResult
from study_reminders.reminders.session import ReminderSession

logger = logging.getLogger(__name__)


def count_reports(state: ReminderState, reports: Iterable[Report]) -> dict[str, int]:
    """Count filed reports for each type.

    Every descriptor type starts at zero.

    :param state: Reminder state.
    :param reports: Reports filed so far.
    :returns: Mapping of type to number of reports.
    """
    counts = {descriptor.type: 0 for descriptor in state.descriptors}
    for report in reports:
        counts[report.type] = counts.get(report.type, 0) + 1
    return counts


def compute_badge(state: ReminderState, reports_for_type: dict[str, int], now: datetime) -> int:
    """Compute the correct badge: reports due so far that have not been filed.

    :param state: Reminder state.
    :param reports_for_type: Number of reports filed for each type.
    :param now: Current local time.
    :returns: Outstanding report count.
    """
    sday = study_day(state, now)
    daysec = seconds_since_midnight(now)

    badge = 0
    for descriptor in state.descriptors:
        if descriptor.reminder_only:
            continue
        due = sday - (0 if daysec >= descriptor.time_of_day else 1)
        badge += max(0, due - reports_for_type.get(descriptor.type, 0))
    return badge


class SyncOrchestrator:
    """Runs the cancel / schedule / publish chain against the backends.

    Each run is a full replace computed from the session snapshot, never an
    incremental diff, so a failed run is fixed by running again. The snapshot
    and the time are read only once the chain lock is held, so the last
    snapshot committed is the one that ends up on the backend.
    """

    def __init__(
        self,
        session: ReminderSession,
        notifications: NotificationBackend,
        badge: BadgeBackend,
        settings: ReminderConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialise the orchestrator.

        :param session: Session holding the snapshot and the chain lock.
        :param notifications: Notification backend.
        :param badge: Badge backend.
        :param settings: Reminder settings. If not provided, loads from env.
        :param clock: Source of the current local time. Defaults to real time.
        """
        self._session = session
        self._notifications = notifications
        self._badge = badge
        self._settings = settings or get_reminder_settings()
        self._clock = clock or SystemClock()
        self._phase = SyncPhase.IDLE

    @property
    def phase(self) -> SyncPhase:
        """Phase reached by the current or last chain."""
        return self._phase

    def run(self, now: datetime | None = None) -> SyncResult:
        """Resync notifications and badge from the cached snapshot.

        :param now: Current local time. If not provided, read from the clock
            once the chain lock is held.
        :returns: Result of the chain.
        :raises ReminderError: If nothing has been synced yet.
        :raises SyncInProgressError: If another chain holds the lock too long.
        :raises BackendError: If a backend call fails.
        """
        with self._session.exclusive(self._settings.sync_lock_timeout_seconds):
            snapshot = self._session.snapshot
            if snapshot is None:
                raise ReminderError("No reminder state has been synced yet")

            now = to_local_naive(now if now is not None else self._clock.now())
            state = snapshot.state
            reports_for_type = count_reports(state, snapshot.reports)
            app_badge = compute_badge(state, reports_for_type, now)
            batch = build_notifications(
                state,
                reports_for_type,
                app_badge,
                now,
                collapse=self._settings.collapse_overdue,
                id_base=self._session.last_id,
            )
            self._session.advance_ids(max((abs(n.id) for n in batch), default=0))

            try:
                self._phase = SyncPhase.CANCELLING
                self._notifications.cancel_all()

                self._phase = SyncPhase.SCHEDULING
                self._notifications.schedule(batch)

                self._phase = SyncPhase.PUBLISHING_BADGE
                self._badge.set(app_badge)
            except Exception as e:
                failed_phase = self._phase
                self._phase = SyncPhase.FAILED
                logger.exception(f"Reminder sync failed while {failed_phase.value}: {e}")
                raise BackendError(failed_phase, str(e)) from e

            self._phase = SyncPhase.DONE

        result = SyncResult(
            badge=app_badge,
            scheduled=len(batch),
            overdue=sum(1 for notification in batch if notification.is_overdue),
            phase=SyncPhase.DONE,
        )
        logger.info(
            f"Reminder sync complete: badge={result.badge}, "
            f"scheduled={result.scheduled}, overdue={result.overdue}"
        )
        return result

    def clear(self) -> None:
        """Cancel every notification without rescheduling.

        :raises SyncInProgressError: If another chain holds the lock too long.
        :raises BackendError: If the backend call fails.
        """
        with self._session.exclusive(self._settings.sync_lock_timeout_seconds):
            try:
                self._phase = SyncPhase.CANCELLING
                self._notifications.cancel_all()
            except Exception as e:
                self._phase = SyncPhase.FAILED
                logger.exception(f"Clearing reminders failed: {e}")
                raise BackendError(SyncPhase.CANCELLING, str(e)) from e
            self._phase = SyncPhase.DONE
        logger.info("Cleared all reminder notifications")
