"""React to notifications firing while the process is live."""

from __future__ import annotations

import logging

from study_reminders.reminders.exceptions import ReminderError
from study_reminders.reminders.models import DeliveryEvent, ReconcileOutcome
from study_reminders.reminders.orchestrator import SyncOrchestrator
from study_reminders.reminders.session import ReminderSession

logger = logging.getLogger(__name__)


class TriggerReconciler:
    """Resyncs when a live reminder fires, since that changes the badge.

    The backend fires trigger events more than once for the same notification,
    so each id is handled only once; repeats are counted.
    """

    def __init__(
        self,
        session: ReminderSession,
        orchestrator: SyncOrchestrator,
    ) -> None:
        """Initialise the reconciler.

        :param session: Session holding the snapshot.
        :param orchestrator: Orchestrator used to resync at its clock's time.
        """
        self._session = session
        self._orchestrator = orchestrator
        self._repeats: dict[int, int] = {}

    @property
    def handled_ids(self) -> frozenset[int]:
        """Ids handled at least once."""
        return frozenset(self._repeats)

    def repeat_count(self, notification_id: int) -> int:
        """Get how many times a handled id was delivered again.

        :param notification_id: Notification id.
        :returns: Number of repeat deliveries, 0 if never repeated or never seen.
        """
        return self._repeats.get(notification_id, 0)

    def handle(self, event: DeliveryEvent) -> ReconcileOutcome:
        """Handle a delivery event.

        :param event: The delivery event.
        :returns: What was done about it.
        """
        # Overdue entries fire as soon as they are scheduled and carry no news
        if event.id < 0:
            return ReconcileOutcome.IGNORED_OVERDUE

        if event.id in self._repeats:
            self._repeats[event.id] += 1
            logger.debug(
                f"Ignoring repeat delivery: id={event.id}, repeats={self._repeats[event.id]}"
            )
            return ReconcileOutcome.DUPLICATE
        self._repeats[event.id] = 0

        if self._session.snapshot is None:
            logger.debug(f"Delivery before any sync: id={event.id}")
            return ReconcileOutcome.NO_SNAPSHOT

        logger.info(f"Reminder delivered, resyncing: id={event.id}, type={event.payload_type}")
        try:
            self._orchestrator.run()
        except ReminderError as e:
            # The next sync recomputes everything from the snapshot
            logger.exception(f"Resync after delivery failed: id={event.id}: {e}")
            return ReconcileOutcome.RESYNC_FAILED
        return ReconcileOutcome.RESYNCED
