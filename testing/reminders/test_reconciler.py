"""Tests for the trigger reconciler."""

import unittest
from datetime import datetime
from unittest.mock import MagicMock

from study_reminders.reminders.exceptions import BackendError
from study_reminders.reminders.models import (
    DeliveryEvent,
    ReconcileOutcome,
    ReminderDescriptor,
    ReminderState,
    SyncPhase,
)
from study_reminders.reminders.orchestrator import SyncOrchestrator
from study_reminders.reminders.reconciler import TriggerReconciler
from study_reminders.reminders.session import ReminderSession


def _state() -> ReminderState:
    return ReminderState(
        descriptors=[
            ReminderDescriptor(type="nausea", time_of_day=28800, heads=["R"], bodies=["B"])
        ],
        start_date=int(datetime(2024, 1, 1).timestamp()),
        end_date=int(datetime(2024, 1, 8).timestamp()),
    )


class TestTriggerReconciler(unittest.TestCase):
    """Tests for TriggerReconciler."""

    def setUp(self) -> None:
        """Set up a reconciler with a mock orchestrator."""
        self.session = ReminderSession()
        self.session.commit(_state(), [])
        self.orchestrator = MagicMock(spec=SyncOrchestrator)
        self.reconciler = TriggerReconciler(self.session, self.orchestrator)

    def test_overdue_event_is_ignored(self) -> None:
        """Test that negative ids never trigger a resync."""
        outcome = self.reconciler.handle(DeliveryEvent(id=-3, payload_type="nausea"))

        self.assertEqual(outcome, ReconcileOutcome.IGNORED_OVERDUE)
        self.orchestrator.run.assert_not_called()
        self.assertNotIn(-3, self.reconciler.handled_ids)

    def test_live_event_resyncs(self) -> None:
        """Test that a fresh delivery resyncs at the orchestrator's current time."""
        outcome = self.reconciler.handle(DeliveryEvent(id=4, payload_type="nausea"))

        self.assertEqual(outcome, ReconcileOutcome.RESYNCED)
        self.orchestrator.run.assert_called_once_with()

    def test_repeat_delivery_is_counted_once(self) -> None:
        """Test that the same id twice resyncs once and counts one repeat."""
        first = self.reconciler.handle(DeliveryEvent(id=4))
        self.assertEqual(self.reconciler.repeat_count(4), 0)

        second = self.reconciler.handle(DeliveryEvent(id=4))

        self.assertEqual(first, ReconcileOutcome.RESYNCED)
        self.assertEqual(second, ReconcileOutcome.DUPLICATE)
        self.assertEqual(self.orchestrator.run.call_count, 1)
        self.assertEqual(self.reconciler.repeat_count(4), 1)

    def test_repeats_keep_counting(self) -> None:
        """Test that every further repeat is counted."""
        for _ in range(4):
            self.reconciler.handle(DeliveryEvent(id=7))

        self.assertEqual(self.reconciler.repeat_count(7), 3)
        self.assertEqual(self.reconciler.handled_ids, frozenset({7}))

    def test_no_snapshot(self) -> None:
        """Test that events before any sync do nothing but are remembered."""
        reconciler = TriggerReconciler(ReminderSession(), self.orchestrator)

        outcome = reconciler.handle(DeliveryEvent(id=1))

        self.assertEqual(outcome, ReconcileOutcome.NO_SNAPSHOT)
        self.orchestrator.run.assert_not_called()
        self.assertEqual(reconciler.handle(DeliveryEvent(id=1)), ReconcileOutcome.DUPLICATE)

    def test_failed_resync_is_reported(self) -> None:
        """Test that a backend failure during resync is logged and reported."""
        self.orchestrator.run.side_effect = BackendError(SyncPhase.SCHEDULING, "boom")

        with self.assertLogs("study_reminders.reminders.reconciler", level="ERROR"):
            outcome = self.reconciler.handle(DeliveryEvent(id=5))

        self.assertEqual(outcome, ReconcileOutcome.RESYNC_FAILED)

    def test_unseen_id_has_no_repeats(self) -> None:
        """Test repeat_count for an id never delivered."""
        self.assertEqual(self.reconciler.repeat_count(99), 0)


if __name__ == "__main__":
    unittest.main()
