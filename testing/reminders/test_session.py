"""Tests for the reminder session."""

import unittest
from datetime import datetime
from unittest.mock import PropertyMock, patch

from study_reminders.reminders.exceptions import SyncInProgressError
from study_reminders.reminders.models import DeliveryEvent, ReminderDescriptor, ReminderState, Report
from study_reminders.reminders.session import ReminderSession


def _state() -> ReminderState:
    return ReminderState(
        descriptors=[
            ReminderDescriptor(type="nausea", time_of_day=28800, heads=["R"], bodies=["B"])
        ],
        start_date=int(datetime(2024, 1, 1).timestamp()),
        end_date=int(datetime(2024, 1, 8).timestamp()),
    )


class TestSnapshot(unittest.TestCase):
    """Tests for snapshot handling."""

    def test_starts_empty(self) -> None:
        """Test that a new session has no snapshot."""
        self.assertIsNone(ReminderSession().snapshot)

    def test_commit_copies_input(self) -> None:
        """Test that later changes to the caller's objects do not leak in."""
        session = ReminderSession()
        state = _state()
        reports = [Report(type="nausea")]

        snapshot = session.commit(state, reports)
        state.descriptors.clear()
        reports.append(Report(type="nausea"))

        self.assertEqual(len(snapshot.state.descriptors), 1)
        self.assertEqual(len(snapshot.reports), 1)

    def test_commit_replaces_snapshot(self) -> None:
        """Test that every commit replaces the snapshot wholesale."""
        session = ReminderSession()
        session.commit(_state(), [Report(type="nausea")])
        session.commit(_state(), [])

        self.assertEqual(session.snapshot.reports, ())


class TestExclusive(unittest.TestCase):
    """Tests for the chain lock."""

    def test_busy_while_held(self) -> None:
        """Test busy reflects the lock."""
        session = ReminderSession()
        with session.exclusive(1.0):
            self.assertTrue(session.busy)
        self.assertFalse(session.busy)

    def test_second_holder_times_out(self) -> None:
        """Test that an overlapping chain is rejected after the timeout."""
        session = ReminderSession()
        with session.exclusive(1.0):
            with self.assertRaises(SyncInProgressError) as context:
                with session.exclusive(0.01):
                    pass
        self.assertEqual(context.exception.timeout_seconds, 0.01)

    def test_released_on_error(self) -> None:
        """Test that the lock is released when the chain raises."""
        session = ReminderSession()
        with self.assertRaises(RuntimeError), session.exclusive(1.0):
            raise RuntimeError("backend down")
        self.assertFalse(session.busy)


class TestEventQueue(unittest.TestCase):
    """Tests for delivery event dispatch."""

    def test_dispatches_to_handlers_in_order(self) -> None:
        """Test that every handler sees each event in registration order."""
        session = ReminderSession()
        seen: list[tuple[str, int]] = []
        session.register_handler(lambda event: seen.append(("first", event.id)))
        session.register_handler(lambda event: seen.append(("second", event.id)))

        dispatched = session.post_event(DeliveryEvent(id=1))

        self.assertEqual(dispatched, 1)
        self.assertEqual(seen, [("first", 1), ("second", 1)])

    def test_events_wait_for_running_chain(self) -> None:
        """Test that events posted during a chain are handled after it."""
        session = ReminderSession()
        seen: list[int] = []
        session.register_handler(lambda event: seen.append(event.id))

        with session.exclusive(1.0):
            self.assertEqual(session.post_event(DeliveryEvent(id=1)), 0)
            self.assertEqual(session.post_event(DeliveryEvent(id=2)), 0)
            self.assertEqual(seen, [])
            self.assertEqual(session.pending_events, 2)

        self.assertEqual(seen, [1, 2])
        self.assertEqual(session.pending_events, 0)

    def test_handler_chain_does_not_reenter_dispatch(self) -> None:
        """Test that a handler running a chain keeps arrival order."""
        session = ReminderSession()
        seen: list[int] = []

        def handler(event: DeliveryEvent) -> None:
            seen.append(event.id)
            if event.id == 1:
                with session.exclusive(1.0):
                    session.post_event(DeliveryEvent(id=3))
                session.post_event(DeliveryEvent(id=4))

        session.register_handler(handler)
        session.post_event(DeliveryEvent(id=1))

        self.assertEqual(seen, [1, 3, 4])

    def test_event_posted_as_chain_starts_is_not_stranded(self) -> None:
        """Test that an event queued while another chain briefly held the lock is handled.

        The lock reads as held exactly once, right after the first event, as if
        another chain ran and released it while dispatch was winding down.
        """
        session = ReminderSession()
        seen: list[int] = []
        checks = iter([False, False, True])

        def handler(event: DeliveryEvent) -> None:
            seen.append(event.id)
            if event.id == 1:
                session.post_event(DeliveryEvent(id=2))

        session.register_handler(handler)
        with patch.object(
            ReminderSession,
            "busy",
            new_callable=PropertyMock,
            side_effect=lambda: next(checks, False),
        ):
            session.post_event(DeliveryEvent(id=1))

        self.assertEqual(seen, [1, 2])
        self.assertEqual(session.pending_events, 0)


class TestIdAllocation(unittest.TestCase):
    """Tests for process-wide notification id allocation."""

    def test_starts_at_zero(self) -> None:
        """Test that no ids are used initially."""
        self.assertEqual(ReminderSession().last_id, 0)

    def test_only_moves_forward(self) -> None:
        """Test that the largest id seen is kept."""
        session = ReminderSession()
        session.advance_ids(7)
        session.advance_ids(3)

        self.assertEqual(session.last_id, 7)


if __name__ == "__main__":
    unittest.main()
