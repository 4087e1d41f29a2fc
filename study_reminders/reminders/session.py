"""Process-wide reminder session: cached snapshot, chain lock and event queue."""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from study_reminders.reminders.exceptions import SyncInProgressError
from study_reminders.reminders.models import DeliveryEvent, ReminderState, Report

logger = logging.getLogger(__name__)

DeliveryHandler = Callable[[DeliveryEvent], object]


@dataclass(frozen=True)
class ReminderSnapshot:
    """The last reminder state and reports handed to sync."""

    state: ReminderState
    reports: tuple[Report, ...]


class ReminderSession:
    """Owns everything the orchestrator and reconciler share.

    - The snapshot is replaced wholesale on every sync, before any backend call.
    - Backend chains (sync and clear) run one at a time under ``exclusive()``.
    - Delivery events are queued and dispatched to handlers in arrival order,
      never while a chain holds the lock.
    """

    def __init__(self) -> None:
        """Initialise an empty session."""
        self._snapshot: ReminderSnapshot | None = None
        self._lock = threading.Lock()
        self._events: deque[DeliveryEvent] = deque()
        self._handlers: list[DeliveryHandler] = []
        self._dispatching = False
        self._last_id = 0

    @property
    def snapshot(self) -> ReminderSnapshot | None:
        """The cached snapshot, if sync has been called."""
        return self._snapshot

    @property
    def busy(self) -> bool:
        """Whether a backend chain is running."""
        return self._lock.locked()

    @property
    def pending_events(self) -> int:
        """Number of queued delivery events."""
        return len(self._events)

    @property
    def last_id(self) -> int:
        """Largest notification id magnitude handed out so far."""
        return self._last_id

    def advance_ids(self, last_id: int) -> None:
        """Record the largest id magnitude used by a scheduled batch.

        Later batches number from above it, so an id is never reused while the
        process lives.

        :param last_id: Largest absolute id in the batch.
        """
        self._last_id = max(self._last_id, last_id)

    def commit(self, state: ReminderState, reports: list[Report]) -> ReminderSnapshot:
        """Replace the cached snapshot.

        :param state: Validated reminder state.
        :param reports: Validated reports.
        :returns: The new snapshot.
        """
        self._snapshot = ReminderSnapshot(
            state=state.model_copy(deep=True),
            reports=tuple(report.model_copy(deep=True) for report in reports),
        )
        logger.debug(
            f"Committed reminder snapshot: descriptors={len(state.descriptors)}, "
            f"reports={len(reports)}"
        )
        return self._snapshot

    @contextmanager
    def exclusive(self, timeout_seconds: float) -> Iterator[None]:
        """Hold the chain lock, waiting up to a timeout for a running chain.

        Delivery events queued meanwhile are dispatched after the chain completes.

        :param timeout_seconds: Seconds to wait for the lock.
        :raises SyncInProgressError: If the lock could not be acquired.
        """
        if not self._lock.acquire(timeout=timeout_seconds):
            raise SyncInProgressError(timeout_seconds)
        try:
            yield
        finally:
            self._lock.release()
        self.dispatch_pending()

    def register_handler(self, handler: DeliveryHandler) -> None:
        """Register a delivery event handler.

        :param handler: Called with each event, in registration order.
        """
        self._handlers.append(handler)

    def post_event(self, event: DeliveryEvent) -> int:
        """Queue a delivery event and dispatch if nothing is running.

        :param event: The delivery event.
        :returns: Number of events dispatched by this call.
        """
        self._events.append(event)
        return self.dispatch_pending()

    def dispatch_pending(self) -> int:
        """Dispatch queued events to the handlers.

        Does nothing while a chain holds the lock or while an outer call is
        already dispatching; that caller drains the queue.

        :returns: Number of events dispatched.
        """
        dispatched = 0
        # Re-checked after each pass: a chain may have released the lock while
        # this call was still marked as dispatching
        while self._events and not (self._dispatching or self.busy):
            self._dispatching = True
            try:
                while self._events and not self.busy:
                    event = self._events.popleft()
                    for handler in self._handlers:
                        handler(event)
                    dispatched += 1
            finally:
                self._dispatching = False
        return dispatched
