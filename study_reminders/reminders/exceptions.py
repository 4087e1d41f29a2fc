"""Custom exceptions for reminder scheduling."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from study_reminders.reminders.models import SyncPhase


class ReminderError(Exception):
    """Base exception for reminder scheduling errors."""


class ReminderConfigError(ReminderError):
    """Raised when descriptors, study dates or reports are malformed.

    Always raised before any backend call, so the scheduled set is untouched.
    """


class SyncInProgressError(ReminderError):
    """Raised when another sync or clear holds the backend for too long."""

    def __init__(self, timeout_seconds: float) -> None:
        """Initialise SyncInProgressError.

        :param timeout_seconds: How long the caller waited for the lock.
        """
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Another reminder sync is still running after {timeout_seconds}s")


class BackendError(ReminderError):
    """Raised when a notification or badge backend call fails mid-chain."""

    def __init__(self, phase: SyncPhase, error: str) -> None:
        """Initialise BackendError.

        :param phase: The chain phase that failed.
        :param error: Error message from the backend.
        """
        self.phase = phase
        self.error = error
        super().__init__(f"Reminder backend failed while {phase.value}: {error}")
