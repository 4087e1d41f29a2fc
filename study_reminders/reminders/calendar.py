"""Calendar arithmetic for study days and reminder times.

All arithmetic goes through local calendar components (year, month, day) rather
than raw epoch truncation, so study days line up with the user's days across
daylight saving changes. Naive datetimes are local wall-clock time.
"""

import logging
import time
from collections.abc import Callable
from datetime import date, datetime, timedelta
from typing import Protocol

from study_reminders.reminders.models import SECONDS_PER_DAY, ReminderState

logger = logging.getLogger(__name__)


def to_local_naive(moment: datetime) -> datetime:
    """Convert a datetime to naive local wall-clock time.

    :param moment: Naive local or timezone-aware datetime.
    :returns: Naive datetime in local time.
    """
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def seconds_since_midnight(now: datetime) -> int:
    """Get how many seconds after local midnight a moment is.

    :param now: The moment to inspect.
    :returns: Seconds in [0, 86399].
    """
    return (now.hour * 60 + now.minute) * 60 + now.second


def local_midnight(moment: datetime) -> datetime:
    """Get the local midnight starting the day of a moment."""
    return datetime(moment.year, moment.month, moment.day, tzinfo=moment.tzinfo)


def study_day(state: ReminderState, moment: datetime) -> int:
    """Get the 1-based study day on which a moment falls.

    Days before the study give 0 or negative values.

    :param state: Reminder state with the study start date.
    :param moment: The moment to locate.
    :returns: Study day index.
    """
    midnight = int(local_midnight(moment).timestamp())
    return 1 + round((midnight - state.start_date) / SECONDS_PER_DAY)


def reminder_timestamp(start_date: int, day: int, time_of_day: int) -> datetime:
    """Get the firing time of a reminder on a study day.

    :param start_date: Epoch seconds at local midnight of study day 1.
    :param day: Study day (1, 2, ...).
    :param time_of_day: Seconds after local midnight.
    :returns: Naive local datetime of the reminder.
    """
    start = datetime.fromtimestamp(start_date)
    target = date(start.year, start.month, start.day) + timedelta(days=day - 1)
    hours, remainder = divmod(time_of_day, 3600)
    minutes, seconds = divmod(remainder, 60)
    return datetime(target.year, target.month, target.day, hours, minutes, seconds)


class Clock(Protocol):
    """Source of the current local time."""

    def now(self) -> datetime:
        """Get the current time as a naive local datetime."""
        ...


class SystemClock:
    """Real local wall-clock time."""

    def now(self) -> datetime:
        """Get the current local time."""
        return datetime.now()


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, current: datetime) -> None:
        """Initialise the clock.

        :param current: The time to report.
        """
        self._current = to_local_naive(current)

    def now(self) -> datetime:
        """Get the fixed time."""
        return self._current

    def set(self, current: datetime) -> None:
        """Move the clock to a new time."""
        self._current = to_local_naive(current)

    def advance(self, delta: timedelta) -> None:
        """Move the clock forward by a delta."""
        self._current += delta


class AcceleratedClock:
    """A fictional timeline that elapses faster than real time.

    Starts at ``origin`` when created and advances ``factor`` seconds for every
    real second, so a multi-day study can be walked through in minutes.
    """

    def __init__(
        self,
        origin: datetime,
        factor: float,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialise the clock.

        :param origin: Fictional time at creation.
        :param factor: How many times faster than real time to run.
        :param monotonic: Real elapsed-time source.
        :raises ValueError: If factor is below 1.
        """
        if factor < 1:
            raise ValueError(f"Acceleration factor must be at least 1, got {factor}")
        self._origin = to_local_naive(origin)
        self._factor = factor
        self._monotonic = monotonic
        self._started = monotonic()
        logger.info(f"Accelerated clock started: origin={self._origin}, factor={factor}")

    def now(self) -> datetime:
        """Get the current fictional time."""
        elapsed = (self._monotonic() - self._started) * self._factor
        return self._origin + timedelta(seconds=elapsed)
