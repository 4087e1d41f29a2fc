"""Build the batch of notifications that follows from a reminder state.

The batch replaces everything the notification backend currently holds. Days
whose report is still missing become overdue notifications (negative ids) so
that they show up in the delivery history. Days still to come become future
notifications whose badge snapshot counts the reports due by then.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime

from study_reminders.reminders.calendar import (
    reminder_timestamp,
    seconds_since_midnight,
    study_day,
)
from study_reminders.reminders.models import Notification, ReminderDescriptor, ReminderState

logger = logging.getLogger(__name__)


@dataclass
class _PendingNotification:
    """A notification before ids and badge snapshots are assigned."""

    descriptor: ReminderDescriptor
    day: int
    firing_time: datetime
    overdue: bool


def next_due_day(descriptor: ReminderDescriptor, sday: int, daysec: int) -> int:
    """Get the study day of the next reminder of a descriptor.

    :param descriptor: The reminder descriptor.
    :param sday: Today's study day.
    :param daysec: Seconds since local midnight now.
    :returns: Study day of the first reminder still to fire.
    """
    if sday <= 0:
        # Study hasn't started yet
        return 1
    return sday + 1 if daysec >= descriptor.time_of_day else sday


def _pending_for_descriptor(
    state: ReminderState,
    descriptor: ReminderDescriptor,
    filed: int,
    nnext: int,
) -> list[_PendingNotification]:
    """List the notifications one descriptor contributes to the batch.

    :param state: Reminder state.
    :param descriptor: The descriptor.
    :param filed: Reports already filed for the descriptor's type.
    :param nnext: Study day of the next reminder.
    :returns: Pending notifications in day order.
    """

    def pending(day: int) -> _PendingNotification:
        return _PendingNotification(
            descriptor=descriptor,
            day=day,
            firing_time=reminder_timestamp(state.start_date, day, descriptor.time_of_day),
            overdue=day < nnext,
        )

    duration = state.duration_days
    if descriptor.reminder_only:
        return [pending(day) for day in range(nnext, duration + 1)]

    # Past days with no report yet
    overdue = [pending(day) for day in range(filed + 1, nnext)]
    # Reports filed early already cover their days
    future = [pending(day) for day in range(max(nnext, filed + 1), duration + 1)]
    return overdue + future


def collapse_overdue(batch: list[Notification]) -> list[Notification]:
    """Keep at most one overdue notification, and schedule it last.

    The notification backend re-delivers every triggered notification whenever a
    new one is scheduled, so N pending overdue notifications pile up as 2^N - 1
    entries in the delivery history. Keeping only the most recent overdue entry
    and scheduling it after everything else keeps that to one.

    :param batch: Notifications sorted by firing time.
    :returns: The collapsed batch.
    """
    collapsed = list(batch)
    while len(collapsed) > 1 and collapsed[0].is_overdue and collapsed[1].is_overdue:
        collapsed.pop(0)
    if collapsed and collapsed[0].is_overdue:
        collapsed.append(collapsed.pop(0))
    return collapsed


def build_notifications(
    state: ReminderState,
    reports_for_type: Mapping[str, int],
    app_badge: int,
    now: datetime,
    collapse: bool = True,
    id_base: int = 0,
) -> list[Notification]:
    """Build the notification batch for a reminder state.

    :param state: Reminder state.
    :param reports_for_type: Number of reports filed for each type.
    :param app_badge: The app's correct badge count now.
    :param now: Current local time.
    :param collapse: Collapse overdue notifications, see collapse_overdue.
    :param id_base: Ids are numbered from id_base + 1 in firing order.
    :returns: Notifications in the order they should be scheduled.
    """
    sday = study_day(state, now)
    daysec = seconds_since_midnight(now)

    pending: list[_PendingNotification] = []
    for descriptor in state.descriptors:
        nnext = next_due_day(descriptor, sday, daysec)
        filed = reports_for_type.get(descriptor.type, 0)
        pending.extend(_pending_for_descriptor(state, descriptor, filed, nnext))

    # Stable, so same-time reminders keep descriptor order
    pending.sort(key=lambda item: item.firing_time)

    batch: list[Notification] = []
    badge = app_badge
    for sequence, item in enumerate(pending, start=id_base + 1):
        if not item.overdue and not item.descriptor.reminder_only:
            badge += 1
        batch.append(
            Notification(
                id=-sequence if item.overdue else sequence,
                title=item.descriptor.head_for_day(item.day),
                text=item.descriptor.body_for_day(item.day),
                firing_time=item.firing_time,
                payload_type=item.descriptor.type,
                badge_snapshot=badge,
            )
        )

    overdue_total = sum(1 for notification in batch if notification.is_overdue)
    if collapse:
        batch = collapse_overdue(batch)

    logger.debug(
        f"Built notification batch: study_day={sday}, size={len(batch)}, "
        f"overdue_before_collapse={overdue_total}, starting_badge={app_badge}, "
        f"id_base={id_base}"
    )
    return batch
