"""Pydantic models for reminder configuration, reports and notifications."""

from datetime import datetime
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

SECONDS_PER_DAY = 86400


class DeliveryState(StrEnum):
    """Delivery state of a notification held by the backend."""

    SCHEDULED = "scheduled"  # Never delivered
    TRIGGERED = "triggered"  # Delivered at least once


class SyncPhase(StrEnum):
    """Phases of the cancel / schedule / publish chain."""

    IDLE = "idle"
    CANCELLING = "cancelling"
    SCHEDULING = "scheduling"
    PUBLISHING_BADGE = "publishing_badge"
    DONE = "done"
    FAILED = "failed"


class ReconcileOutcome(StrEnum):
    """What the reconciler did with a delivery event."""

    IGNORED_OVERDUE = "ignored_overdue"
    DUPLICATE = "duplicate"
    RESYNCED = "resynced"
    NO_SNAPSHOT = "no_snapshot"
    RESYNC_FAILED = "resync_failed"


class ReminderDescriptor(BaseModel):
    """One kind of daily reminder.

    For a reportable reminder ``type`` is also the type of the report the user
    is asked to file. A reminder-only descriptor just displays a notification.
    ``heads`` and ``bodies`` of length 1 give the same text every day, otherwise
    they hold one entry per study day.
    """

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., min_length=1, description="Reminder type, also the report type")
    reminder_only: bool = Field(default=False, description="No report is associated")
    time_of_day: int = Field(
        ...,
        ge=0,
        lt=SECONDS_PER_DAY,
        description="Seconds after local midnight",
    )
    heads: list[str] = Field(..., min_length=1, description="Notification titles per day")
    bodies: list[str] = Field(..., min_length=1, description="Notification texts per day")

    def head_for_day(self, day: int) -> str:
        """Get the title for a study day, reusing the last entry when short."""
        return self.heads[min(day, len(self.heads)) - 1]

    def body_for_day(self, day: int) -> str:
        """Get the text for a study day, reusing the last entry when short."""
        return self.bodies[min(day, len(self.bodies)) - 1]


class ReminderState(BaseModel):
    """The reminder configuration of one study.

    :param descriptors: Reminders of the study, types unique.
    :param start_date: Epoch seconds at local midnight of study day 1.
    :param end_date: Epoch seconds at local midnight of the day after the last day.
    """

    descriptors: list[ReminderDescriptor] = Field(default_factory=list)
    start_date: int = Field(..., description="Local midnight of study day 1 (epoch seconds)")
    end_date: int = Field(..., description="Local midnight after the last day (epoch seconds)")

    @property
    def duration_days(self) -> int:
        """Number of study days."""
        return round((self.end_date - self.start_date) / SECONDS_PER_DAY)

    @property
    def descriptors_by_type(self) -> dict[str, ReminderDescriptor]:
        """Descriptors keyed by type."""
        return {descriptor.type: descriptor for descriptor in self.descriptors}

    @model_validator(mode="after")
    def validate_configuration(self) -> Self:
        """Check date order, type uniqueness and per-day text coverage.

        :returns: The validated state.
        :raises ValueError: If the configuration is inconsistent.
        """
        if self.start_date >= self.end_date:
            raise ValueError(
                f"start_date must be before end_date: start={self.start_date}, end={self.end_date}"
            )

        seen: set[str] = set()
        for descriptor in self.descriptors:
            if descriptor.type in seen:
                raise ValueError(f"Duplicate reminder type: {descriptor.type!r}")
            seen.add(descriptor.type)

            for name, texts in (("heads", descriptor.heads), ("bodies", descriptor.bodies)):
                if 1 < len(texts) < self.duration_days:
                    raise ValueError(
                        f"Reminder {descriptor.type!r} has {len(texts)} {name} "
                        f"for a {self.duration_days}-day study"
                    )
        return self


class Report(BaseModel):
    """A report filed by the user. Only ``type`` is interpreted."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., min_length=1, description="Report type")


class Notification(BaseModel):
    """A local notification in a scheduled batch.

    A negative id marks a notification whose day had already passed without a
    report when the batch was built.
    """

    id: int = Field(..., description="Batch-unique id, negative when overdue")
    title: str = Field(..., description="Notification title")
    text: str = Field(..., description="Notification body")
    firing_time: datetime = Field(..., description="When the notification fires")
    payload_type: str = Field(..., description="Type of the originating reminder")
    badge_snapshot: int = Field(..., ge=0, description="Badge shown when it fires")

    @property
    def is_overdue(self) -> bool:
        """Whether the notification was overdue when built."""
        return self.id < 0


class NotificationRecord(Notification):
    """A notification held by the backend with its delivery state."""

    delivery_state: DeliveryState = Field(..., description="Scheduled or triggered")


class DeliveryEvent(BaseModel):
    """A notification fired while the process was live."""

    id: int = Field(..., description="Id of the fired notification")
    payload_type: str | None = Field(None, description="Type of the originating reminder")


class SyncResult(BaseModel):
    """Result of one sync chain."""

    badge: int = Field(..., ge=0, description="Badge count published")
    scheduled: int = Field(default=0, ge=0, description="Notifications scheduled")
    overdue: int = Field(default=0, ge=0, description="Overdue notifications scheduled")
    phase: SyncPhase = Field(default=SyncPhase.DONE, description="Final chain phase")
