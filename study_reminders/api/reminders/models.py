"""Pydantic models for reminders API endpoints."""

from pydantic import BaseModel, Field

from study_reminders.reminders.models import NotificationRecord, ReminderDescriptor, Report


class SyncRequest(BaseModel):
    """Request model for syncing reminders."""

    descriptors: list[ReminderDescriptor] = Field(..., description="Reminder descriptors")
    start_date: int = Field(..., description="Local midnight of study day 1 (epoch seconds)")
    end_date: int = Field(
        ...,
        description="Local midnight of the day after the last study day (epoch seconds)",
    )
    reports: list[Report] = Field(default_factory=list, description="Reports filed so far")


class ClearResponse(BaseModel):
    """Response model for clearing reminders."""

    cleared: bool = Field(..., description="Whether all notifications were cancelled")


class ListNotificationsResponse(BaseModel):
    """Response model for listing notifications."""

    results: list[NotificationRecord] = Field(..., description="Notifications in firing order")
    total: int = Field(..., description="Number of notifications")


class DeliveryEventResponse(BaseModel):
    """Response model for a posted delivery event."""

    id: int = Field(..., description="Notification id of the event")
    dispatched: int = Field(..., description="Events dispatched to the reconciler by this call")
    repeat_count: int = Field(..., description="Repeat deliveries seen for this id")


class DeliverResponse(BaseModel):
    """Response model for delivering due notifications."""

    delivered: list[int] = Field(..., description="Ids of notifications delivered")
    badge: int = Field(..., description="Badge count after reconciling")
