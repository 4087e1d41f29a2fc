"""API endpoints for scheduling study reminders."""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, status

from study_reminders.api.reminders.dependencies import (
    get_badge_backend,
    get_notification_backend,
    get_reminder_service,
)
from study_reminders.api.reminders.models import (
    ClearResponse,
    DeliverResponse,
    DeliveryEventResponse,
    ListNotificationsResponse,
    SyncRequest,
)
from study_reminders.reminders.backends import InMemoryBadgeBackend, InMemoryNotificationBackend
from study_reminders.reminders.exceptions import (
    BackendError,
    ReminderConfigError,
    ReminderError,
    SyncInProgressError,
)
from study_reminders.reminders.models import DeliveryEvent, SyncResult
from study_reminders.reminders.service import ReminderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reminders", tags=["Reminders"])


def _to_http_error(error: ReminderError) -> HTTPException:
    """Map a reminder error to an HTTP error.

    :param error: The reminder error.
    :returns: HTTPException with a matching status code.
    """
    if isinstance(error, ReminderConfigError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(error, SyncInProgressError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, BackendError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(error))


@router.post(
    "/sync",
    response_model=SyncResult,
    summary="Sync reminders",
)
def sync_reminders(
    request: SyncRequest,
    service: ReminderService = Depends(get_reminder_service),
) -> SyncResult:
    """Replace all scheduled notifications and the badge.

    Call whenever reminders or reports change. The whole notification set is
    recomputed, so repeating a call is safe.
    """
    start = time.perf_counter()
    logger.info(
        f"Sync reminders: descriptors={len(request.descriptors)}, reports={len(request.reports)}"
    )

    try:
        result = service.sync(
            request.descriptors,
            request.start_date,
            request.end_date,
            request.reports,
        )
    except ReminderError as e:
        logger.warning(f"Sync reminders failed: {e}")
        raise _to_http_error(e) from e

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        f"Sync reminders complete: badge={result.badge}, "
        f"scheduled={result.scheduled}, elapsed={elapsed_ms:.0f}ms"
    )
    return result


@router.post(
    "/clear",
    response_model=ClearResponse,
    summary="Clear reminders",
)
def clear_reminders(
    service: ReminderService = Depends(get_reminder_service),
) -> ClearResponse:
    """Cancel all notifications without rescheduling."""
    try:
        service.clear()
    except ReminderError as e:
        logger.warning(f"Clear reminders failed: {e}")
        raise _to_http_error(e) from e
    return ClearResponse(cleared=True)


@router.get(
    "",
    response_model=ListNotificationsResponse,
    summary="List notifications",
)
def list_reminders(
    service: ReminderService = Depends(get_reminder_service),
) -> ListNotificationsResponse:
    """List scheduled and delivered notifications in firing order."""
    results = service.list_notifications()
    return ListNotificationsResponse(results=results, total=len(results))


@router.post(
    "/events",
    response_model=DeliveryEventResponse,
    summary="Report a delivery event",
)
def post_delivery_event(
    event: DeliveryEvent,
    service: ReminderService = Depends(get_reminder_service),
) -> DeliveryEventResponse:
    """Report that a notification fired while the app was live."""
    logger.info(f"Delivery event: id={event.id}, type={event.payload_type}")
    dispatched = service.handle_delivery(event)
    return DeliveryEventResponse(
        id=event.id,
        dispatched=dispatched,
        repeat_count=service.reconciler.repeat_count(event.id),
    )


@router.post(
    "/deliver",
    response_model=DeliverResponse,
    summary="Deliver due notifications",
)
def deliver_due(
    service: ReminderService = Depends(get_reminder_service),
    notifications: InMemoryNotificationBackend = Depends(get_notification_backend),
    badge: InMemoryBadgeBackend = Depends(get_badge_backend),
) -> DeliverResponse:
    """Deliver every notification whose firing time has passed.

    Lets the in-memory backend stand in for a device while testing.
    """
    if service.session.busy:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A reminder sync is in progress",
        )
    delivered = notifications.deliver_due(service.clock.now())
    return DeliverResponse(delivered=[n.id for n in delivered], badge=badge.count)
