"""Health check endpoints."""

import logging

from fastapi import APIRouter, Depends

from study_reminders import __version__
from study_reminders.api.health.models import HealthResponse
from study_reminders.api.reminders.dependencies import get_reminder_service
from study_reminders.reminders.service import ReminderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "",
    response_model=HealthResponse,
    summary="Check service health",
    description="Returns the health status of the API service.",
)
def health_check(service: ReminderService = Depends(get_reminder_service)) -> HealthResponse:
    """Check if the API service is healthy.

    :returns: Health status response.
    """
    logger.debug("Health check requested")
    return HealthResponse(
        status="healthy",
        version=__version__,
        sync_running=service.session.busy,
        has_snapshot=service.session.snapshot is not None,
    )
