"""FastAPI application configuration."""

import logging

from fastapi import Depends, FastAPI

from study_reminders import __version__
from study_reminders.api.dependencies import verify_token
from study_reminders.api.health.endpoints import router as health_router
from study_reminders.api.models import ErrorResponse
from study_reminders.api.reminders.endpoints import router as reminders_router
from study_reminders.observability.sentry import init_sentry
from study_reminders.utils.logging import configure_logging

configure_logging()
init_sentry()

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    :returns: Configured FastAPI application instance.
    """
    application = FastAPI(
        title="Study Reminders API",
        version=__version__,
        responses={
            401: {"model": ErrorResponse, "description": "Unauthorised"},
            500: {"model": ErrorResponse, "description": "Internal server error"},
        },
    )

    # Register routers
    application.include_router(health_router)
    application.include_router(reminders_router, dependencies=[Depends(verify_token)])

    logger.info("FastAPI application created")

    return application


# Application instance for uvicorn
app = create_app()
