"""Pydantic models for health check endpoints."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str = Field(..., description="Service health status")
    version: str = Field(..., description="Application version")
    sync_running: bool = Field(..., description="Whether a reminder sync is in progress")
    has_snapshot: bool = Field(..., description="Whether reminders have been synced")
