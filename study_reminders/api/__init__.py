"""HTTP API for study reminder scheduling."""

from study_reminders.api.app import app

__all__ = ["app"]
