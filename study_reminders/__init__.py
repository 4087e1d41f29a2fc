"""Notification scheduling and badge tracking for study reminders."""

__version__ = "0.1.0"
