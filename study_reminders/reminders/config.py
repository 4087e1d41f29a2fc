"""Configuration for reminder scheduling using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from study_reminders.paths import PROJECT_ROOT

_ENV_FILE = PROJECT_ROOT / ".env"


class ReminderConfig(BaseSettings):
    """Configuration for reminder scheduling.

    All settings are loaded from environment variables with the REMINDERS_ prefix.

    :param sync_lock_timeout_seconds: Seconds a sync or clear waits for a running
        chain before giving up.
    :param collapse_overdue: Collapse pending overdue notifications to one.
    :param clock_acceleration: Speed-up factor for the fictional test timeline.
        1.0 means real time.
    """

    model_config = SettingsConfigDict(
        env_prefix="REMINDERS_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    sync_lock_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=600,
        description="Seconds to wait for a running sync before failing",
    )
    collapse_overdue: bool = Field(
        default=True,
        description="Keep at most one overdue notification, scheduled last",
    )
    clock_acceleration: float = Field(
        default=1.0,
        ge=1.0,
        description="How many times faster than real time the clock runs",
    )


@lru_cache
def get_reminder_settings() -> ReminderConfig:
    """Get cached reminder settings.

    Settings are loaded once and cached for the lifetime of the process.

    :returns: Configured ReminderConfig instance.
    """
    return ReminderConfig()
