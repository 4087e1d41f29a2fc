"""Run the reminders API with uvicorn."""

import os

import uvicorn
from dotenv import load_dotenv

from study_reminders.paths import PROJECT_ROOT

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


def main() -> None:
    """Entry point for running the reminders API."""
    load_dotenv(PROJECT_ROOT / ".env")
    uvicorn.run(
        "study_reminders.api.app:app",
        host=os.environ.get("API_HOST", DEFAULT_HOST),
        port=int(os.environ.get("API_PORT", DEFAULT_PORT)),
        log_config=None,
    )


if __name__ == "__main__":
    main()
