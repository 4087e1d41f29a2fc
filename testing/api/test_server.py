"""Tests for the API server entry point."""

import os
import unittest
from unittest.mock import MagicMock, patch

from study_reminders.api.server import main
from study_reminders.paths import PROJECT_ROOT


class TestMain(unittest.TestCase):
    """Tests for main."""

    @patch.dict(os.environ, {"API_HOST": "0.0.0.0", "API_PORT": "9000"})
    @patch("study_reminders.api.server.uvicorn.run")
    @patch("study_reminders.api.server.load_dotenv")
    def test_runs_app_from_environment(
        self, mock_load_dotenv: MagicMock, mock_run: MagicMock
    ) -> None:
        """Test that the env file is loaded and uvicorn serves the app."""
        main()

        mock_load_dotenv.assert_called_once_with(PROJECT_ROOT / ".env")
        mock_run.assert_called_once_with(
            "study_reminders.api.app:app",
            host="0.0.0.0",
            port=9000,
            log_config=None,
        )

    @patch.dict(os.environ, {}, clear=True)
    @patch("study_reminders.api.server.uvicorn.run")
    @patch("study_reminders.api.server.load_dotenv")
    def test_defaults(self, mock_load_dotenv: MagicMock, mock_run: MagicMock) -> None:
        """Test default host and port."""
        main()

        _, kwargs = mock_run.call_args
        self.assertEqual(kwargs["host"], "127.0.0.1")
        self.assertEqual(kwargs["port"], 8000)


if __name__ == "__main__":
    unittest.main()
