"""Tests for reminders API token checks."""

import os
import unittest
from unittest.mock import patch

from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from study_reminders.api.dependencies import get_api_token, verify_token


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestGetApiToken(unittest.TestCase):
    """Tests for get_api_token."""

    @patch.dict(os.environ, {"API_AUTH_TOKEN": "reminders-token"})
    def test_reads_configured_token(self) -> None:
        """Test that the token comes from API_AUTH_TOKEN."""
        self.assertEqual(get_api_token(), "reminders-token")

    @patch.dict(os.environ, {"API_AUTH_TOKEN": "  reminders-token\n"})
    def test_strips_whitespace(self) -> None:
        """Test that stray whitespace from the env file is ignored."""
        self.assertEqual(get_api_token(), "reminders-token")

    @patch.dict(os.environ, {}, clear=True)
    def test_unset_token_is_an_error(self) -> None:
        """Test that a missing token names the variable to set."""
        with self.assertRaises(ValueError) as context:
            get_api_token()
        self.assertIn("API_AUTH_TOKEN", str(context.exception))

    @patch.dict(os.environ, {"API_AUTH_TOKEN": "   "})
    def test_blank_token_is_an_error(self) -> None:
        """Test that a blank token counts as unset."""
        with self.assertRaises(ValueError):
            get_api_token()


class TestVerifyToken(unittest.TestCase):
    """Tests for verify_token."""

    @patch.dict(os.environ, {"API_AUTH_TOKEN": "reminders-token"})
    def test_matching_token_is_accepted(self) -> None:
        """Test that the configured token passes."""
        self.assertEqual(verify_token(_bearer("reminders-token")), "reminders-token")

    @patch.dict(os.environ, {"API_AUTH_TOKEN": "reminders-token"})
    def test_wrong_token_is_unauthorised(self) -> None:
        """Test that a different token is rejected with a Bearer challenge."""
        with self.assertRaises(HTTPException) as context:
            verify_token(_bearer("someone-else"))

        self.assertEqual(context.exception.status_code, 401)
        self.assertEqual(context.exception.headers, {"WWW-Authenticate": "Bearer"})

    @patch.dict(os.environ, {}, clear=True)
    def test_unconfigured_server_fails_closed(self) -> None:
        """Test that requests fail with 500 when no token is configured."""
        with (
            self.assertLogs("study_reminders.api.dependencies", level="ERROR"),
            self.assertRaises(HTTPException) as context,
        ):
            verify_token(_bearer("any-token"))

        self.assertEqual(context.exception.status_code, 500)


if __name__ == "__main__":
    unittest.main()
