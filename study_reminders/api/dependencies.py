"""Bearer-token authentication for the reminders API."""

import logging
import os

from fastapi import HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer()


def get_api_token() -> str:
    """Read the token reminder clients must present.

    Surrounding whitespace from the env file is ignored.

    :returns: The configured API token.
    :raises ValueError: If API_AUTH_TOKEN is unset or blank.
    """
    token = os.environ.get("API_AUTH_TOKEN", "").strip()
    if not token:
        raise ValueError("Reminders API token is not configured. Set API_AUTH_TOKEN.")
    return token


def verify_token(
    credentials: HTTPAuthorizationCredentials = Security(bearer_scheme),
) -> str:
    """Reject reminder requests that do not carry the configured token.

    :param credentials: Bearer credentials from the Authorization header.
    :returns: The accepted token.
    :raises HTTPException: 500 if no token is configured, 401 if it does not match.
    """
    try:
        expected_token = get_api_token()
    except ValueError as e:
        logger.error(f"Reminders API auth misconfigured: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API authentication not configured",
        ) from e

    if credentials.credentials != expected_token:
        logger.warning("Rejected reminders API request with a wrong token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return credentials.credentials
