"""Core identity resolution: who is calling, if anyone."""

import logging

from fastapi import Request
from pydantic import ValidationError as PydanticValidationError

from eduspark.auth.exceptions import AuthenticationError
from eduspark.auth.schemas import CurrentUser
from eduspark.auth.security import decode_session_token
from eduspark.config.settings import get_settings


logger = logging.getLogger(__name__)


def _extract_token_from_request(request: Request) -> str | None:
    """Extract the session token from the cookie, or a Bearer header for API clients."""
    cookie_token = request.cookies.get(get_settings().SESSION_COOKIE_NAME)
    if cookie_token:
        return cookie_token

    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header.removeprefix("Bearer ")

    return None


async def get_current_user(request: Request) -> CurrentUser | None:
    """Return the caller's identity, or None for anonymous requests.

    Expired and tampered tokens are treated as anonymous; routes that need a
    user turn None into a 401 through ``CurrentAuth``.
    """
    token = _extract_token_from_request(request)
    if not token:
        return None

    try:
        payload = decode_session_token(token)
        return CurrentUser.model_validate(payload)
    except AuthenticationError as e:
        logger.debug(f"Ignoring session token: {e.detail}")
        return None
    except PydanticValidationError:
        logger.warning("Session token payload failed validation")
        return None
