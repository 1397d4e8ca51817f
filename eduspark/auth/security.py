"""Security primitives for local auth (password hashing + signed session cookie)."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from pwdlib import PasswordHash
from pwdlib.hashers.argon2 import Argon2Hasher

from eduspark.auth.exceptions import InvalidTokenError, TokenExpiredError
from eduspark.config.settings import get_settings


password_hash = PasswordHash((Argon2Hasher(),))
ALGORITHM = "HS256"

# Claims copied from the user row into the session cookie
SESSION_CLAIMS = ("id", "name", "email", "role", "avatar_url")


def create_session_token(user: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Create a signed JWT carrying the public user fields."""
    settings = get_settings()
    now = datetime.now(UTC)
    expire = now + (expires_delta or timedelta(hours=settings.SESSION_TTL_HOURS))
    to_encode: dict[str, Any] = {key: user.get(key) for key in SESSION_CLAIMS}
    to_encode.update({"exp": expire, "iat": now, "sub": str(user["id"])})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_session_token(token: str) -> dict[str, Any]:
    """Verify a session token and return its claims.

    Raises
    ------
        TokenExpiredError: The token's ``exp`` is in the past.
        InvalidTokenError: Bad signature or malformed payload.
    """
    try:
        payload = jwt.decode(token, get_settings().SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError from exc

    if not payload.get("id") or payload.get("role") not in ("student", "teacher"):
        raise InvalidTokenError
    return payload


def verify_password(plain: str, hashed: str) -> tuple[bool, str | None]:
    """Verify password and return (verified, updated_hash_if_any)."""
    return password_hash.verify_and_update(plain, hashed)


def get_password_hash(password: str) -> str:
    """Hash password for storage."""
    return password_hash.hash(password)
