"""Authentication module exports."""

from eduspark.auth.config import get_current_user
from eduspark.auth.context import (
    AuthContext,
    CurrentAuth,
    OptionalUser,
    TeacherAuth,
    UserContext,
)
from eduspark.auth.schemas import CurrentUser


__all__ = [
    "AuthContext",
    "CurrentAuth",
    "CurrentUser",
    "OptionalUser",
    "TeacherAuth",
    "UserContext",
    "get_current_user",
]
