"""User profile schemas."""

from pydantic import BaseModel, Field

from eduspark.auth.schemas import UserResponse


class NameUpdate(BaseModel):
    name: str = Field(..., max_length=100)


class AvatarUpdate(BaseModel):
    """Avatar as a ``data:image/...`` URI."""

    avatar: str


class PasswordChange(BaseModel):
    current_password: str
    new_password: str
    confirm_password: str


class StudentProfile(BaseModel):
    """Profile page: the user plus progression totals."""

    user: UserResponse
    total_xp: int
    current_streak: int
    completed_lessons: int
    badge_ids: list[str]


__all__ = ["AvatarUpdate", "NameUpdate", "PasswordChange", "StudentProfile", "UserResponse"]
