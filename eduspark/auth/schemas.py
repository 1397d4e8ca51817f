"""Request/response models for authentication."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field


Role = Literal["student", "teacher"]


class CurrentUser(BaseModel):
    """Identity carried by the session cookie."""

    id: str
    name: str
    email: str
    role: Role
    avatar_url: str | None = None

    @property
    def is_teacher(self) -> bool:
        return self.role == "teacher"


class SignupRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    role: Role = "student"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """Public view of a user."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: Role
    avatar_url: str | None = None
