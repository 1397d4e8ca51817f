"""Authentication routes for signup, login and session management."""

import logging

from fastapi import APIRouter, Request, Response, status

from eduspark.auth.context import CurrentAuth
from eduspark.auth.schemas import LoginRequest, SignupRequest, UserResponse
from eduspark.auth.security import create_session_token
from eduspark.config.settings import get_settings
from eduspark.database.session import DbSession
from eduspark.middleware.security import auth_rate_limit
from eduspark.users.models import User
from eduspark.users.service import UserService


router = APIRouter(prefix="/api/v1/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def set_session_cookie(response: Response, user: User) -> None:
    """Issue the httpOnly session cookie for ``user``."""
    settings = get_settings()
    is_production = settings.ENVIRONMENT == "production"
    token = create_session_token(UserResponse.model_validate(user).model_dump())
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=is_production,
        samesite="lax",
        max_age=settings.SESSION_TTL_HOURS * 60 * 60,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="lax",
        path="/",
    )


@router.post("/signup", status_code=status.HTTP_201_CREATED)
@auth_rate_limit
async def signup(
    request: Request,  # noqa: ARG001 - required by the rate limiter
    data: SignupRequest,
    response: Response,
    session: DbSession,
) -> UserResponse:
    """Create an account and sign the new user in."""
    user = await UserService(session).create_user(data.name, data.email, data.password, data.role)
    set_session_cookie(response, user)
    return UserResponse.model_validate(user)


@router.post("/login")
@auth_rate_limit
async def login(
    request: Request,  # noqa: ARG001 - required by the rate limiter
    data: LoginRequest,
    response: Response,
    session: DbSession,
) -> UserResponse:
    user = await UserService(session).authenticate(data.email, data.password)
    set_session_cookie(response, user)
    logger.info(f"User {user.id} logged in")
    return UserResponse.model_validate(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response) -> None:
    clear_session_cookie(response)


@router.get("/me")
async def get_me(auth: CurrentAuth) -> UserResponse:
    """Return the signed-in user, read fresh from the database."""
    user = await UserService(auth.session).get_user(auth.user_id)
    return UserResponse.model_validate(user)
