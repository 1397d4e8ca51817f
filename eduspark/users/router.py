"""Profile endpoints for the signed-in user."""

from fastapi import APIRouter, Response, status

from eduspark.auth import CurrentAuth
from eduspark.auth.router import set_session_cookie
from eduspark.progress.service import ProgressService

from .schemas import AvatarUpdate, NameUpdate, PasswordChange, StudentProfile, UserResponse
from .service import UserService


router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/me/profile")
async def get_profile(auth: CurrentAuth) -> StudentProfile:
    user = await UserService(auth.session).get_user(auth.user_id)
    stats = await ProgressService(auth.session).get_student_stats(auth.user_id)
    return StudentProfile(
        user=UserResponse.model_validate(user),
        total_xp=stats.total_xp,
        current_streak=stats.current_streak,
        completed_lessons=stats.completed_lessons,
        badge_ids=[badge.id for badge in stats.badges],
    )


@router.patch("/me/name")
async def update_name(data: NameUpdate, response: Response, auth: CurrentAuth) -> UserResponse:
    """Rename the user; the session cookie is reissued so it carries the new name."""
    user = await UserService(auth.session).update_name(auth.user_id, data.name)
    set_session_cookie(response, user)
    return UserResponse.model_validate(user)


@router.put("/me/avatar")
async def update_avatar(data: AvatarUpdate, response: Response, auth: CurrentAuth) -> UserResponse:
    user = await UserService(auth.session).update_avatar(auth.user_id, data.avatar)
    set_session_cookie(response, user)
    return UserResponse.model_validate(user)


@router.post("/me/password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(data: PasswordChange, auth: CurrentAuth) -> None:
    await UserService(auth.session).change_password(
        auth.user_id,
        data.current_password,
        data.new_password,
        data.confirm_password,
    )
