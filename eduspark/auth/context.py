"""UserContext and FastAPI dependencies for authenticated and teacher-only routes.

Routes take ``CurrentAuth`` (any signed-in caller) or ``TeacherAuth``
(role == teacher) instead of separate user/session parameters.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import Depends

from eduspark.auth.config import get_current_user
from eduspark.auth.exceptions import AuthorizationError, UnauthenticatedError
from eduspark.auth.schemas import CurrentUser
from eduspark.database.session import DbSession


if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class UserContext:
    """Request-scoped pairing of the authenticated user with a database session."""

    def __init__(self, user: CurrentUser, session: AsyncSession) -> None:
        self.user = user
        self.session = session

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def is_teacher(self) -> bool:
        return self.user.is_teacher


AuthContext = UserContext

OptionalUser = Annotated[CurrentUser | None, Depends(get_current_user)]


async def get_auth_context(user: OptionalUser, session: DbSession) -> AuthContext:
    """Build an AuthContext for the current request; anonymous callers get a 401."""
    if user is None:
        raise UnauthenticatedError
    return AuthContext(user=user, session=session)


CurrentAuth = Annotated[AuthContext, Depends(get_auth_context)]


async def get_teacher_context(auth: CurrentAuth) -> AuthContext:
    """Like ``get_auth_context`` but rejects non-teachers with a 403."""
    if not auth.is_teacher:
        raise AuthorizationError("Only teachers can perform this action.")
    return auth


TeacherAuth = Annotated[AuthContext, Depends(get_teacher_context)]
