"""Account management: signup, credential checks and profile updates."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eduspark.auth.exceptions import InvalidCredentialsError, UserAlreadyExistsError
from eduspark.auth.security import get_password_hash, verify_password
from eduspark.config.settings import get_settings
from eduspark.database.operations import is_unique_violation
from eduspark.exceptions import ResourceNotFoundError, ValidationError

from .models import DEFAULT_AVATAR_URL, User


logger = logging.getLogger(__name__)

NAME_MIN_LENGTH = 2
AVATAR_PREFIX = "data:image/"


class UserService:
    """Service for user accounts."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_user(self, user_id: str) -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)
        return user

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def create_user(self, name: str, email: str, password: str, role: str = "student") -> User:
        """Register a new account with a hashed password and the default avatar."""
        self._check_password_length(password, field="password")
        email = email.strip().lower()

        if await self.get_by_email(email) is not None:
            raise UserAlreadyExistsError

        user = User(
            name=name.strip(),
            email=email,
            password_hash=get_password_hash(password),
            role=role,
            avatar_url=DEFAULT_AVATAR_URL,
        )
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            # Lost a race with a concurrent signup for the same email
            if is_unique_violation(e):
                raise UserAlreadyExistsError from e
            raise

        await self.session.refresh(user)
        logger.info(f"Created {role} account {user.id}")
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """Return the user for valid credentials, otherwise raise InvalidCredentialsError."""
        user = await self.get_by_email(email)
        if user is None:
            raise InvalidCredentialsError

        verified, updated_hash = verify_password(password, user.password_hash)
        if not verified:
            raise InvalidCredentialsError

        if updated_hash:
            user.password_hash = updated_hash
            await self.session.commit()

        return user

    async def update_name(self, user_id: str, name: str) -> User:
        name = name.strip()
        if len(name) < NAME_MIN_LENGTH:
            msg = f"Name must be at least {NAME_MIN_LENGTH} characters."
            raise ValidationError(msg, field="name")

        user = await self.get_user(user_id)
        user.name = name
        await self.session.commit()
        return user

    async def update_avatar(self, user_id: str, avatar: str) -> User:
        """Store an uploaded avatar, which must be an inline image data URI."""
        if not avatar.startswith(AVATAR_PREFIX):
            msg = "Invalid image format."
            raise ValidationError(msg, field="avatar")

        user = await self.get_user(user_id)
        user.avatar_url = avatar
        await self.session.commit()
        return user

    async def change_password(
        self,
        user_id: str,
        current_password: str,
        new_password: str,
        confirm_password: str,
    ) -> None:
        user = await self.get_user(user_id)

        verified, _ = verify_password(current_password, user.password_hash)
        if not verified:
            msg = "Incorrect current password."
            raise ValidationError(msg, field="current_password")

        self._check_password_length(new_password, field="new_password")
        if new_password != confirm_password:
            msg = "New passwords don't match."
            raise ValidationError(msg, field="confirm_password")

        user.password_hash = get_password_hash(new_password)
        await self.session.commit()
        logger.info(f"Password changed for user {user_id}")

    @staticmethod
    def _check_password_length(password: str, *, field: str) -> None:
        min_length = get_settings().PASSWORD_MIN_LENGTH
        if len(password) < min_length:
            msg = f"Password must be at least {min_length} characters."
            raise ValidationError(msg, field=field)
