"""User models for database."""

from datetime import UTC, datetime

from sqlalchemy import CheckConstraint, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eduspark.database.base import Base, generate_id


USER_ROLES = ("student", "teacher")
DEFAULT_AVATAR_URL = "https://placehold.co/100x100.png"


class User(Base):
    """Model for users."""

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("role IN ('student', 'teacher')", name="ck_users_role"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: generate_id())
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="student")
    # Either a URL or a data:image/... URI uploaded from the profile page
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True, default=DEFAULT_AVATAR_URL)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
