"""Database models for lesson progress, streaks, badges and quiz answers."""

from datetime import UTC, date, datetime

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from eduspark.database.base import Base, generate_id


class UserProgress(Base):
    """One row per (user, lesson) the user has completed."""

    __tablename__ = "user_progress"
    __table_args__ = (UniqueConstraint("user_id", "lesson_id", name="uq_user_progress_user_lesson"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: generate_id("progress"))
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    lesson_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    # Snapshot of lesson.xp at completion time
    xp_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class UserStreak(Base):
    """Marks a calendar day (UTC) on which the user completed at least one lesson."""

    __tablename__ = "user_streaks"
    __table_args__ = (UniqueConstraint("user_id", "day", name="uq_user_streaks_user_day"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: generate_id("streak"))
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    day: Mapped[date] = mapped_column(Date, nullable=False)


class Badge(Base):
    """Badge catalogue. Badges with a course are awarded by lesson completion."""

    __tablename__ = "badges"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: generate_id("badge"))
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    icon: Mapped[str | None] = mapped_column(String(50), nullable=True)
    course_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("courses.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )


class UserBadge(Base):
    __tablename__ = "user_badges"
    __table_args__ = (UniqueConstraint("user_id", "badge_id", name="uq_user_badges_user_badge"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: generate_id("user_badge"))
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    badge_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("badges.id", ondelete="CASCADE"),
        nullable=False,
    )
    earned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )


class QuestionAnswer(Base):
    """A learner's answer to a quiz question; feeds the per-topic performance analytics."""

    __tablename__ = "question_answers"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: generate_id("answer"))
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    lesson_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
    )
    question_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False,
    )
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    answered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
