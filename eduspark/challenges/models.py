"""Daily challenge models."""

from datetime import UTC, date, datetime

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from eduspark.database.base import Base, generate_id


class Challenge(Base):
    """A problem shared by all students; the most recent ``day`` is today's challenge."""

    __tablename__ = "challenges"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: generate_id("challenge"))
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    problem: Mapped[str] = mapped_column(Text, nullable=False)
    topic: Mapped[str] = mapped_column(String(100), nullable=False)
    day: Mapped[date] = mapped_column(Date, nullable=False, index=True, default=lambda: datetime.now(UTC).date())


class ChallengeComment(Base):
    __tablename__ = "challenge_comments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: generate_id("comment"))
    challenge_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("challenges.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )


class ChallengeSubmission(Base):
    """One solution per (challenge, user)."""

    __tablename__ = "challenge_submissions"
    __table_args__ = (
        UniqueConstraint("challenge_id", "user_id", name="uq_challenge_submissions_challenge_user"),
        CheckConstraint("grade IS NULL OR (grade >= 0 AND grade <= 100)", name="ck_challenge_submissions_grade_range"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: generate_id("csub"))
    challenge_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("challenges.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    grade: Mapped[int | None] = mapped_column(Integer, nullable=True)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
