"""SQLAlchemy models for courses, topics, lessons and their quiz content."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import JSON, CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eduspark.database.base import Base, generate_id


QUESTION_TYPES = ("multiple-choice", "fill-in-the-blank")


class Course(Base):
    """A course groups topics and lessons; badges may be linked to it."""

    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: generate_id("course"))
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    topics: Mapped[list[Topic]] = relationship(
        "Topic",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Topic.position",
    )


class Topic(Base):
    """Ordered section of a course."""

    __tablename__ = "topics"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: generate_id("topic"))
    course_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    course: Mapped[Course] = relationship("Course", back_populates="topics")
    lessons: Mapped[list[Lesson]] = relationship(
        "Lesson",
        back_populates="topic",
        cascade="all, delete-orphan",
        order_by="Lesson.position",
    )


class Lesson(Base):
    """A lesson awards ``xp`` once per learner on completion."""

    __tablename__ = "lessons"
    __table_args__ = (CheckConstraint("xp >= 0", name="ck_lessons_xp_non_negative"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: generate_id("lesson"))
    course_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    topic_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("topics.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    topic: Mapped[Topic] = relationship("Topic", back_populates="lessons")
    steps: Mapped[list[LessonStep]] = relationship(
        "LessonStep",
        back_populates="lesson",
        cascade="all, delete-orphan",
        order_by="LessonStep.position",
    )
    questions: Mapped[list[Question]] = relationship(
        "Question",
        back_populates="lesson",
        cascade="all, delete-orphan",
        order_by="Question.position",
    )


class LessonStep(Base):
    """One page of lesson material."""

    __tablename__ = "lesson_steps"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: generate_id("step"))
    lesson_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    lesson: Mapped[Lesson] = relationship("Lesson", back_populates="steps")


class Question(Base):
    """Quiz question attached to a lesson."""

    __tablename__ = "questions"
    __table_args__ = (
        CheckConstraint("type IN ('multiple-choice', 'fill-in-the-blank')", name="ck_questions_type"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: generate_id("question"))
    lesson_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    # Empty for fill-in-the-blank questions
    options: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    correct_answer: Mapped[str] = mapped_column(Text, nullable=False)
    hint: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    lesson: Mapped[Lesson] = relationship("Lesson", back_populates="questions")


__all__ = [
    "QUESTION_TYPES",
    "Course",
    "Lesson",
    "LessonStep",
    "Question",
    "Topic",
]
