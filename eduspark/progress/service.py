"""Business logic for lesson completion, streaks, badges and quiz answers."""

import logging
from datetime import UTC, date, datetime

from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eduspark.courses.models import Course, Lesson, Question, Topic
from eduspark.database.operations import insert_if_absent
from eduspark.exceptions import ResourceNotFoundError, StorageFailureError

from .models import Badge, QuestionAnswer, UserBadge, UserProgress, UserStreak
from .queries import ELIGIBLE_COURSE_BADGES_QUERY, USER_TOTALS_QUERY
from .schemas import (
    CourseOutline,
    EarnedBadge,
    LessonCompletion,
    OutlineLesson,
    OutlineTopic,
    QuestionAnswerResult,
    StudentStats,
)
from .streaks import compute_current_streak, is_lesson_unlocked


logger = logging.getLogger(__name__)


def _normalize_answer(value: str) -> str:
    return value.strip().lower()


class ProgressService:
    """Service for the progression engine."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize progress service."""
        self.session = session

    async def complete_lesson(self, user_id: str, lesson_id: str, *, now: datetime | None = None) -> LessonCompletion:
        """Record a lesson completion with its streak day and badge awards in one transaction.

        Repeating the call is harmless: progress, streak and badge rows are
        insert-if-absent, so XP is awarded at most once per (user, lesson).
        Any storage error rolls back every write and raises
        StorageFailureError, which callers may retry.
        """
        now = now or datetime.now(UTC)

        try:
            lesson = await self.session.get(Lesson, lesson_id)
            if lesson is None:
                raise ResourceNotFoundError("Lesson", lesson_id)

            newly_completed = await insert_if_absent(
                self.session,
                UserProgress.__table__,
                {"user_id": user_id, "lesson_id": lesson_id, "completed_at": now, "xp_earned": lesson.xp},
                conflict_columns=("user_id", "lesson_id"),
            )
            await insert_if_absent(
                self.session,
                UserStreak.__table__,
                {"user_id": user_id, "day": now.date()},
                conflict_columns=("user_id", "day"),
            )
            new_badge_ids = await self._award_course_badges(user_id, now)

            await self.session.commit()
        except ResourceNotFoundError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception(f"Failed to complete lesson {lesson_id} for user {user_id}")
            msg = "Could not save your progress. Please try again."
            raise StorageFailureError(msg) from e

        if newly_completed:
            logger.info(f"User {user_id} completed lesson {lesson_id} (+{lesson.xp} XP)")
        if new_badge_ids:
            logger.info(f"User {user_id} earned badges {new_badge_ids}")

        return LessonCompletion(
            lesson_id=lesson.id,
            course_id=lesson.course_id,
            xp_awarded=lesson.xp if newly_completed else 0,
            already_completed=not newly_completed,
            new_badge_ids=new_badge_ids,
            current_streak=await self.get_current_streak(user_id, today=now.date()),
        )

    async def _award_course_badges(self, user_id: str, now: datetime) -> list[str]:
        """Grant every course-linked badge the user now qualifies for; return the new ones."""
        result = await self.session.execute(text(ELIGIBLE_COURSE_BADGES_QUERY), {"user_id": user_id})

        awarded = []
        for (badge_id,) in result.all():
            inserted = await insert_if_absent(
                self.session,
                UserBadge.__table__,
                {"user_id": user_id, "badge_id": badge_id, "earned_at": now},
                conflict_columns=("user_id", "badge_id"),
            )
            if inserted:
                awarded.append(badge_id)
        return awarded

    async def get_current_streak(self, user_id: str, today: date | None = None) -> int:
        result = await self.session.execute(select(UserStreak.day).where(UserStreak.user_id == user_id))
        return compute_current_streak(result.scalars().all(), today=today)

    async def get_completed_lesson_ids(self, user_id: str) -> set[str]:
        result = await self.session.execute(select(UserProgress.lesson_id).where(UserProgress.user_id == user_id))
        return set(result.scalars().all())

    async def get_ordered_lesson_ids(self, course_id: str) -> list[str]:
        """Lesson ids of a course in authored order (topic position, then lesson position)."""
        result = await self.session.execute(
            select(Lesson.id)
            .join(Topic, Lesson.topic_id == Topic.id)
            .where(Lesson.course_id == course_id)
            .order_by(Topic.position, Lesson.position, Lesson.id)
        )
        return list(result.scalars().all())

    async def is_lesson_unlocked(self, user_id: str, lesson: Lesson) -> bool:
        ordered = await self.get_ordered_lesson_ids(lesson.course_id)
        completed = await self.get_completed_lesson_ids(user_id)
        return is_lesson_unlocked(lesson.id, ordered, completed)

    async def record_question_answer(
        self,
        user_id: str,
        lesson_id: str,
        question_id: str,
        answer: str,
    ) -> QuestionAnswerResult:
        """Store a quiz answer and whether it matches the expected one (case-insensitive)."""
        question = await self.session.get(Question, question_id)
        if question is None or question.lesson_id != lesson_id:
            raise ResourceNotFoundError("Question", question_id)

        is_correct = _normalize_answer(answer) == _normalize_answer(question.correct_answer)
        self.session.add(
            QuestionAnswer(
                user_id=user_id,
                lesson_id=lesson_id,
                question_id=question_id,
                answer=answer,
                is_correct=is_correct,
            )
        )
        await self.session.commit()

        return QuestionAnswerResult(
            question_id=question_id,
            is_correct=is_correct,
            correct_answer=question.correct_answer,
        )

    async def get_student_stats(self, user_id: str) -> StudentStats:
        totals = (await self.session.execute(text(USER_TOTALS_QUERY), {"user_id": user_id})).one()

        result = await self.session.execute(
            select(Badge, UserBadge.earned_at)
            .join(UserBadge, UserBadge.badge_id == Badge.id)
            .where(UserBadge.user_id == user_id)
            .order_by(UserBadge.earned_at, Badge.id)
        )
        badges = [
            EarnedBadge(
                id=badge.id,
                name=badge.name,
                description=badge.description,
                icon=badge.icon,
                course_id=badge.course_id,
                earned_at=earned_at,
            )
            for badge, earned_at in result.all()
        ]

        return StudentStats(
            total_xp=int(totals.total_xp),
            current_streak=await self.get_current_streak(user_id),
            completed_lessons=int(totals.completed_lessons),
            badges=badges,
        )

    async def get_course_outline(self, user_id: str, course_id: str) -> CourseOutline:
        """Course topics and lessons in authored order with completed/unlocked flags."""
        course = await self.session.get(Course, course_id)
        if course is None:
            raise ResourceNotFoundError("Course", course_id)

        result = await self.session.execute(
            select(Topic).where(Topic.course_id == course_id).order_by(Topic.position, Topic.id)
        )
        topics = list(result.scalars().all())

        result = await self.session.execute(
            select(Lesson)
            .join(Topic, Lesson.topic_id == Topic.id)
            .where(Lesson.course_id == course_id)
            .order_by(Topic.position, Lesson.position, Lesson.id)
        )
        lessons = list(result.scalars().all())

        ordered_ids = [lesson.id for lesson in lessons]
        completed = await self.get_completed_lesson_ids(user_id)

        lessons_by_topic: dict[str, list[OutlineLesson]] = {topic.id: [] for topic in topics}
        for lesson in lessons:
            lessons_by_topic[lesson.topic_id].append(
                OutlineLesson(
                    id=lesson.id,
                    title=lesson.title,
                    xp=lesson.xp,
                    completed=lesson.id in completed,
                    unlocked=is_lesson_unlocked(lesson.id, ordered_ids, completed),
                )
            )

        return CourseOutline(
            id=course.id,
            title=course.title,
            description=course.description,
            topics=[
                OutlineTopic(id=topic.id, title=topic.title, lessons=lessons_by_topic[topic.id]) for topic in topics
            ],
            completed_lessons=sum(1 for lesson_id in ordered_ids if lesson_id in completed),
            total_lessons=len(ordered_ids),
        )
