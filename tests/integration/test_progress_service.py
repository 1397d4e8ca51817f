"""Lesson completion, badges, streaks and quiz answers against a real (SQLite) database."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from eduspark.exceptions import ResourceNotFoundError, StorageFailureError
from eduspark.progress.models import QuestionAnswer, UserBadge, UserProgress, UserStreak
from eduspark.progress.service import ProgressService
from eduspark.users.models import User


pytestmark = pytest.mark.usefixtures("catalogue")


async def count_rows(session: AsyncSession, model: type, user_id: str) -> int:
    result = await session.execute(select(func.count()).select_from(model).where(model.user_id == user_id))
    return result.scalar_one()


@pytest.mark.asyncio
async def test_completion_awards_xp_streak_and_course_badge(db_session: AsyncSession, student: User) -> None:
    completion = await ProgressService(db_session).complete_lesson(student.id, "m1")

    assert completion.lesson_id == "m1"
    assert completion.course_id == "math"
    assert completion.xp_awarded == 100
    assert completion.already_completed is False
    assert completion.new_badge_ids == ["b1"]
    assert completion.current_streak == 1


@pytest.mark.asyncio
async def test_completion_is_idempotent(db_session: AsyncSession, student: User) -> None:
    service = ProgressService(db_session)
    await service.complete_lesson(student.id, "m1")
    again = await service.complete_lesson(student.id, "m1")

    assert again.already_completed is True
    assert again.xp_awarded == 0
    assert again.new_badge_ids == []
    assert await count_rows(db_session, UserProgress, student.id) == 1
    assert await count_rows(db_session, UserStreak, student.id) == 1
    assert await count_rows(db_session, UserBadge, student.id) == 1

    stats = await service.get_student_stats(student.id)
    assert stats.total_xp == 100
    assert stats.completed_lessons == 1


@pytest.mark.asyncio
async def test_course_badge_awarded_once_per_course(db_session: AsyncSession, student: User) -> None:
    service = ProgressService(db_session)
    first = await service.complete_lesson(student.id, "m1")
    second = await service.complete_lesson(student.id, "m2")
    science = await service.complete_lesson(student.id, "s1")

    assert first.new_badge_ids == ["b1"]
    assert second.new_badge_ids == []
    assert science.new_badge_ids == ["b2"]

    stats = await service.get_student_stats(student.id)
    assert [badge.id for badge in stats.badges] == ["b1", "b2"]
    assert stats.total_xp == 250


@pytest.mark.asyncio
async def test_streak_counts_consecutive_completion_days(db_session: AsyncSession, student: User) -> None:
    service = ProgressService(db_session)
    now = datetime(2024, 7, 29, 9, 30, tzinfo=UTC)

    await service.complete_lesson(student.id, "m1", now=now - timedelta(days=1))
    completion = await service.complete_lesson(student.id, "m2", now=now)

    assert completion.current_streak == 2
    assert await service.get_current_streak(student.id, today=now.date() + timedelta(days=2)) == 0


@pytest.mark.asyncio
async def test_unknown_lesson_writes_nothing(db_session: AsyncSession, student: User) -> None:
    with pytest.raises(ResourceNotFoundError):
        await ProgressService(db_session).complete_lesson(student.id, "missing")

    assert await count_rows(db_session, UserProgress, student.id) == 0
    assert await count_rows(db_session, UserStreak, student.id) == 0


@pytest.mark.asyncio
async def test_badge_failure_rolls_back_progress_and_streak(
    db_session: AsyncSession,
    student: User,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def failing_award(self: ProgressService, user_id: str, now: datetime) -> list[str]:
        raise OperationalError("INSERT INTO user_badges", {}, Exception("disk I/O error"))

    monkeypatch.setattr(ProgressService, "_award_course_badges", failing_award)

    with pytest.raises(StorageFailureError) as exc_info:
        await ProgressService(db_session).complete_lesson(student.id, "m1")

    assert exc_info.value.retryable is True
    assert await count_rows(db_session, UserProgress, student.id) == 0
    assert await count_rows(db_session, UserStreak, student.id) == 0
    assert await count_rows(db_session, UserBadge, student.id) == 0


@pytest.mark.asyncio
async def test_progress_is_per_user(db_session: AsyncSession, student: User, other_student: User) -> None:
    service = ProgressService(db_session)
    await service.complete_lesson(student.id, "m1")
    completion = await service.complete_lesson(other_student.id, "m1")

    assert completion.already_completed is False
    assert completion.new_badge_ids == ["b1"]


@pytest.mark.asyncio
async def test_course_outline_unlocks_in_authored_order(db_session: AsyncSession, student: User) -> None:
    service = ProgressService(db_session)

    outline = await service.get_course_outline(student.id, "math")
    flags = {lesson.id: lesson.unlocked for topic in outline.topics for lesson in topic.lessons}
    assert flags == {"m1": True, "m2": False, "m3": False}
    assert outline.total_lessons == 3

    await service.complete_lesson(student.id, "m1")
    await service.complete_lesson(student.id, "m2")

    outline = await service.get_course_outline(student.id, "math")
    lessons = [lesson for topic in outline.topics for lesson in topic.lessons]
    assert [lesson.id for lesson in lessons] == ["m1", "m2", "m3"]
    assert [lesson.completed for lesson in lessons] == [True, True, False]
    assert all(lesson.unlocked for lesson in lessons)
    assert outline.completed_lessons == 2


@pytest.mark.asyncio
async def test_course_outline_unknown_course(db_session: AsyncSession, student: User) -> None:
    with pytest.raises(ResourceNotFoundError):
        await ProgressService(db_session).get_course_outline(student.id, "history")


@pytest.mark.asyncio
async def test_question_answers_are_checked_case_insensitively(db_session: AsyncSession, student: User) -> None:
    service = ProgressService(db_session)

    wrong = await service.record_question_answer(student.id, "m1", "m1_q1", "5")
    right = await service.record_question_answer(student.id, "m1", "m1_q2", "  variable ")

    assert wrong.is_correct is False
    assert wrong.correct_answer == "4"
    assert right.is_correct is True
    assert await count_rows(db_session, QuestionAnswer, student.id) == 2


@pytest.mark.asyncio
async def test_question_must_belong_to_lesson(db_session: AsyncSession, student: User) -> None:
    with pytest.raises(ResourceNotFoundError):
        await ProgressService(db_session).record_question_answer(student.id, "m2", "m1_q1", "4")
