"""Learner and classroom analytics used as prompt context for the AI flows."""

import logging
from collections import defaultdict
from datetime import date

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from eduspark.progress.models import UserStreak
from eduspark.progress.streaks import compute_current_streak
from eduspark.users.models import User

from .models import AvailableLesson, ClassroomAnalytics, LessonCompletionStats, StudentStreak, TopicPerformance


logger = logging.getLogger(__name__)

TOP_STREAKS_LIMIT = 3
RECENT_TOPICS_LIMIT = 3

PERFORMANCE_BY_TOPIC_QUERY = """
    SELECT
        t.title AS topic_title,
        COALESCE(
            CAST(SUM(CASE WHEN qa.is_correct THEN 1 ELSE 0 END) AS REAL) * 100.0 / NULLIF(COUNT(qa.id), 0),
            0.0
        ) AS correct_percentage,
        COUNT(qa.id) AS total_questions
    FROM question_answers qa
    JOIN questions q ON qa.question_id = q.id
    JOIN lessons l ON q.lesson_id = l.id
    JOIN topics t ON l.topic_id = t.id
    WHERE qa.user_id = :user_id
    GROUP BY t.id, t.title
    ORDER BY t.title
"""

AVAILABLE_LESSONS_QUERY = """
    SELECT l.id, l.title, l.course_id, t.title AS topic_title
    FROM lessons l
    JOIN topics t ON l.topic_id = t.id
    WHERE l.id NOT IN (SELECT lesson_id FROM user_progress WHERE user_id = :user_id)
    ORDER BY l.course_id, t.position, l.position, l.id
"""

# Most recent completion per topic, newest first
RECENT_TOPICS_QUERY = """
    SELECT t.title, MAX(up.completed_at) AS last_completed
    FROM user_progress up
    JOIN lessons l ON up.lesson_id = l.id
    JOIN topics t ON l.topic_id = t.id
    WHERE up.user_id = :user_id
    GROUP BY t.id, t.title
    ORDER BY last_completed DESC
    LIMIT :limit
"""

ZERO_PROGRESS_STUDENTS_QUERY = """
    SELECT u.name
    FROM users u
    LEFT JOIN user_progress up ON u.id = up.user_id
    WHERE u.role = 'student' AND up.user_id IS NULL
    ORDER BY u.name
"""

LESSON_COMPLETION_COUNTS_QUERY = """
    SELECT l.title, COUNT(up.id) AS completions
    FROM lessons l
    LEFT JOIN user_progress up ON l.id = up.lesson_id
    GROUP BY l.id, l.title
    ORDER BY completions DESC, l.title
"""


async def get_performance_by_topic(session: AsyncSession, user_id: str) -> list[TopicPerformance]:
    """Percentage of correct quiz answers per topic for one student."""
    result = await session.execute(text(PERFORMANCE_BY_TOPIC_QUERY), {"user_id": user_id})
    return [
        TopicPerformance(
            topic_title=row.topic_title,
            correct_percentage=round(float(row.correct_percentage), 1),
            total_questions=row.total_questions,
        )
        for row in result
    ]


async def get_available_lessons(session: AsyncSession, user_id: str) -> list[AvailableLesson]:
    """Lessons the student has not completed yet."""
    result = await session.execute(text(AVAILABLE_LESSONS_QUERY), {"user_id": user_id})
    return [
        AvailableLesson(id=row.id, title=row.title, course_id=row.course_id, topic_title=row.topic_title)
        for row in result
    ]


async def get_recent_topics(session: AsyncSession, user_id: str, limit: int = RECENT_TOPICS_LIMIT) -> list[str]:
    """Titles of the distinct topics the student most recently completed lessons in."""
    result = await session.execute(text(RECENT_TOPICS_QUERY), {"user_id": user_id, "limit": limit})
    return [row.title for row in result]


async def get_classroom_analytics(session: AsyncSession, today: date | None = None) -> ClassroomAnalytics:
    """Top current streaks, students without progress, and most/least completed lessons."""
    result = await session.execute(
        select(User.name, UserStreak.user_id, UserStreak.day)
        .join(UserStreak, UserStreak.user_id == User.id)
        .where(User.role == "student")
    )
    days_by_student: dict[tuple[str, str], set[date]] = defaultdict(set)
    for name, user_id, day in result:
        days_by_student[(user_id, name)].add(day)

    streaks = [
        StudentStreak(student_name=name, streak_days=compute_current_streak(days, today=today))
        for (_, name), days in days_by_student.items()
    ]
    top_streaks = sorted(
        (streak for streak in streaks if streak.streak_days > 0),
        key=lambda streak: (-streak.streak_days, streak.student_name),
    )[:TOP_STREAKS_LIMIT]

    result = await session.execute(text(ZERO_PROGRESS_STUDENTS_QUERY))
    zero_progress = [row.name for row in result]

    result = await session.execute(text(LESSON_COMPLETION_COUNTS_QUERY))
    counts = [(row.title, row.completions) for row in result]

    stats = LessonCompletionStats()
    if counts and counts[0][1] > 0:
        stats.most_completed = [counts[0][0]]
    if len(counts) > 1 and counts[-1][1] < counts[0][1]:
        stats.least_completed = [counts[-1][0]]

    logger.debug(f"Classroom analytics: {len(top_streaks)} streaks, {len(zero_progress)} idle students")
    return ClassroomAnalytics(
        top_streaks=top_streaks,
        zero_progress_students=zero_progress,
        lesson_completion_stats=stats,
    )
