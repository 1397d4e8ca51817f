"""Seed the built-in catalogue: courses, topics, starter lessons, badges and sample assignments.

Run with ``python -m eduspark.database.seed``. Every row is written with
insert-if-absent on its primary key, so re-running the seed is a no-op.
"""

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from eduspark.assignments.models import Assignment
from eduspark.challenges.models import Challenge
from eduspark.config.logging import setup_logging
from eduspark.config.settings import get_settings
from eduspark.courses.models import Course, Lesson, LessonStep, Question, Topic
from eduspark.progress.models import Badge

from .base import create_all_tables
from .operations import insert_if_absent
from .session import Database


logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "https://placehold.co/600x400.png"

COURSES = [
    {
        "id": "math",
        "title": "Core Math",
        "description": "Build your foundational math skills from the ground up.",
    },
    {
        "id": "science",
        "title": "Core Science",
        "description": "Explore the fundamental principles of the natural world.",
    },
]

TOPICS = [
    {"id": "topic_math_1", "course_id": "math", "title": "Algebra Foundations", "position": 0},
    {"id": "topic_math_2", "course_id": "math", "title": "Geometric Principles", "position": 1},
    {"id": "topic_science_1", "course_id": "science", "title": "Our Cosmic Neighborhood", "position": 0},
    {"id": "topic_science_2", "course_id": "science", "title": "The Cellular World", "position": 1},
]

# Only badges linked to a course are awarded automatically
BADGES = [
    {
        "id": "b1",
        "name": "Math Beginner",
        "description": "Complete your first math lesson.",
        "icon": "star",
        "course_id": "math",
    },
    {
        "id": "b2",
        "name": "Science Explorer",
        "description": "Complete your first science lesson.",
        "icon": "star",
        "course_id": "science",
    },
    {"id": "b3", "name": "Course Champion", "description": "Complete an entire course.", "icon": "medal"},
    {"id": "b4", "name": "Topic Master", "description": "Master a full topic.", "icon": "shield"},
    {"id": "b5", "name": "Perfect Score", "description": "Get a perfect score on a lesson.", "icon": "book"},
    {"id": "b6", "name": "Challenge Solver", "description": "Solve your first daily challenge.", "icon": "trophy"},
]

LESSONS: list[dict[str, Any]] = [
    {
        "id": "m1",
        "course_id": "math",
        "topic_id": "topic_math_1",
        "title": "Introduction to Algebra",
        "xp": 100,
        "steps": [
            {
                "title": "What is Algebra?",
                "content": (
                    "Algebra is a branch of mathematics that uses letters and symbols to represent numbers and "
                    "quantities in formulas and equations. It's like a puzzle where you find the missing piece."
                ),
                "image": PLACEHOLDER_IMAGE,
            },
            {
                "title": "Understanding Variables",
                "content": (
                    "A variable, like 'x' or 'y', is a symbol that stands for a number we don't know yet. "
                    "The goal is often to figure out the value of that variable."
                ),
            },
            {
                "title": "The Golden Rule of Equations",
                "content": (
                    "An equation is a statement that two things are equal. Whatever you do to one side of the "
                    "equation, you must do to the other side. This keeps the equation balanced."
                ),
                "image": PLACEHOLDER_IMAGE,
            },
        ],
        "questions": [
            {
                "text": "What is the value of 'x' in the equation: 2x + 3 = 11?",
                "type": "multiple-choice",
                "options": ["3", "4", "5", "6"],
                "correct_answer": "4",
                "hint": "To find 'x', first subtract 3 from both sides of the equation to isolate the term with 'x'.",
            },
            {
                "text": "Simplify the expression: 3(x + 4) - 2",
                "type": "multiple-choice",
                "options": ["3x + 10", "3x + 12", "x + 10", "3x + 2"],
                "correct_answer": "3x + 10",
                "hint": "Use the distributive property to multiply 3 by both x and 4.",
            },
            {
                "text": "In algebra, a letter like 'x' that represents an unknown number is called a ____.",
                "type": "fill-in-the-blank",
                "options": [],
                "correct_answer": "variable",
                "hint": "It's something that can vary or change.",
            },
        ],
    },
    {
        "id": "m2",
        "course_id": "math",
        "topic_id": "topic_math_2",
        "title": "Basics of Geometry",
        "xp": 100,
        "steps": [
            {
                "title": "What is Geometry?",
                "content": (
                    "Geometry is the branch of mathematics concerned with the distance, shape, size, and "
                    "relative position of figures."
                ),
                "image": PLACEHOLDER_IMAGE,
            },
            {
                "title": "Area vs. Perimeter",
                "content": (
                    "Perimeter is the distance around a two-dimensional shape. Area is the amount of space inside it. "
                    "For a rectangle, Perimeter = 2(width + height) and Area = width × height."
                ),
            },
        ],
        "questions": [
            {
                "text": "What is the area of a rectangle with a width of 5 units and a height of 8 units?",
                "type": "multiple-choice",
                "options": ["13 units²", "40 units²", "26 units²", "30 units²"],
                "correct_answer": "40 units²",
                "hint": "The area of a rectangle is calculated by multiplying its width by its height.",
            },
            {
                "text": "The three angles of a triangle always add up to how many degrees?",
                "type": "multiple-choice",
                "options": ["90°", "180°", "270°", "360°"],
                "correct_answer": "180°",
                "hint": "This is a fundamental theorem in Euclidean geometry.",
            },
        ],
    },
    {
        "id": "s1",
        "course_id": "science",
        "topic_id": "topic_science_1",
        "title": "The Solar System",
        "xp": 100,
        "steps": [
            {
                "title": "Our Star: The Sun",
                "content": (
                    "The Sun is the star at the center of our Solar System. Its gravity holds the solar system "
                    "together, from the largest planets to the smallest debris."
                ),
                "image": PLACEHOLDER_IMAGE,
            },
            {
                "title": "The Gas Giants",
                "content": (
                    "The outer planets, Jupiter, Saturn, Uranus and Neptune, are known as gas giants. They are "
                    "composed mostly of hydrogen and helium."
                ),
            },
        ],
        "questions": [
            {
                "text": "Which planet is known as the Red Planet?",
                "type": "multiple-choice",
                "options": ["Earth", "Mars", "Jupiter", "Saturn"],
                "correct_answer": "Mars",
                "hint": "This planet gets its color from iron oxide on its surface.",
            },
            {
                "text": "What force holds the planets in orbit around the Sun?",
                "type": "multiple-choice",
                "options": ["Magnetism", "Gravity", "Friction", "Nuclear Force"],
                "correct_answer": "Gravity",
                "hint": "This fundamental force of nature attracts any two objects with mass.",
            },
        ],
    },
    {
        "id": "s2",
        "course_id": "science",
        "topic_id": "topic_science_2",
        "title": "Introduction to Cells",
        "xp": 100,
        "steps": [
            {
                "title": "The Building Blocks of Life",
                "content": (
                    "Cells are the basic structural, functional, and biological units of all known living "
                    "organisms. Everything from bacteria to humans is made of cells."
                ),
                "image": PLACEHOLDER_IMAGE,
            },
            {
                "title": "Key Organelles: The Mitochondria",
                "content": (
                    "Mitochondria are known as the 'powerhouses' of the cell. They break down nutrients and turn "
                    "them into energy the cell can use."
                ),
            },
        ],
        "questions": [
            {
                "text": "What is the powerhouse of the cell?",
                "type": "multiple-choice",
                "options": ["Nucleus", "Ribosome", "Mitochondria", "Cell Wall"],
                "correct_answer": "Mitochondria",
                "hint": "This organelle generates most of the cell's supply of ATP.",
            },
            {
                "text": "The fluid-filled substance inside the cell membrane is called the ____.",
                "type": "fill-in-the-blank",
                "options": [],
                "correct_answer": "cytoplasm",
                "hint": "It's the jelly-like substance that holds all the cell's organelles.",
            },
        ],
    },
]


def _assignments(now: datetime) -> list[dict[str, Any]]:
    return [
        {
            "id": "da1",
            "course_id": "math",
            "title": "Solving Linear Equations",
            "problem": "Solve for x in the following equation: 3x - 7 = 14. Show your work.",
            "due_date": now + timedelta(days=2),
        },
        {
            "id": "da2",
            "course_id": "science",
            "title": "Planetary Orbits",
            "problem": (
                "Explain Kepler's First Law of Planetary Motion. "
                "Why are planetary orbits elliptical and not perfect circles?"
            ),
            "due_date": now + timedelta(days=5),
        },
    ]


async def seed_catalogue(session: AsyncSession, *, now: datetime | None = None) -> int:
    """Insert the built-in catalogue and return the number of rows written."""
    now = now or datetime.now(UTC)
    written = 0

    async def add(model: type, values: dict[str, Any]) -> None:
        nonlocal written
        if await insert_if_absent(session, model.__table__, values, ["id"]):
            written += 1

    # Parents first: badges and assignments reference courses
    for course in COURSES:
        await add(Course, {**course, "created_at": now})
    for topic in TOPICS:
        await add(Topic, topic)

    # One starter lesson per topic
    for lesson in LESSONS:
        lesson_values = {k: v for k, v in lesson.items() if k not in ("steps", "questions")}
        await add(Lesson, {**lesson_values, "position": 0})
        for position, step in enumerate(lesson["steps"]):
            await add(
                LessonStep,
                {"id": f"{lesson['id']}_s{position + 1}", "lesson_id": lesson["id"], "position": position, **step},
            )
        for position, question in enumerate(lesson["questions"]):
            await add(
                Question,
                {"id": f"{lesson['id']}_q{position + 1}", "lesson_id": lesson["id"], "position": position, **question},
            )

    for badge in BADGES:
        await add(Badge, {"course_id": None, **badge})

    for assignment in _assignments(now):
        await add(Assignment, {**assignment, "created_at": now})

    await add(
        Challenge,
        {
            "id": "dc1",
            "title": "The Tower of Hanoi",
            "problem": (
                "You have three pegs and five disks of different sizes stacked on the first peg. Move the whole "
                "stack to the last peg, one disk at a time, never placing a larger disk on a smaller one. "
                "What is the minimum number of moves?"
            ),
            "topic": "Math",
            "day": now.date(),
        },
    )

    await session.commit()
    return written


async def seed_database(database: Database) -> int:
    await create_all_tables(database.engine)
    async with database.session() as session:
        return await seed_catalogue(session)


async def main() -> None:
    setup_logging()
    database = Database.from_url(get_settings().DATABASE_URL)
    try:
        written = await seed_database(database)
        logger.info(f"Seed complete: {written} rows written")
    finally:
        await database.dispose()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
