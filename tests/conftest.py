"""Shared fixtures: in-memory database, seeded catalogue, users, fake oracles and API clients.

Testing Strategy:
1. Database: a fresh in-memory SQLite database (aiosqlite) per test
2. AI Services: replaced by FakeOracle at the app boundary
3. Authentication: real signed session tokens sent as Bearer headers
"""

import asyncio
import os


# Settings are cached on first use, so the environment must be ready before eduspark is imported
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"  # noqa: S105

from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from eduspark.auth.schemas import UserResponse
from eduspark.auth.security import create_session_token
from eduspark.courses.models import Course, Lesson, Question, Topic
from eduspark.database import Database, create_all_tables, create_app_engine
from eduspark.main import create_app
from eduspark.middleware.security import limiter
from eduspark.progress.models import Badge
from eduspark.progress.schemas import NextLessonRecommendation
from eduspark.users.models import User
from eduspark.users.service import UserService


limiter.enabled = False

TEST_PASSWORD = "correct-horse-battery"  # noqa: S105


class FakeOracle:
    """Stands in for AIService: canned recommendation and hint, optional failure or delay."""

    def __init__(
        self,
        recommendation: NextLessonRecommendation | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.recommendation = recommendation
        self.error = error
        self.delay = delay
        self.calls: list[str] = []

    async def recommend_next_lesson(self, user_id: str) -> NextLessonRecommendation:
        self.calls.append(user_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.recommendation or NextLessonRecommendation(reasoning="Nothing to suggest yet.")

    async def get_tutor_hint(self, lesson_title: str, question_text: str, options: list[str] | None = None) -> str:
        if self.error is not None:
            raise self.error
        return f"Think about what '{question_text}' is really asking in {lesson_title}."


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    db = Database(create_app_engine("sqlite+aiosqlite://"))
    await create_all_tables(db.engine)
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture
async def catalogue(db_session: AsyncSession) -> None:
    """Two courses.

    math: topic t1 (m1, m2), topic t2 (m3); badge b1.
    science: topic t3 (s1); badge b2. Badge b3 has no course.
    """
    db_session.add_all(
        [
            Course(id="math", title="Core Math", description="Build your foundational math skills."),
            Course(id="science", title="Core Science", description="Explore the natural world."),
        ]
    )
    await db_session.flush()
    db_session.add_all(
        [
            Topic(id="t1", course_id="math", title="Algebra Foundations", position=0),
            Topic(id="t2", course_id="math", title="Geometric Principles", position=1),
            Topic(id="t3", course_id="science", title="Our Cosmic Neighborhood", position=0),
        ]
    )
    await db_session.flush()
    db_session.add_all(
        [
            Lesson(id="m1", course_id="math", topic_id="t1", title="Introduction to Algebra", xp=100, position=0),
            Lesson(id="m2", course_id="math", topic_id="t1", title="Linear Equations", xp=50, position=1),
            Lesson(id="m3", course_id="math", topic_id="t2", title="Basics of Geometry", xp=75, position=0),
            Lesson(id="s1", course_id="science", topic_id="t3", title="The Solar System", xp=100, position=0),
        ]
    )
    await db_session.flush()
    db_session.add_all(
        [
            Question(
                id="m1_q1",
                lesson_id="m1",
                text="What is the value of 'x' in the equation: 2x + 3 = 11?",
                type="multiple-choice",
                options=["3", "4", "5", "6"],
                correct_answer="4",
                hint="Subtract 3 from both sides first.",
            ),
            Question(
                id="m1_q2",
                lesson_id="m1",
                text="A letter that represents an unknown number is called a ____.",
                type="fill-in-the-blank",
                options=[],
                correct_answer="Variable",
                hint="It can vary.",
                position=1,
            ),
            Badge(id="b1", name="Math Beginner", description="Complete your first math lesson.", course_id="math"),
            Badge(
                id="b2",
                name="Science Explorer",
                description="Complete your first science lesson.",
                course_id="science",
            ),
            Badge(id="b3", name="Course Champion", description="Complete an entire course."),
        ]
    )
    await db_session.commit()


async def create_user(database: Database, name: str, email: str, role: str = "student") -> User:
    # Own session: the returned user stays detached and loaded even if a test session rolls back
    async with database.session() as session:
        return await UserService(session).create_user(name, email, TEST_PASSWORD, role)


@pytest_asyncio.fixture
async def student(database: Database) -> User:
    return await create_user(database, "Alice Johnson", "alice@example.com")


@pytest_asyncio.fixture
async def other_student(database: Database) -> User:
    return await create_user(database, "Bob Williams", "bob@example.com")


@pytest_asyncio.fixture
async def teacher(database: Database) -> User:
    return await create_user(database, "Grace Hopper", "grace@example.com", "teacher")


@pytest.fixture
def oracle() -> FakeOracle:
    return FakeOracle()


@pytest_asyncio.fixture
async def client_factory(
    database: Database,
    oracle: FakeOracle,
) -> AsyncGenerator[Callable[..., Awaitable[AsyncClient]], None]:
    """Build API clients against an app wired to the test database and fake oracle.

    ``await client_factory(user)`` signs requests as ``user``; without a user
    the client is anonymous.
    """
    app = create_app(database=database, ai_service=oracle)
    clients: list[AsyncClient] = []

    async def _factory(user: User | None = None) -> AsyncClient:
        headers = {}
        if user is not None:
            token = create_session_token(UserResponse.model_validate(user).model_dump())
            headers["Authorization"] = f"Bearer {token}"
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test", headers=headers)
        clients.append(client)
        return client

    yield _factory

    for client in clients:
        await client.aclose()
