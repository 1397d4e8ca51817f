"""End-to-end HTTP tests: authentication, permissions, error envelopes and the completion flow."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from eduspark.ai.errors import AITimeoutError
from eduspark.assignments.models import Submission
from eduspark.exceptions import OracleUnavailableError
from eduspark.progress.models import UserProgress
from eduspark.progress.schemas import NextLessonRecommendation
from eduspark.users.models import User


pytestmark = [pytest.mark.integration, pytest.mark.usefixtures("catalogue")]

ANSWER = "3x - 7 = 14, so 3x = 21 and x = 7."


async def create_assignment(client_factory, teacher: User) -> str:
    client = await client_factory(teacher)
    response = await client.post(
        "/api/v1/assignments",
        json={
            "title": "Solving Linear Equations",
            "problem": "Solve for x in the following equation: 3x - 7 = 14. Show your work.",
            "course_id": "math",
            "due_date": (datetime.now(UTC) + timedelta(days=2)).isoformat(),
        },
    )
    assert response.status_code == 201
    return response.json()["id"]


@pytest.mark.asyncio
async def test_health(client_factory) -> None:
    client = await client_factory()
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


class TestAuthentication:
    @pytest.mark.asyncio
    async def test_signup_login_and_me(self, client_factory) -> None:
        client = await client_factory()
        signup = await client.post(
            "/api/v1/auth/signup",
            json={"name": "Charlie Brown", "email": "Charlie@Example.com", "password": "peanuts-forever"},
        )
        assert signup.status_code == 201
        assert signup.json()["email"] == "charlie@example.com"
        assert signup.json()["role"] == "student"
        assert "session" in signup.cookies

        login = await client.post(
            "/api/v1/auth/login",
            json={"email": "charlie@example.com", "password": "peanuts-forever"},
        )
        assert login.status_code == 200
        token = login.cookies["session"]

        me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["name"] == "Charlie Brown"

    @pytest.mark.asyncio
    async def test_wrong_password(self, client_factory, student: User) -> None:
        client = await client_factory()
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": student.email, "password": "not-the-password"},
        )
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"

    @pytest.mark.asyncio
    async def test_duplicate_signup(self, client_factory, student: User) -> None:
        client = await client_factory()
        response = await client.post(
            "/api/v1/auth/signup",
            json={"name": "Alice Again", "email": student.email, "password": "another-password"},
        )
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "ALREADY_EXISTS"

    @pytest.mark.asyncio
    async def test_short_password_is_rejected(self, client_factory) -> None:
        client = await client_factory()
        response = await client.post(
            "/api/v1/auth/signup",
            json={"name": "Diana Miller", "email": "diana@example.com", "password": "short"},
        )
        assert response.status_code == 400
        assert response.json()["error"]["category"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_tampered_token_is_anonymous(self, client_factory) -> None:
        client = await client_factory()
        response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401


class TestPermissions:
    @pytest.mark.asyncio
    async def test_unauthenticated_write_is_rejected(self, client_factory, db_session: AsyncSession) -> None:
        client = await client_factory()
        response = await client.post("/api/v1/progress/lessons/m1/complete")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTH_REQUIRED"
        count = await db_session.execute(select(func.count()).select_from(UserProgress))
        assert count.scalar_one() == 0

    @pytest.mark.asyncio
    async def test_student_cannot_grade(self, client_factory, student: User, teacher: User) -> None:
        assignment_id = await create_assignment(client_factory, teacher)
        client = await client_factory(student)
        submission = await client.post(f"/api/v1/assignments/{assignment_id}/submissions", json={"content": ANSWER})
        assert submission.status_code == 201

        response = await client.put(
            f"/api/v1/assignments/submissions/{submission.json()['id']}/grade",
            json={"grade": 100, "feedback": "I deserve it"},
        )
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_student_cannot_create_courses(self, client_factory, student: User) -> None:
        client = await client_factory(student)
        response = await client.post(
            "/api/v1/courses",
            json={"title": "History", "description": "Everything that happened before today."},
        )
        assert response.status_code == 403


class TestLessonCompletion:
    @pytest.mark.asyncio
    async def test_completion_with_recommendation(self, client_factory, student: User, oracle) -> None:
        oracle.recommendation = NextLessonRecommendation(lesson_id="m2", reasoning="Keep the momentum.")
        client = await client_factory(student)

        response = await client.post("/api/v1/progress/lessons/m1/complete")

        assert response.status_code == 200
        body = response.json()
        assert body["xp_awarded"] == 100
        assert body["new_badge_ids"] == ["b1"]
        assert body["current_streak"] == 1
        assert body["recommendation"] == {"lesson_id": "m2", "course_id": "math", "reasoning": "Keep the momentum."}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            AITimeoutError("too slow"),
            OracleUnavailableError("recommendation"),
            OperationalError("SELECT lesson_id FROM question_answers", {}, Exception("database is locked")),
        ],
    )
    async def test_completion_survives_oracle_failure(
        self, client_factory, db_session: AsyncSession, student: User, oracle, error: Exception
    ) -> None:
        oracle.error = error
        client = await client_factory(student)

        response = await client.post("/api/v1/progress/lessons/m1/complete")

        assert response.status_code == 200
        assert response.json()["recommendation"] is None
        assert response.json()["xp_awarded"] == 100
        count = await db_session.execute(
            select(func.count()).select_from(UserProgress).where(UserProgress.user_id == student.id)
        )
        assert count.scalar_one() == 1

    @pytest.mark.asyncio
    async def test_repeat_completion_awards_nothing(self, client_factory, student: User) -> None:
        client = await client_factory(student)
        await client.post("/api/v1/progress/lessons/m1/complete")
        response = await client.post("/api/v1/progress/lessons/m1/complete")

        assert response.json()["already_completed"] is True
        assert response.json()["xp_awarded"] == 0

        stats = await client.get("/api/v1/progress/stats")
        assert stats.json()["total_xp"] == 100
        assert [badge["id"] for badge in stats.json()["badges"]] == ["b1"]

    @pytest.mark.asyncio
    async def test_unknown_lesson(self, client_factory, student: User) -> None:
        client = await client_factory(student)
        response = await client.post("/api/v1/progress/lessons/nope/complete")

        assert response.status_code == 404
        assert response.json()["error"]["metadata"] == {"resource_type": "Lesson", "resource_id": "nope"}

    @pytest.mark.asyncio
    async def test_lesson_page_hides_answers_and_tracks_unlocking(self, client_factory, student: User) -> None:
        client = await client_factory(student)

        lesson = await client.get("/api/v1/lessons/m2")
        assert lesson.status_code == 200
        assert lesson.json()["unlocked"] is False
        assert lesson.json()["recommendation"] is None

        await client.post("/api/v1/progress/lessons/m1/complete")
        lesson = await client.get("/api/v1/lessons/m2")
        assert lesson.json()["unlocked"] is True

        first = await client.get("/api/v1/lessons/m1")
        assert first.json()["completed"] is True
        assert all("correct_answer" not in question for question in first.json()["questions"])


class TestSubmissions:
    @pytest.mark.asyncio
    async def test_duplicate_submission_conflict(
        self, client_factory, db_session: AsyncSession, student: User, teacher: User
    ) -> None:
        assignment_id = await create_assignment(client_factory, teacher)
        client = await client_factory(student)

        first = await client.post(f"/api/v1/assignments/{assignment_id}/submissions", json={"content": ANSWER})
        second = await client.post(
            f"/api/v1/assignments/{assignment_id}/submissions",
            json={"content": "Second thoughts on the answer."},
        )

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["error"]["code"] == "DUPLICATE_SUBMISSION"
        count = await db_session.execute(
            select(func.count()).select_from(Submission).where(Submission.user_id == student.id)
        )
        assert count.scalar_one() == 1

    @pytest.mark.asyncio
    async def test_teacher_grades_submission(self, client_factory, student: User, teacher: User) -> None:
        assignment_id = await create_assignment(client_factory, teacher)
        student_client = await client_factory(student)
        teacher_client = await client_factory(teacher)

        submission = await student_client.post(
            f"/api/v1/assignments/{assignment_id}/submissions", json={"content": ANSWER}
        )
        submission_id = submission.json()["id"]

        invalid = await teacher_client.put(
            f"/api/v1/assignments/submissions/{submission_id}/grade", json={"grade": 150, "feedback": ""}
        )
        assert invalid.status_code == 400
        assert invalid.json()["error"]["metadata"] == {"field": "grade"}

        graded = await teacher_client.put(
            f"/api/v1/assignments/submissions/{submission_id}/grade", json={"grade": 85, "feedback": "Good work"}
        )
        assert graded.status_code == 200

        mine = await student_client.get(f"/api/v1/assignments/{assignment_id}/submissions/mine")
        assert mine.json()["grade"] == 85
        assert mine.json()["feedback"] == "Good work"

        listing = await student_client.get("/api/v1/assignments")
        assert [item["status"] for item in listing.json()] == ["graded"]

    @pytest.mark.asyncio
    async def test_short_submission(self, client_factory, student: User, teacher: User) -> None:
        assignment_id = await create_assignment(client_factory, teacher)
        client = await client_factory(student)

        response = await client.post(f"/api/v1/assignments/{assignment_id}/submissions", json={"content": "x=7"})

        assert response.status_code == 400
        assert response.json()["error"]["metadata"] == {"field": "content"}


class TestTutorHint:
    @pytest.mark.asyncio
    async def test_hint(self, client_factory, student: User) -> None:
        client = await client_factory(student)
        response = await client.post("/api/v1/ai/lessons/m1/questions/m1_q1/hint")

        assert response.status_code == 200
        assert "Introduction to Algebra" in response.json()["hint_text"]

    @pytest.mark.asyncio
    async def test_hint_failure_is_reported(self, client_factory, student: User, oracle) -> None:
        oracle.error = OracleUnavailableError("hint")
        client = await client_factory(student)

        response = await client.post("/api/v1/ai/lessons/m1/questions/m1_q1/hint")

        assert response.status_code == 503
        assert response.json()["error"]["detail"] == "An AI error occurred."
        assert response.json()["error"]["metadata"] == {"oracle": "hint", "retryable": True}
