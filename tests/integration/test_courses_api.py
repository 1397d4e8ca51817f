"""Teacher course authoring, the lesson editor and the student profile."""

import pytest

from eduspark.users.models import User


pytestmark = [pytest.mark.integration, pytest.mark.usefixtures("catalogue")]


@pytest.mark.asyncio
async def test_teacher_builds_a_course(client_factory, teacher: User, student: User) -> None:
    client = await client_factory(teacher)

    course = await client.post(
        "/api/v1/courses",
        json={"title": "Core Computing", "description": "How computers think, one step at a time."},
    )
    assert course.status_code == 201
    course_id = course.json()["id"]

    first_topic = await client.post(f"/api/v1/courses/{course_id}/topics", json={"title": "Binary Numbers"})
    second_topic = await client.post(f"/api/v1/courses/{course_id}/topics", json={"title": "Logic Gates"})
    assert [first_topic.json()["position"], second_topic.json()["position"]] == [0, 1]

    lesson = await client.post(
        f"/api/v1/courses/topics/{first_topic.json()['id']}/lessons",
        json={"title": "Counting in Base Two", "xp": 40},
    )
    assert lesson.status_code == 201
    assert lesson.json()["course_id"] == course_id

    outline = await (await client_factory(student)).get(f"/api/v1/courses/{course_id}")
    assert outline.status_code == 200
    assert [topic["title"] for topic in outline.json()["topics"]] == ["Binary Numbers", "Logic Gates"]
    assert outline.json()["total_lessons"] == 1


@pytest.mark.asyncio
async def test_invalid_course_input(client_factory, teacher: User) -> None:
    client = await client_factory(teacher)

    response = await client.post("/api/v1/courses", json={"title": "AI", "description": "short"})

    assert response.status_code == 422
    fields = {error["field"] for error in response.json()["error"]["metadata"]["errors"]}
    assert fields == {"body -> title", "body -> description"}


@pytest.mark.asyncio
async def test_replace_lesson_content(client_factory, teacher: User) -> None:
    client = await client_factory(teacher)

    response = await client.put(
        "/api/v1/lessons/m1/content",
        json={
            "title": "Algebra, Revisited",
            "xp": 120,
            "steps": [{"title": "Variables", "content": "A variable stands for an unknown number."}],
            "questions": [
                {
                    "text": "Solve 2x = 8",
                    "type": "multiple-choice",
                    "options": ["2", "4", "8"],
                    "correct_answer": "4",
                    "hint": "Divide both sides by 2.",
                },
                {
                    "text": "x is called a ____.",
                    "type": "fill-in-the-blank",
                    "options": ["ignored"],
                    "correct_answer": "variable",
                },
            ],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Algebra, Revisited"
    assert body["xp"] == 120
    assert [step["title"] for step in body["steps"]] == ["Variables"]
    assert [question["correct_answer"] for question in body["questions"]] == ["4", "variable"]
    assert body["questions"][1]["options"] == []

    editor = await client.get("/api/v1/lessons/m1/edit")
    assert len(editor.json()["questions"]) == 2


@pytest.mark.asyncio
async def test_profile_reflects_progress(client_factory, student: User) -> None:
    client = await client_factory(student)
    await client.post("/api/v1/progress/lessons/m1/complete")

    profile = await client.get("/api/v1/users/me/profile")

    assert profile.status_code == 200
    assert profile.json()["user"]["name"] == "Alice Johnson"
    assert profile.json()["total_xp"] == 100
    assert profile.json()["current_streak"] == 1
    assert profile.json()["badge_ids"] == ["b1"]


@pytest.mark.asyncio
async def test_profile_updates(client_factory, student: User) -> None:
    client = await client_factory(student)

    renamed = await client.patch("/api/v1/users/me/name", json={"name": "Alice J."})
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Alice J."
    assert "session" in renamed.cookies

    bad_avatar = await client.put("/api/v1/users/me/avatar", json={"avatar": "https://example.com/me.png"})
    assert bad_avatar.status_code == 400

    mismatch = await client.post(
        "/api/v1/users/me/password",
        json={
            "current_password": "correct-horse-battery",
            "new_password": "a-brand-new-password",
            "confirm_password": "a-different-password",
        },
    )
    assert mismatch.status_code == 400

    changed = await client.post(
        "/api/v1/users/me/password",
        json={
            "current_password": "correct-horse-battery",
            "new_password": "a-brand-new-password",
            "confirm_password": "a-brand-new-password",
        },
    )
    assert changed.status_code == 204

    login = await client.post(
        "/api/v1/auth/login",
        json={"email": "alice@example.com", "password": "a-brand-new-password"},
    )
    assert login.status_code == 200
