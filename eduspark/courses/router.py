"""Course, topic and lesson API endpoints."""

import logging

from fastapi import APIRouter, status

from eduspark.auth import CurrentAuth, TeacherAuth
from eduspark.progress.recommendation import Recommender
from eduspark.progress.schemas import CourseOutline
from eduspark.progress.service import ProgressService

from .models import Lesson
from .schemas import (
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    LessonContentUpdate,
    LessonCreate,
    LessonDetail,
    LessonEditorDetail,
    LessonResponse,
    LessonStepResponse,
    QuestionResponse,
    QuestionWithAnswerResponse,
    TopicCreate,
    TopicResponse,
    TopicUpdate,
)
from .service import CourseService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/courses", tags=["courses"])
lessons_router = APIRouter(prefix="/api/v1/lessons", tags=["lessons"])


@router.get("")
async def list_courses(auth: CurrentAuth) -> list[CourseResponse]:
    courses = await CourseService(auth.session).list_courses()
    return [CourseResponse.model_validate(course) for course in courses]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_course(data: CourseCreate, auth: TeacherAuth) -> CourseResponse:
    course = await CourseService(auth.session).create_course(data)
    return CourseResponse.model_validate(course)


@router.get("/{course_id}")
async def get_course_outline(course_id: str, auth: CurrentAuth) -> CourseOutline:
    """Topics and lessons in order, with the caller's completed/unlocked state."""
    return await ProgressService(auth.session).get_course_outline(auth.user_id, course_id)


@router.put("/{course_id}")
async def update_course(course_id: str, data: CourseUpdate, auth: TeacherAuth) -> CourseResponse:
    course = await CourseService(auth.session).update_course(course_id, data)
    return CourseResponse.model_validate(course)


@router.post("/{course_id}/topics", status_code=status.HTTP_201_CREATED)
async def create_topic(course_id: str, data: TopicCreate, auth: TeacherAuth) -> TopicResponse:
    topic = await CourseService(auth.session).create_topic(course_id, data)
    return TopicResponse.model_validate(topic)


@router.put("/topics/{topic_id}")
async def update_topic(topic_id: str, data: TopicUpdate, auth: TeacherAuth) -> TopicResponse:
    topic = await CourseService(auth.session).update_topic(topic_id, data)
    return TopicResponse.model_validate(topic)


@router.post("/topics/{topic_id}/lessons", status_code=status.HTTP_201_CREATED)
async def create_lesson(topic_id: str, data: LessonCreate, auth: TeacherAuth) -> LessonResponse:
    lesson = await CourseService(auth.session).create_lesson(topic_id, data)
    return LessonResponse.model_validate(lesson)


@lessons_router.get("/{lesson_id}")
async def get_lesson(
    lesson_id: str,
    auth: CurrentAuth,
    recommender: Recommender,
    recommend: bool = False,
) -> LessonDetail:
    """Lesson page: content, the caller's state and optionally a next-lesson suggestion.

    The recommendation is best-effort and comes back empty when the AI is
    slow or unavailable.
    """
    lesson = await CourseService(auth.session).get_lesson(lesson_id)
    progress = ProgressService(auth.session)
    completed = lesson.id in await progress.get_completed_lesson_ids(auth.user_id)

    return LessonDetail(
        **LessonResponse.model_validate(lesson).model_dump(),
        steps=[LessonStepResponse.model_validate(step) for step in lesson.steps],
        questions=[QuestionResponse.model_validate(question) for question in lesson.questions],
        completed=completed,
        unlocked=await progress.is_lesson_unlocked(auth.user_id, lesson),
        recommendation=await recommender.recommend_next_lesson(auth.user_id) if recommend else None,
    )


@lessons_router.get("/{lesson_id}/edit")
async def get_lesson_for_editing(lesson_id: str, auth: TeacherAuth) -> LessonEditorDetail:
    lesson = await CourseService(auth.session).get_lesson(lesson_id)
    return _editor_detail(lesson)


@lessons_router.put("/{lesson_id}/content")
async def replace_lesson_content(lesson_id: str, data: LessonContentUpdate, auth: TeacherAuth) -> LessonEditorDetail:
    """Replace title, xp, steps and questions atomically."""
    lesson = await CourseService(auth.session).replace_lesson_content(lesson_id, data)
    return _editor_detail(lesson)


def _editor_detail(lesson: Lesson) -> LessonEditorDetail:
    return LessonEditorDetail(
        **LessonResponse.model_validate(lesson).model_dump(),
        steps=[LessonStepResponse.model_validate(step) for step in lesson.steps],
        questions=[QuestionWithAnswerResponse.model_validate(question) for question in lesson.questions],
    )
