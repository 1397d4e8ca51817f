"""AI helper endpoints: tutor hints, personalized challenges, lesson drafts and classroom insights."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from eduspark.auth import CurrentAuth, TeacherAuth
from eduspark.courses.models import Lesson, Question
from eduspark.exceptions import ResourceNotFoundError
from eduspark.middleware.security import ai_rate_limit

from .models import ClassroomInsights, GeneratedLessonContent, PersonalizedChallenge, TutorHint
from .service import AIService, get_ai_service


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/ai", tags=["ai"])

AIServiceDep = Annotated[AIService, Depends(get_ai_service)]


class LessonContentRequest(BaseModel):
    title: str = Field(..., min_length=3, max_length=255)


@router.post("/lessons/{lesson_id}/questions/{question_id}/hint")
@ai_rate_limit
async def get_tutor_hint(
    request: Request,  # noqa: ARG001 - required by the rate limiter
    lesson_id: str,
    question_id: str,
    auth: CurrentAuth,
    ai_service: AIServiceDep,
) -> TutorHint:
    """Socratic hint for a quiz question; 503 when the AI is unavailable."""
    question = await auth.session.get(Question, question_id)
    if question is None or question.lesson_id != lesson_id:
        raise ResourceNotFoundError("Question", question_id)
    lesson = await auth.session.get(Lesson, lesson_id)
    if lesson is None:
        raise ResourceNotFoundError("Lesson", lesson_id)

    hint = await ai_service.get_tutor_hint(lesson.title, question.text, question.options or None)
    return TutorHint(hint_text=hint)


@router.post("/challenge")
@ai_rate_limit
async def generate_personalized_challenge(
    request: Request,  # noqa: ARG001 - required by the rate limiter
    auth: CurrentAuth,
    ai_service: AIServiceDep,
) -> PersonalizedChallenge:
    return await ai_service.generate_personalized_challenge(auth.user_id)


@router.post("/lesson-content")
@ai_rate_limit
async def generate_lesson_content(
    request: Request,  # noqa: ARG001 - required by the rate limiter
    data: LessonContentRequest,
    auth: TeacherAuth,  # noqa: ARG001
    ai_service: AIServiceDep,
) -> GeneratedLessonContent:
    """Draft steps and quiz questions for a lesson title; the teacher saves them via the lesson editor."""
    return await ai_service.generate_lesson_content(data.title)


@router.get("/classroom-insights")
@ai_rate_limit
async def get_classroom_insights(
    request: Request,  # noqa: ARG001 - required by the rate limiter
    auth: TeacherAuth,  # noqa: ARG001
    ai_service: AIServiceDep,
) -> ClassroomInsights:
    return ClassroomInsights(insights=await ai_service.generate_classroom_insights())
