"""Progress tracking API endpoints."""

import logging

from fastapi import APIRouter
from sqlalchemy import select

from eduspark.auth import CurrentAuth

from .models import Badge
from .recommendation import Recommender
from .schemas import (
    BadgeResponse,
    LessonCompletionResponse,
    NextLessonRecommendation,
    QuestionAnswerRequest,
    QuestionAnswerResult,
    StudentStats,
)
from .service import ProgressService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/progress", tags=["progress"])


@router.post("/lessons/{lesson_id}/complete")
async def complete_lesson(lesson_id: str, auth: CurrentAuth, recommender: Recommender) -> LessonCompletionResponse:
    """Mark a lesson completed, then suggest what to do next.

    Completion is committed before the recommendation is requested; a failed
    or slow recommendation only leaves ``recommendation`` empty.
    """
    completion = await ProgressService(auth.session).complete_lesson(auth.user_id, lesson_id)
    recommendation = await recommender.recommend_next_lesson(auth.user_id)
    return LessonCompletionResponse(**completion.model_dump(), recommendation=recommendation)


@router.post("/lessons/{lesson_id}/questions/{question_id}/answer")
async def record_question_answer(
    lesson_id: str,
    question_id: str,
    data: QuestionAnswerRequest,
    auth: CurrentAuth,
) -> QuestionAnswerResult:
    return await ProgressService(auth.session).record_question_answer(
        auth.user_id, lesson_id, question_id, data.answer
    )


@router.get("/stats")
async def get_student_stats(auth: CurrentAuth) -> StudentStats:
    """Total XP, current streak, completed lesson count and earned badges."""
    return await ProgressService(auth.session).get_student_stats(auth.user_id)


@router.get("/recommendation")
async def get_recommendation(auth: CurrentAuth, recommender: Recommender) -> NextLessonRecommendation | None:
    return await recommender.recommend_next_lesson(auth.user_id)


@router.get("/badges")
async def list_badges(auth: CurrentAuth) -> list[BadgeResponse]:
    result = await auth.session.execute(select(Badge).order_by(Badge.id))
    return [BadgeResponse.model_validate(badge) for badge in result.scalars().all()]
