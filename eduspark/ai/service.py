"""Centralized AI Service for all AI operations.

This service is the single entry point for AI-related functionality and the
LLM-backed implementation of the recommendation and hint oracles.
"""

import json
import logging
from collections.abc import Awaitable
from typing import TypeVar

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError

from eduspark.ai.analytics import (
    get_available_lessons,
    get_classroom_analytics,
    get_performance_by_topic,
    get_recent_topics,
)
from eduspark.ai.client import LLMClient
from eduspark.ai.errors import AIRuntimeError
from eduspark.ai.models import (
    ClassroomInsights,
    GeneratedLessonContent,
    PersonalizedChallenge,
    TutorHint,
)
from eduspark.ai.prompts import (
    CLASSROOM_INSIGHTS_PROMPT,
    LESSON_CONTENT_PROMPT,
    NEXT_LESSON_RECOMMENDATION_PROMPT,
    PERSONALIZED_CHALLENGE_PROMPT,
    TUTOR_HINT_PROMPT,
)
from eduspark.database.session import Database
from eduspark.exceptions import OracleUnavailableError
from eduspark.progress.schemas import NextLessonRecommendation


logger = logging.getLogger(__name__)

T = TypeVar("T")

ALL_LESSONS_DONE_REASONING = "You've mastered everything! Great work."


class AIService:
    """ALL AI operations go through here."""

    def __init__(self, database: Database, llm_client: LLMClient | None = None) -> None:
        self._database = database
        self._llm_client = llm_client or LLMClient()

    async def _run(self, oracle: str, call: Awaitable[T]) -> T:
        """Await an LLM call, reporting runtime failures as OracleUnavailableError."""
        try:
            return await call
        except AIRuntimeError as e:
            logger.warning(f"AI flow '{oracle}' failed ({e.category.value}): {e}")
            raise OracleUnavailableError(oracle, retryable=e.retryable) from e

    # Progression oracles
    async def recommend_next_lesson(self, user_id: str) -> NextLessonRecommendation:
        """Pick the next lesson from the student's uncompleted lessons and quiz performance."""
        try:
            async with self._database.session() as session:
                performance = await get_performance_by_topic(session, user_id)
                available = await get_available_lessons(session, user_id)
        except SQLAlchemyError as e:
            logger.warning(f"Could not load learner analytics for user {user_id}: {e}")
            raise OracleUnavailableError("recommendation") from e

        if not available:
            return NextLessonRecommendation(reasoning=ALL_LESSONS_DONE_REASONING)

        prompt = NEXT_LESSON_RECOMMENDATION_PROMPT.format(
            performance_json=json.dumps([item.model_dump() for item in performance]),
            available_lessons_json=json.dumps([item.model_dump() for item in available]),
        )
        return await self._run(
            "recommendation",
            self._llm_client.get_completion(
                messages=[{"role": "user", "content": prompt}],
                response_model=NextLessonRecommendation,
                user_id=user_id,
            ),
        )

    async def get_tutor_hint(self, lesson_title: str, question_text: str, options: list[str] | None = None) -> str:
        options_block = "Options:\n" + "\n".join(f"- {option}" for option in options) + "\n" if options else ""
        prompt = TUTOR_HINT_PROMPT.format(
            lesson_title=lesson_title,
            question_text=question_text,
            options_block=options_block,
        )
        hint = await self._run(
            "hint",
            self._llm_client.get_completion(
                messages=[{"role": "user", "content": prompt}],
                response_model=TutorHint,
            ),
        )
        return hint.hint_text

    # Content generation
    async def generate_personalized_challenge(self, user_id: str) -> PersonalizedChallenge:
        async with self._database.session() as session:
            topics = await get_recent_topics(session, user_id)

        prompt = PERSONALIZED_CHALLENGE_PROMPT.format(recent_topics=", ".join(topics) if topics else "none yet")
        return await self._run(
            "challenge",
            self._llm_client.get_completion(
                messages=[{"role": "user", "content": prompt}],
                response_model=PersonalizedChallenge,
                user_id=user_id,
            ),
        )

    async def generate_lesson_content(self, title: str) -> GeneratedLessonContent:
        return await self._run(
            "lesson_content",
            self._llm_client.get_completion(
                messages=[{"role": "user", "content": LESSON_CONTENT_PROMPT.format(title=title)}],
                response_model=GeneratedLessonContent,
            ),
        )

    async def generate_classroom_insights(self) -> list[str]:
        async with self._database.session() as session:
            analytics = await get_classroom_analytics(session)

        insights = await self._run(
            "classroom_insights",
            self._llm_client.get_completion(
                messages=[
                    {
                        "role": "user",
                        "content": CLASSROOM_INSIGHTS_PROMPT.format(analytics_json=analytics.model_dump_json()),
                    }
                ],
                response_model=ClassroomInsights,
            ),
        )
        return insights.insights


def get_ai_service(request: Request) -> AIService:
    """Return the AI service attached to the running application."""
    return request.app.state.ai_service
