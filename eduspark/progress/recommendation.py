"""Bounded, failure-tolerant access to the recommendation oracle."""

import asyncio
import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eduspark.ai.errors import AIRuntimeError
from eduspark.ai.service import AIService, get_ai_service
from eduspark.config.settings import get_settings
from eduspark.courses.models import Course, Lesson
from eduspark.database.session import DbSession
from eduspark.exceptions import OracleUnavailableError

from .protocols import RecommendationOracle
from .schemas import NextLessonRecommendation


logger = logging.getLogger(__name__)


class RecommendationService:
    """Wraps a RecommendationOracle so that "continue learning" never fails a request.

    Errors, timeouts and suggestions pointing at lessons that do not exist all
    degrade to ``None``.
    """

    def __init__(self, session: AsyncSession, oracle: RecommendationOracle, timeout: float) -> None:
        self.session = session
        self.oracle = oracle
        self.timeout = timeout

    async def recommend_next_lesson(self, user_id: str) -> NextLessonRecommendation | None:
        try:
            recommendation = await asyncio.wait_for(self.oracle.recommend_next_lesson(user_id), timeout=self.timeout)
        except TimeoutError:
            logger.warning(f"Recommendation oracle timed out after {self.timeout}s for user {user_id}")
            return None
        except (AIRuntimeError, OracleUnavailableError) as e:
            logger.warning(f"Recommendation oracle failed for user {user_id}: {e}")
            return None
        except Exception as e:
            logger.warning(f"Recommendation oracle raised {type(e).__name__} for user {user_id}: {e}", exc_info=True)
            return None

        if not recommendation.lesson_id:
            return None

        lesson = await self.session.get(Lesson, recommendation.lesson_id)
        if lesson is None:
            logger.warning(f"Recommendation oracle suggested unknown lesson {recommendation.lesson_id}")
            return None
        if await self.session.get(Course, lesson.course_id) is None:
            return None

        # The lesson row is authoritative for its course
        return recommendation.model_copy(update={"course_id": lesson.course_id})


async def get_recommendation_service(
    session: DbSession,
    oracle: Annotated[AIService, Depends(get_ai_service)],
) -> RecommendationService:
    return RecommendationService(session, oracle, timeout=get_settings().AI_RECOMMENDATION_TIMEOUT)


Recommender = Annotated[RecommendationService, Depends(get_recommendation_service)]
