"""Contracts for the AI-backed oracles consumed by the progression engine and lesson pages.

The engine depends on these protocols only; ``eduspark.ai.service.AIService``
is the LLM-backed implementation and tests substitute fakes.
"""

from typing import Protocol

from .schemas import NextLessonRecommendation


class RecommendationOracle(Protocol):
    """Suggests which lesson a learner should take next."""

    async def recommend_next_lesson(self, user_id: str) -> NextLessonRecommendation:
        """Return a suggestion; may raise or hang, callers bound and guard the call."""
        ...


class HintOracle(Protocol):
    """Produces a Socratic hint for a quiz question without revealing the answer."""

    async def get_tutor_hint(self, lesson_title: str, question_text: str, options: list[str] | None = None) -> str:
        ...
