"""Failures raised by the LLM client, grouped by what a caller can do about them."""

from __future__ import annotations

from enum import Enum


class AIRuntimeErrorCategory(str, Enum):
    RATE_LIMIT_OR_QUOTA = "rate_limit_or_quota"
    TIMEOUT = "timeout"
    SCHEMA_VALIDATION = "schema_validation"
    PROVIDER_FAILURE = "provider_failure"

    @property
    def retryable(self) -> bool:
        """Whether asking again later can plausibly succeed."""
        return self in (AIRuntimeErrorCategory.RATE_LIMIT_OR_QUOTA, AIRuntimeErrorCategory.TIMEOUT)


class AIRuntimeError(RuntimeError):
    """Base class for every failure coming out of ``LLMClient``."""

    def __init__(self, message: str, *, category: AIRuntimeErrorCategory) -> None:
        super().__init__(message)
        self.category = category

    @property
    def retryable(self) -> bool:
        return self.category.retryable


class AIRateLimitOrQuotaError(AIRuntimeError):
    def __init__(self, message: str) -> None:
        super().__init__(message, category=AIRuntimeErrorCategory.RATE_LIMIT_OR_QUOTA)


class AITimeoutError(AIRuntimeError):
    def __init__(self, message: str) -> None:
        super().__init__(message, category=AIRuntimeErrorCategory.TIMEOUT)


class AISchemaValidationError(AIRuntimeError):
    """The model answered, but not in the shape a hint, lesson or recommendation needs."""

    def __init__(self, message: str) -> None:
        super().__init__(message, category=AIRuntimeErrorCategory.SCHEMA_VALIDATION)


class AIProviderError(AIRuntimeError):
    """Provider-side failure, or no model configured at all."""

    def __init__(self, message: str) -> None:
        super().__init__(message, category=AIRuntimeErrorCategory.PROVIDER_FAILURE)
