import asyncio
import copy
import json
import logging
from typing import Any, TypeVar

import instructor
import litellm
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from eduspark.ai.errors import (
    AIProviderError,
    AIRateLimitOrQuotaError,
    AIRuntimeError,
    AISchemaValidationError,
    AITimeoutError,
)
from eduspark.config.settings import get_settings


ModelT = TypeVar("ModelT", bound=BaseModel)

# Structured-output attempts through LiteLLM json_schema before falling back to Instructor
_SCHEMA_ATTEMPTS = 2


def _classify_error(error: Exception) -> AIRuntimeError:
    """Map provider and transport failures onto the internal error taxonomy."""
    if isinstance(error, AIRuntimeError):
        return error
    if isinstance(error, TimeoutError | litellm.Timeout):
        return AITimeoutError(f"Model request timed out: {error}")
    if isinstance(error, litellm.RateLimitError):
        return AIRateLimitOrQuotaError(f"Model provider rate limit reached: {error}")
    if isinstance(error, PydanticValidationError | TypeError | json.JSONDecodeError):
        return AISchemaValidationError(f"Structured response validation failed: {error}")
    return AIProviderError(f"Model completion failed: {error}")


class LLMClient:
    """Manages LLM completion requests and structured (pydantic) output."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def complete(
        self,
        messages: list[dict[str, Any]],
        temperature: float | None = None,
        max_tokens: int | None = None,
        user_id: str | None = None,
        response_format: Any | None = None,
        model: str | None = None,
    ) -> Any:
        """Low-level completion method using LiteLLM directly."""
        try:
            settings = get_settings()
            request_model = model or settings.primary_llm_model

            kwargs: dict[str, Any] = {
                "model": request_model,
                "messages": messages,
                "temperature": temperature if temperature is not None else settings.ai_temperature_default,
                "timeout": settings.ai_request_timeout,
            }

            # Only add max_tokens if explicitly provided - let model decide otherwise
            if max_tokens is not None:
                kwargs["max_tokens"] = max_tokens
            if response_format is not None:
                kwargs["response_format"] = response_format
            if user_id:
                # Provider-side tracking; dropped for providers that do not support it
                kwargs["user"] = str(user_id)

            return await asyncio.wait_for(litellm.acompletion(**kwargs), timeout=settings.ai_request_timeout)

        except Exception as e:
            self._logger.exception("Error in model completion")
            raise _classify_error(e) from e

    async def get_completion(
        self,
        messages: list[dict[str, Any]],
        response_model: type[ModelT] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        user_id: str | None = None,
        model: str | None = None,
    ) -> Any:
        """Get a completion, validated into ``response_model`` when one is given.

        Structured output goes through LiteLLM's json_schema response format
        first and falls back to Instructor when the model's reply cannot be
        validated.
        """
        if response_model is None:
            response = await self.complete(
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                user_id=user_id,
                model=model,
            )
            return response.choices[0].message.content

        settings = get_settings()
        try:
            request_model = model or settings.primary_llm_model
        except ValueError as e:
            raise AIProviderError(str(e)) from e

        try:
            return await self._complete_with_litellm_schema(
                messages=messages,
                response_model=response_model,
                temperature=temperature,
                max_tokens=max_tokens,
                user_id=user_id,
                model=request_model,
            )
        except (AITimeoutError, AIRateLimitOrQuotaError):
            # Retrying through another path would not help
            raise
        except AIRuntimeError:
            self._logger.warning(
                "LiteLLM structured output failed on model %s; falling back to Instructor",
                request_model,
                exc_info=True,
            )

        try:
            return await self._complete_with_instructor(
                messages=messages,
                response_model=response_model,
                temperature=temperature if temperature is not None else settings.ai_temperature_default,
                max_tokens=max_tokens,
                model=request_model,
                request_timeout=settings.ai_request_timeout,
            )
        except Exception as e:
            self._logger.exception("Instructor fallback failed")
            raise _classify_error(e) from e

    async def _complete_with_litellm_schema(
        self,
        *,
        messages: list[dict[str, Any]],
        response_model: type[ModelT],
        temperature: float | None,
        max_tokens: int | None,
        user_id: str | None,
        model: str,
    ) -> ModelT:
        last_error: Exception | None = None
        for attempt in range(1, _SCHEMA_ATTEMPTS + 1):
            response = await self.complete(
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                user_id=user_id,
                response_format=self._build_response_format(response_model),
                model=model,
            )
            try:
                return self._coerce_response_model(response, response_model)
            except (PydanticValidationError, TypeError) as parse_error:
                last_error = parse_error
                self._logger.warning(
                    "Structured response validation failed on attempt %s: %s",
                    attempt,
                    parse_error,
                )

        raise AISchemaValidationError(f"Structured response validation failed: {last_error}")

    async def _complete_with_instructor(
        self,
        *,
        messages: list[dict[str, Any]],
        response_model: type[ModelT],
        temperature: float,
        max_tokens: int | None,
        model: str,
        request_timeout: int,
    ) -> ModelT:
        client = instructor.from_litellm(litellm.acompletion)
        instructor_kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "response_model": response_model,
            "temperature": temperature,
            "max_retries": 3,
            "timeout": request_timeout,
        }
        if max_tokens is not None:
            instructor_kwargs["max_tokens"] = max_tokens

        return await asyncio.wait_for(
            client.chat.completions.create(**instructor_kwargs),
            timeout=request_timeout,
        )

    def _build_response_format(self, response_model: type[BaseModel]) -> dict[str, Any]:
        schema = copy.deepcopy(response_model.model_json_schema())
        self._normalize_json_schema(schema)
        return {
            "type": "json_schema",
            "json_schema": {
                "name": response_model.__name__,
                "schema": schema,
            },
        }

    def _normalize_json_schema(self, node: Any) -> None:
        """Make every object strict: all properties required, no extras."""
        if not isinstance(node, dict):
            return

        definitions = node.get("$defs") or node.get("definitions")
        if isinstance(definitions, dict):
            for child in definitions.values():
                self._normalize_json_schema(child)

        props = node.get("properties")
        if isinstance(props, dict) and props:
            node["required"] = list(props.keys())
            if "additionalProperties" not in node:
                node["additionalProperties"] = False
            for child in props.values():
                self._normalize_json_schema(child)

        items = node.get("items")
        if isinstance(items, dict):
            self._normalize_json_schema(items)

        for key in ("allOf", "anyOf", "oneOf"):
            variants = node.get(key)
            if isinstance(variants, list):
                for child in variants:
                    self._normalize_json_schema(child)

    def _coerce_response_model(self, raw_response: Any, response_model: type[ModelT]) -> ModelT:
        """Validate the first choice's parsed payload or JSON content into ``response_model``."""
        choices = getattr(raw_response, "choices", None)
        if not choices:
            msg = f"Model returned no choices for {response_model.__name__}"
            raise TypeError(msg)

        message = choices[0].message
        parsed = getattr(message, "parsed", None)
        if isinstance(parsed, response_model):
            return parsed
        if isinstance(parsed, dict):
            return response_model.model_validate(parsed)

        content = getattr(message, "content", None)
        if isinstance(content, str) and content.strip():
            return response_model.model_validate_json(self._extract_json_block(content))

        msg = f"Unable to coerce structured response into {response_model.__name__}"
        raise TypeError(msg)

    def _extract_json_block(self, content: str) -> str:
        """Strip markdown code fences some models wrap around JSON."""
        stripped = content.strip()
        if stripped.startswith("```"):
            stripped = stripped.split("\n", 1)[1] if "\n" in stripped else ""
            stripped = stripped.rsplit("```", 1)[0]
        return stripped.strip()
