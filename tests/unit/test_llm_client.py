"""LLMClient structured output: json_schema path, fence stripping, fallback and error classification."""

import json
from types import SimpleNamespace
from typing import Any

import litellm
import pytest

from eduspark.ai.client import LLMClient
from eduspark.ai.errors import AIProviderError, AISchemaValidationError, AITimeoutError
from eduspark.ai.models import TutorHint


MESSAGES = [{"role": "user", "content": "Give me a hint."}]


def fake_response(content: str) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content, parsed=None))])


@pytest.fixture(autouse=True)
def llm_model(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRIMARY_LLM_MODEL", "openai/gpt-4o-mini")


def patch_acompletion(monkeypatch: pytest.MonkeyPatch, *results: Any) -> list[dict[str, Any]]:
    """Make litellm.acompletion return (or raise) the given results in order; return the recorded kwargs."""
    calls: list[dict[str, Any]] = []
    queue = list(results)

    async def acompletion(**kwargs: Any) -> Any:
        calls.append(kwargs)
        result = queue.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr(litellm, "acompletion", acompletion)
    return calls


@pytest.mark.asyncio
async def test_structured_output_uses_json_schema(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = patch_acompletion(monkeypatch, fake_response(json.dumps({"hint_text": "Isolate x first."})))

    hint = await LLMClient().get_completion(MESSAGES, response_model=TutorHint)

    assert hint == TutorHint(hint_text="Isolate x first.")
    response_format = calls[0]["response_format"]
    assert response_format["type"] == "json_schema"
    assert response_format["json_schema"]["name"] == "TutorHint"
    assert response_format["json_schema"]["schema"]["required"] == ["hint_text"]
    assert response_format["json_schema"]["schema"]["additionalProperties"] is False


@pytest.mark.asyncio
async def test_code_fences_are_stripped(monkeypatch: pytest.MonkeyPatch) -> None:
    patch_acompletion(monkeypatch, fake_response('```json\n{"hint_text": "Subtract 3."}\n```'))

    hint = await LLMClient().get_completion(MESSAGES, response_model=TutorHint)

    assert hint.hint_text == "Subtract 3."


@pytest.mark.asyncio
async def test_plain_completion_returns_text(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = patch_acompletion(monkeypatch, fake_response("Hello there"))

    assert await LLMClient().get_completion(MESSAGES) == "Hello there"
    assert "response_format" not in calls[0]


@pytest.mark.asyncio
async def test_invalid_output_falls_back_to_instructor(monkeypatch: pytest.MonkeyPatch) -> None:
    patch_acompletion(monkeypatch, fake_response("not json"), fake_response('{"wrong": 1}'))
    fallback_calls: list[str] = []

    async def fake_instructor(self: LLMClient, **kwargs: Any) -> TutorHint:
        fallback_calls.append(kwargs["model"])
        return TutorHint(hint_text="From the fallback.")

    monkeypatch.setattr(LLMClient, "_complete_with_instructor", fake_instructor)

    hint = await LLMClient().get_completion(MESSAGES, response_model=TutorHint)

    assert hint.hint_text == "From the fallback."
    assert fallback_calls == ["openai/gpt-4o-mini"]


@pytest.mark.asyncio
async def test_failed_fallback_is_classified(monkeypatch: pytest.MonkeyPatch) -> None:
    patch_acompletion(monkeypatch, fake_response("not json"), fake_response("still not json"))

    async def broken_instructor(self: LLMClient, **kwargs: Any) -> TutorHint:
        raise TypeError("bad tool call")

    monkeypatch.setattr(LLMClient, "_complete_with_instructor", broken_instructor)

    with pytest.raises(AISchemaValidationError):
        await LLMClient().get_completion(MESSAGES, response_model=TutorHint)


@pytest.mark.asyncio
async def test_timeout_is_not_retried(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = patch_acompletion(monkeypatch, TimeoutError())

    async def unexpected_instructor(self: LLMClient, **kwargs: Any) -> TutorHint:
        pytest.fail("timeouts must not fall back")

    monkeypatch.setattr(LLMClient, "_complete_with_instructor", unexpected_instructor)

    with pytest.raises(AITimeoutError):
        await LLMClient().get_completion(MESSAGES, response_model=TutorHint)
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_missing_model_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PRIMARY_LLM_MODEL")

    with pytest.raises(AIProviderError):
        await LLMClient().get_completion(MESSAGES, response_model=TutorHint)
