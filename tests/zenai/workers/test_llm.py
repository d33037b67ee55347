"""Tests for LLMRunner using pydantic_ai's offline models."""

from types import SimpleNamespace

import pytest
from pydantic_ai.messages import ModelResponse, TextPart
from pydantic_ai.models.function import FunctionModel
from pydantic_ai.models.test import TestModel

from zenai.workers.llm import LLMRunner, _total_tokens, build_llm_runner_from_env


def runner_with(model):
    return LLMRunner(model_name="test", model=model)


def failing(messages, info):
    raise RuntimeError("upstream 429")


@pytest.mark.asyncio
async def test_complete_returns_text_and_usage():
    result = await runner_with(TestModel(custom_output_text="Use reversed().")).complete(
        "User: how do I reverse a list?"
    )
    assert result.ok
    assert result.text == "Use reversed()."
    assert result.tokens_used is not None
    assert result.processing_time_ms >= 0


@pytest.mark.asyncio
async def test_complete_converts_exceptions_to_error():
    result = await runner_with(FunctionModel(failing)).complete("User: hi")
    assert not result.ok
    assert result.text == ""
    assert "upstream 429" in result.error


@pytest.mark.asyncio
async def test_generate_title_strips_quotes_and_caps_length():
    def quoted(messages, info):
        return ModelResponse(parts=[TextPart(content='"Python list tips"')])

    assert await runner_with(FunctionModel(quoted)).generate_title("how?") == "Python list tips"

    def wordy(messages, info):
        return ModelResponse(parts=[TextPart(content="x" * 300)])

    assert len(await runner_with(FunctionModel(wordy)).generate_title("how?")) == 100


@pytest.mark.asyncio
async def test_generate_title_falls_back_to_message_prefix():
    message = "Can you explain how Python decorators work with arguments in detail?"
    title = await runner_with(FunctionModel(failing)).generate_title(message)
    assert title == message[:50]


def test_is_configured_requires_api_key(monkeypatch):
    monkeypatch.delenv("LITELLM_API_KEY", raising=False)
    assert build_llm_runner_from_env().is_configured is False
    assert LLMRunner(model_name="m", api_key="sk-test").is_configured is True


def test_total_tokens_reads_usage_method_or_attribute():
    usage = SimpleNamespace(total_tokens=42)

    assert _total_tokens(SimpleNamespace(usage=lambda: usage)) == 42
    assert _total_tokens(SimpleNamespace(usage=usage)) == 42
    assert _total_tokens(SimpleNamespace(usage=SimpleNamespace())) is None


@pytest.mark.asyncio
async def test_complete_handles_usage_exposed_as_attribute():
    class AttributeUsageAgent:
        async def run(self, prompt):
            return SimpleNamespace(
                output="Use reversed().", usage=SimpleNamespace(total_tokens=7)
            )

    runner = runner_with(TestModel())
    runner._agent = AttributeUsageAgent()

    result = await runner.complete("User: how do I reverse a list?")

    assert result.ok
    assert result.text == "Use reversed()."
    assert result.tokens_used == 7
