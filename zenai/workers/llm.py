from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from pydantic_ai import Agent
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.litellm import LiteLLMProvider

from zenai.config import get_settings
from zenai.constants.default_system_prompt import DefaultSystemPrompt
from zenai.infra.logging_config import get_logger

logger = get_logger()

TITLE_MAX_LENGTH = 100
TITLE_FALLBACK_LENGTH = 50

TITLE_PROMPT = (
    "Generate a short, descriptive title (max 8 words) for a conversation that "
    'starts with this message: "{message}". Only respond with the title, nothing else.'
)


@dataclass
class CompletionResult:
    text: str
    processing_time_ms: int
    tokens_used: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _fallback_title(message: str) -> str:
    return message.strip()[:TITLE_FALLBACK_LENGTH] or "New conversation"


def _total_tokens(result) -> Optional[int]:
    # usage is a method on pydantic-ai 1.x and a property on 2.x
    usage = result.usage
    if callable(usage):
        usage = usage()
    return getattr(usage, "total_tokens", None)


class LLMRunner:
    """
    Text completion on a pydantic_ai Agent.

    The conversation context is already rendered into the prompt by
    zenai.core.context_window, so no message_history is passed to the agent.
    Agents are built on first use; pass `model` to run against a prebuilt model.
    """

    def __init__(
        self,
        model_name: str,
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
        system_prompt: Optional[str] = None,
        model: Optional[Model] = None,
    ) -> None:
        self.model_name = model_name
        self._api_key = api_key
        self._api_base = api_base
        self._system_prompt = system_prompt or DefaultSystemPrompt.CONTENT
        self._model = model
        self._agent: Optional[Agent] = None
        self._title_agent: Optional[Agent] = None

    @property
    def is_configured(self) -> bool:
        return self._model is not None or bool(self._api_key)

    def _get_model(self) -> Model:
        if self._model is None:
            logger.info(f"Initializing LLM runner with model {self.model_name}")
            provider = LiteLLMProvider(api_key=self._api_key, api_base=self._api_base)
            self._model = OpenAIChatModel(self.model_name, provider=provider)
        return self._model

    def _get_agent(self) -> Agent:
        if self._agent is None:
            self._agent = Agent(self._get_model(), instructions=self._system_prompt)
        return self._agent

    def _get_title_agent(self) -> Agent:
        if self._title_agent is None:
            self._title_agent = Agent(self._get_model())
        return self._title_agent

    async def complete(self, prompt_with_context: str) -> CompletionResult:
        """Run one completion. Failures come back as CompletionResult.error, never raised."""
        started = time.monotonic()
        try:
            result = await self._get_agent().run(prompt_with_context)
            text = str(result.output)
            tokens_used = _total_tokens(result)
        except Exception as exc:
            elapsed = int((time.monotonic() - started) * 1000)
            logger.exception("LLM completion failed after %d ms", elapsed)
            return CompletionResult(
                text="", processing_time_ms=elapsed, error=str(exc) or type(exc).__name__
            )
        return CompletionResult(
            text=text,
            processing_time_ms=int((time.monotonic() - started) * 1000),
            tokens_used=tokens_used,
        )

    async def generate_title(self, first_message: str) -> str:
        try:
            result = await self._get_title_agent().run(
                TITLE_PROMPT.format(message=first_message)
            )
        except Exception:
            logger.warning("Title generation failed, using message prefix", exc_info=True)
            return _fallback_title(first_message)
        title = str(result.output).strip().strip('"').strip()
        if not title:
            return _fallback_title(first_message)
        return title[:TITLE_MAX_LENGTH]


def build_llm_runner_from_env() -> LLMRunner:
    settings = get_settings()
    logger.info(
        "LLM runner config: model=%s, api_key=%s, api_base=%s",
        settings.llm_model,
        "set" if settings.litellm_api_key else "not set",
        settings.litellm_api_base or "(default)",
    )
    if not settings.litellm_api_key:
        logger.warning(
            "LITELLM_API_KEY is not set; the bot will answer with a configuration notice."
        )
    return LLMRunner(
        model_name=settings.llm_model,
        api_key=settings.litellm_api_key,
        api_base=settings.litellm_api_base,
    )
