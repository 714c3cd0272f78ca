"""Dialogue responder: the boundary to the text-generation model.

The session manager only depends on the DialogueResponder protocol
(prompt in, assistant text out). LLMResponder implements it with a
pydantic-ai agent over any OpenAI-compatible gateway.
"""

from __future__ import annotations

import logging
import time
from typing import Protocol

from pydantic_ai import Agent
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from tag_intake.config import settings
from tag_intake.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)


class DialogueResponder(Protocol):
    """Generates the assistant reply for a fully assembled prompt."""

    async def generate(self, prompt: str) -> str:
        """Return the assistant text for ``prompt``.

        May raise on transport, quota or configuration errors; the caller
        treats any failure as "dialogue unavailable for this turn".
        """
        ...


def create_dialogue_agent(
    *,
    model_name: str | None = None,
    base_url: str | None = None,
    api_key: str | None = None,
) -> Agent[None, str]:
    """Create the plain-text dialogue agent.

    The prompt already carries the instructions and the replayed history,
    so the agent has no system prompt of its own.
    """
    model = OpenAIChatModel(
        model_name or settings.model_chat,
        provider=OpenAIProvider(
            base_url=base_url or settings.llm_base_url,
            api_key=api_key or settings.llm_api_key,
        ),
    )
    return Agent(model, output_type=str, retries=settings.responder_retries)


class LLMResponder:
    """DialogueResponder backed by a pydantic-ai agent.

    Usage:
        responder = LLMResponder()
        text = await responder.generate(prompt)
    """

    def __init__(
        self,
        *,
        model_name: str | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
    ) -> None:
        self._model_name = model_name or settings.model_chat
        self._api_key = api_key or settings.llm_api_key
        self._agent: Agent[None, str] | None = None
        if self._api_key:
            self._agent = create_dialogue_agent(
                model_name=self._model_name,
                base_url=base_url,
                api_key=self._api_key,
            )
        else:
            logger.warning("LLM_API_KEY not set - dialogue responder is unavailable")

    @property
    def configured(self) -> bool:
        return self._agent is not None

    async def generate(self, prompt: str) -> str:
        if self._agent is None:
            raise UpstreamUnavailableError("Dialogue responder not configured - LLM_API_KEY missing")

        start_time = time.time()
        result = await self._agent.run(prompt)

        if settings.log_api_calls:
            elapsed = (time.time() - start_time) * 1000  # ms
            logger.info(
                "[DIALOGUE] %s (%d prompt chars) → %d chars (%.0fms)",
                self._model_name, len(prompt), len(result.output), elapsed,
            )

        return result.output
