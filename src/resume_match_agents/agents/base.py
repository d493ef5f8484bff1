"""Base agent with LLM calling and start/end logging."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, TypeVar

import structlog
from pydantic import BaseModel

if TYPE_CHECKING:
    from resume_match_core.config.settings import Settings
    from resume_match_core.interfaces.completion import CompletionClient

T = TypeVar("T", bound=BaseModel)

logger = structlog.get_logger()


class BaseAgent:
    """Shared plumbing for LLM-backed components.

    The completion client is injected so tests can substitute a fake.
    """

    agent_name: str = "base"

    def __init__(self, settings: Settings, llm: CompletionClient) -> None:
        """Initialize with settings and a completion client."""
        self.settings = settings
        self._llm = llm

    def _log_start(self, context: dict[str, object] | None = None) -> None:
        """Log agent execution start."""
        logger.info(
            "agent_start",
            agent=self.agent_name,
            **(context or {}),
        )

    def _log_end(
        self, duration: float, context: dict[str, object] | None = None
    ) -> None:
        """Log agent execution end with duration."""
        logger.info(
            "agent_end",
            agent=self.agent_name,
            duration_seconds=round(duration, 2),
            **(context or {}),
        )

    async def _call_llm(
        self,
        messages: list[dict[str, str]],
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Call the completion client once and return its text.

        ProviderError from the client propagates unchanged.
        """
        start = time.monotonic()
        text = await self._llm.complete(
            messages=messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        logger.debug(
            "llm_call_complete",
            agent=self.agent_name,
            model=model,
            duration=round(time.monotonic() - start, 2),
            response_chars=len(text),
        )
        return text

    async def _call_structured(
        self,
        messages: list[dict[str, str]],
        model: str,
        response_model: type[T],
        temperature: float,
        max_tokens: int,
        max_retries: int,
    ) -> T:
        """Call the completion client for a reply validated into response_model.

        MalformedOutputError and ProviderError from the client propagate unchanged.
        """
        start = time.monotonic()
        result = await self._llm.complete_model(
            messages=messages,
            response_model=response_model,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            max_retries=max_retries,
        )
        logger.debug(
            "llm_call_complete",
            agent=self.agent_name,
            model=model,
            duration=round(time.monotonic() - start, 2),
            response_model=response_model.__name__,
        )
        return result
