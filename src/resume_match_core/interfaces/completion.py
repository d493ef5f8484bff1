"""Abstract chat-completion interface."""

from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


@runtime_checkable
class CompletionClient(Protocol):
    """Abstract interface for LLM completion providers.

    Implementations raise ProviderError on transport failures and empty replies.
    """

    async def complete(
        self,
        messages: list[dict[str, str]],
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Return the text of a single completion for the given messages."""
        ...

    async def complete_model(
        self,
        messages: list[dict[str, str]],
        response_model: type[T],
        model: str,
        temperature: float,
        max_tokens: int,
        max_retries: int,
    ) -> T:
        """Return the reply validated into response_model.

        An invalid reply is sent back with its validation error until
        max_retries attempts are used up; then MalformedOutputError.
        """
        ...
