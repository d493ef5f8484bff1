"""Anthropic-backed completion client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

import anthropic
import instructor
import structlog
from anthropic import AsyncAnthropic
from instructor.exceptions import InstructorRetryException
from pydantic import BaseModel

from resume_match_core.exceptions import MalformedOutputError, ProviderError

if TYPE_CHECKING:
    from resume_match_core.config.settings import Settings

T = TypeVar("T", bound=BaseModel)

logger = structlog.get_logger()


class AnthropicCompletionClient:
    """Text completions through the Anthropic Messages API.

    System messages are folded into the ``system`` parameter and consecutive
    turns from the same speaker are merged, as the API requires alternating
    user/assistant messages. Structured replies go through instructor.
    """

    def __init__(self, api_key: str, client: AsyncAnthropic | None = None) -> None:
        """Initialize with an API key or a preconfigured client."""
        self._client = client or AsyncAnthropic(api_key=api_key)
        self._instructor: instructor.AsyncInstructor | None = None

    def _get_instructor(self) -> instructor.AsyncInstructor:
        """Wrap the SDK client with instructor on first structured call."""
        if self._instructor is None:
            self._instructor = instructor.from_anthropic(self._client)
        return self._instructor

    async def complete(
        self,
        messages: list[dict[str, str]],
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Return the concatenated text blocks of one completion."""
        system, conversation = split_system_messages(messages)
        kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": conversation,
        }
        if system:
            kwargs["system"] = system

        try:
            response = await self._client.messages.create(**kwargs)
        except anthropic.APIError as e:
            logger.error("completion_failed", model=model, error=str(e))
            raise ProviderError("LLM service unavailable, try again later") from e

        input_tokens, output_tokens = extract_token_usage(response)
        logger.debug(
            "completion_usage",
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

        text = "".join(
            getattr(block, "text", "")
            for block in response.content
            if getattr(block, "type", None) == "text"
        )
        if not text.strip():
            raise ProviderError("LLM returned an empty completion")
        return text

    async def complete_model(
        self,
        messages: list[dict[str, str]],
        response_model: type[T],
        model: str,
        temperature: float,
        max_tokens: int,
        max_retries: int,
    ) -> T:
        """Return a reply validated into response_model.

        instructor re-asks with the validation error until max_retries
        attempts are spent.
        """
        system, conversation = split_system_messages(messages)
        kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": conversation,
            "response_model": response_model,
            "max_retries": max_retries,
        }
        if system:
            kwargs["system"] = system

        try:
            result: T = await self._get_instructor().messages.create(**kwargs)
        except InstructorRetryException as e:
            api_error = find_api_error(e)
            if api_error is not None:
                logger.error("completion_failed", model=model, error=str(api_error))
                raise ProviderError("LLM service unavailable, try again later") from api_error
            logger.warning(
                "structured_reply_invalid",
                model=model,
                response_model=response_model.__name__,
                attempts=e.n_attempts,
            )
            raise MalformedOutputError(
                f"Reply did not match {response_model.__name__} after {e.n_attempts} attempts"
            ) from e
        except anthropic.APIError as e:
            logger.error("completion_failed", model=model, error=str(e))
            raise ProviderError("LLM service unavailable, try again later") from e
        return result


def split_system_messages(
    messages: list[dict[str, str]],
) -> tuple[str, list[dict[str, str]]]:
    """Separate system text from the user/assistant conversation.

    Consecutive same-role turns are joined with a blank line.
    """
    system_parts: list[str] = []
    conversation: list[dict[str, str]] = []
    for message in messages:
        role = message["role"]
        content = message["content"]
        if role == "system":
            system_parts.append(content)
            continue
        if conversation and conversation[-1]["role"] == role:
            conversation[-1] = {
                "role": role,
                "content": f"{conversation[-1]['content']}\n\n{content}",
            }
        else:
            conversation.append({"role": role, "content": content})
    return "\n\n".join(system_parts), conversation


def find_api_error(exc: BaseException) -> anthropic.APIError | None:
    """Return the Anthropic error behind an instructor retry failure, if any."""
    current: BaseException | None = exc
    while current is not None:
        if isinstance(current, anthropic.APIError):
            return current
        last_attempt = getattr(current, "last_attempt", None)
        if last_attempt is not None and last_attempt.failed:
            current = last_attempt.exception()
        else:
            current = current.__cause__
    return None


def extract_token_usage(response: object) -> tuple[int, int]:
    """Extract input/output token counts from a Messages API response.

    Falls back to (0, 0) if the attribute chain is missing.
    """
    usage = getattr(response, "usage", None)
    if usage is None:
        return (0, 0)

    input_tokens = getattr(usage, "input_tokens", 0)
    output_tokens = getattr(usage, "output_tokens", 0)
    return (int(input_tokens or 0), int(output_tokens or 0))


def build_completion_client(settings: Settings) -> AnthropicCompletionClient:
    """Create the completion client from settings."""
    if settings.anthropic_api_key is None:
        msg = "anthropic_api_key is required for LLM calls (set RM_ANTHROPIC_API_KEY)"
        raise ValueError(msg)
    return AnthropicCompletionClient(api_key=settings.anthropic_api_key.get_secret_value())
