"""OpenAI chat completion wrapper with token accounting."""

import asyncio
from dataclasses import dataclass

from openai import OpenAI, RateLimitError

from app.core.config import Settings, get_settings
from app.core.errors import ProviderError
from app.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChatResult:
    """Generated text plus the usage counters reported by the provider."""

    text: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


def _get_client() -> OpenAI:
    """Get OpenAI client instance."""
    settings = get_settings()
    return OpenAI(api_key=settings.OPENAI_API_KEY)


def complete_chat(
    messages: list[dict[str, str]],
    *,
    model: str,
    temperature: float,
    max_tokens: int,
) -> ChatResult:
    """
    Run one chat completion.

    Args:
        messages: Role-tagged messages (system/user/assistant)
        model: Model name
        temperature: Sampling temperature
        max_tokens: Completion token cap

    Returns:
        ChatResult with text and token usage

    Raises:
        ProviderError: If the call fails or returns no content
    """
    client = _get_client()

    try:
        response = client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except RateLimitError as e:
        logger.warning(f"Chat completion rate limited: {e}")
        raise ProviderError(f"Generation rate limited: {e}", rate_limited=True) from e
    except Exception as e:
        logger.error(f"Chat completion failed: {e}")
        raise ProviderError(f"Generation request failed: {e}") from e

    if not response.choices or not response.choices[0].message.content:
        raise ProviderError("Generation returned no content")

    usage = response.usage
    result = ChatResult(
        text=response.choices[0].message.content,
        model=getattr(response, "model", None) or model,
        prompt_tokens=usage.prompt_tokens if usage else 0,
        completion_tokens=usage.completion_tokens if usage else 0,
        total_tokens=usage.total_tokens if usage else 0,
    )

    logger.debug(
        f"Completion from {model}: {result.total_tokens} tokens",
        extra={"model": model, "tokens": result.total_tokens},
    )
    return result


async def complete_chat_async(
    messages: list[dict[str, str]],
    *,
    model: str,
    temperature: float,
    max_tokens: int,
) -> ChatResult:
    """Async wrapper around complete_chat using thread pool."""
    return await asyncio.to_thread(
        complete_chat,
        messages,
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
    )


def estimate_cost(
    prompt_tokens: int,
    completion_tokens: int,
    settings: Settings | None = None,
) -> float:
    """Estimate USD cost of a completion from the configured per-1K price table."""
    settings = settings or get_settings()
    input_cost = (prompt_tokens / 1000) * settings.LLM_INPUT_COST_PER_1K
    output_cost = (completion_tokens / 1000) * settings.LLM_OUTPUT_COST_PER_1K
    return round(input_cost + output_cost, 4)
