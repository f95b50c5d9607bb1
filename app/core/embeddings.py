"""OpenAI embeddings generation with validation."""

import asyncio
import time
from collections.abc import Callable
from typing import Any

from openai import OpenAI, RateLimitError

from app.core.config import get_settings
from app.core.errors import ProviderError
from app.core.logging import get_logger

logger = get_logger(__name__)


def _get_client() -> OpenAI:
    """Get OpenAI client instance."""
    settings = get_settings()
    return OpenAI(api_key=settings.OPENAI_API_KEY)


def policy_embedding_text(policy: dict[str, Any]) -> str:
    """Text embedded for a policy row: title and category give the vector more context."""
    return f"{policy['title']}\n\nCategory: {policy['category']}\n\n{policy['content']}"


def embed_texts(texts: list[str]) -> list[list[float]]:
    """
    Generate embeddings for a list of texts using OpenAI.

    Args:
        texts: List of text strings to embed

    Returns:
        List of embedding vectors (each vector is list of floats)

    Raises:
        ValueError: If embedding dimension doesn't match expected EMBEDDING_DIM
        ProviderError: If the OpenAI API call fails
    """
    if not texts:
        return []

    settings = get_settings()
    client = _get_client()

    try:
        response = client.embeddings.create(
            model=settings.EMBEDDING_MODEL,
            input=texts,
        )
    except RateLimitError as e:
        logger.warning(f"Embedding request rate limited: {e}")
        raise ProviderError(f"Embedding rate limited: {e}", rate_limited=True) from e
    except Exception as e:
        logger.error(f"Failed to generate embeddings: {e}")
        raise ProviderError(f"Embedding request failed: {e}") from e

    embeddings = []
    for i, embedding_obj in enumerate(response.data):
        embedding = embedding_obj.embedding

        if len(embedding) != settings.EMBEDDING_DIM:
            raise ValueError(
                f"Embedding dimension mismatch for text {i}: "
                f"expected {settings.EMBEDDING_DIM}, got {len(embedding)}"
            )

        embeddings.append(embedding)

    logger.info(
        f"Generated {len(embeddings)} embeddings using {settings.EMBEDDING_MODEL}",
        extra={"model": settings.EMBEDDING_MODEL, "count": len(embeddings)},
    )

    return embeddings


def embed_query(text: str) -> list[float]:
    """Embed a single query string."""
    return embed_texts([text])[0]


def embed_with_backoff(
    texts: list[str],
    sleep: Callable[[float], None] = time.sleep,
) -> list[list[float]]:
    """
    Embed texts for offline batch jobs, retrying once after a rate limit.

    Request handlers must not use this: it may block for RATE_LIMIT_BACKOFF_SECONDS.
    """
    try:
        return embed_texts(texts)
    except ProviderError as e:
        if not e.rate_limited:
            raise
        backoff = get_settings().RATE_LIMIT_BACKOFF_SECONDS
        logger.warning(f"Rate limited, waiting {backoff:.0f}s before retrying once")
        sleep(backoff)
        return embed_texts(texts)


async def embed_texts_async(texts: list[str]) -> list[list[float]]:
    """Async wrapper around embed_texts using thread pool."""
    return await asyncio.to_thread(embed_texts, texts)


async def embed_query_async(text: str) -> list[float]:
    """Async wrapper around embed_query using thread pool."""
    return await asyncio.to_thread(embed_query, text)
