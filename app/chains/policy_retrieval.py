"""Retrieve the company policies most relevant to an employee question."""

import asyncio

from app.core.config import get_settings
from app.core.embeddings import embed_query_async
from app.core.logging import get_logger
from app.core.schemas_chat import RetrievalResult, RetrievedPolicy
from app.db.policies import match_policies

logger = get_logger(__name__)


async def retrieve_policies(
    question: str,
    *,
    similarity_threshold: float | None = None,
    max_results: int | None = None,
) -> RetrievalResult:
    """
    Embed the question and search policies by similarity.

    Failures never raise: a provider or store error degrades to an empty
    result with `error` set, so the caller can answer without grounding.

    Args:
        question: Non-empty question text
        similarity_threshold: Minimum similarity (defaults to RAG_SIMILARITY_THRESHOLD)
        max_results: Maximum policies (defaults to RAG_MAX_POLICIES)

    Returns:
        RetrievalResult with policies sorted by similarity, highest first
    """
    settings = get_settings()
    threshold = (
        settings.RAG_SIMILARITY_THRESHOLD if similarity_threshold is None else similarity_threshold
    )
    limit = settings.RAG_MAX_POLICIES if max_results is None else max_results

    try:
        query_embedding = await embed_query_async(question)
        rows = await asyncio.to_thread(
            match_policies, query_embedding, match_threshold=threshold, match_count=limit
        )
        policies = [RetrievedPolicy.model_validate(row) for row in rows]
    except Exception as e:
        logger.error(f"Policy retrieval failed, continuing without policies: {e}")
        return RetrievalResult(policies=[], error=str(e))

    # Threshold and count enforced locally as well as in match_policies
    policies = [p for p in policies if p.similarity >= threshold]
    policies.sort(key=lambda p: p.similarity, reverse=True)
    policies = policies[:limit]

    logger.info(
        f"Retrieved {len(policies)} policies",
        extra={
            "threshold": threshold,
            "scores": [round(p.similarity, 3) for p in policies],
        },
    )
    return RetrievalResult(policies=policies)
