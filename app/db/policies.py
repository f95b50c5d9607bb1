"""Policy document operations and vector search."""

from typing import Any

from app.core.logging import get_logger
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)


def match_policies(
    query_embedding: list[float],
    match_threshold: float,
    match_count: int,
) -> list[dict[str, Any]]:
    """
    Search policies by cosine similarity using the match_policies function.

    Args:
        query_embedding: Query embedding vector
        match_threshold: Minimum similarity (1 - cosine distance)
        match_count: Maximum number of rows

    Returns:
        Rows with id, title, category, country, content, similarity

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = supabase.rpc(
            "match_policies",
            {
                "query_embedding": query_embedding,
                "match_threshold": match_threshold,
                "match_count": match_count,
            },
        ).execute()

        if not response.data:
            logger.info("No matching policies found")
            return []

        logger.info(
            f"Found {len(response.data)} matching policies",
            extra={"match_threshold": match_threshold, "match_count": match_count},
        )
        return response.data

    except Exception as e:
        logger.error(f"Failed to search policies: {e}")
        raise


def list_policies_without_embedding() -> list[dict[str, Any]]:
    """List policies whose embedding has not been computed yet."""
    supabase = get_supabase()

    try:
        response = (
            supabase.table("policies")
            .select("id, title, category, content")
            .is_("embedding", "null")
            .execute()
        )
        return response.data or []

    except Exception as e:
        logger.error(f"Failed to list policies without embedding: {e}")
        raise


def update_policy_embedding(policy_id: str, embedding: list[float]) -> None:
    supabase = get_supabase()

    try:
        supabase.table("policies").update({"embedding": embedding}).eq("id", policy_id).execute()
    except Exception as e:
        logger.error(f"Failed to store embedding for policy {policy_id}: {e}")
        raise
