#!/usr/bin/env python3
"""
Generate embeddings for policy documents that do not have one yet.

Run after policies are imported; the chatbot only retrieves policies with an
embedding.

Usage:
    python scripts/generate_embeddings.py [--delay-ms 200]

Options:
    --delay-ms: Pause between policies to stay under rate limits (default: 200)
"""

import argparse
import sys
import time
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.config import get_settings
from app.core.embeddings import embed_with_backoff, policy_embedding_text
from app.core.logging import get_logger
from app.db.policies import list_policies_without_embedding, update_policy_embedding

logger = get_logger(__name__)


def estimate_embedding_cost(total_chars: int, price_per_million: float) -> float:
    """Rough cost from ~4 characters per token."""
    tokens = total_chars / 4
    return tokens / 1_000_000 * price_per_million


def generate_all_embeddings(delay_ms: int = 200, sleep=time.sleep) -> dict:
    """
    Embed and store every policy whose embedding is null.

    Returns:
        Summary dict with processed, succeeded, failed, estimated_cost_usd
    """
    settings = get_settings()
    policies = list_policies_without_embedding()

    if not policies:
        logger.info("All policies already have embeddings")
        return {"processed": 0, "succeeded": 0, "failed": 0, "estimated_cost_usd": 0.0}

    logger.info(f"Found {len(policies)} policies needing embeddings")

    succeeded = 0
    failed = 0
    total_chars = 0

    for index, policy in enumerate(policies, start=1):
        text = policy_embedding_text(policy)
        try:
            embedding = embed_with_backoff([text], sleep=sleep)[0]
            update_policy_embedding(policy["id"], embedding)
            succeeded += 1
            total_chars += len(text)
            logger.info(f"[{index}/{len(policies)}] {policy['title']}: done")
        except Exception as e:
            failed += 1
            logger.error(f"[{index}/{len(policies)}] {policy['title']}: {e}")

        if index < len(policies):
            sleep(delay_ms / 1000)

    cost = estimate_embedding_cost(total_chars, settings.EMBEDDING_COST_PER_1M)
    return {
        "processed": len(policies),
        "succeeded": succeeded,
        "failed": failed,
        "estimated_cost_usd": round(cost, 6),
    }


def main():
    """Main embedding generation function."""
    parser = argparse.ArgumentParser(description="Generate embeddings for policies")
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=200,
        help="Pause between policies in milliseconds (default: 200)",
    )
    args = parser.parse_args()

    settings = get_settings()

    logger.info("=" * 60)
    logger.info("POLICY EMBEDDING GENERATION")
    logger.info("=" * 60)
    logger.info(f"Model: {settings.EMBEDDING_MODEL} ({settings.EMBEDDING_DIM} dimensions)")

    start = time.perf_counter()
    try:
        summary = generate_all_embeddings(delay_ms=args.delay_ms)
    except Exception as e:
        logger.error(f"Embedding generation failed: {e}")
        sys.exit(1)

    logger.info("=" * 60)
    logger.info(
        f"COMPLETE - {summary['succeeded']} succeeded, {summary['failed']} failed "
        f"in {time.perf_counter() - start:.1f}s"
    )
    logger.info(f"Estimated cost: ${summary['estimated_cost_usd']:.6f}")
    logger.info("=" * 60)

    if summary["failed"]:
        sys.exit(1)


if __name__ == "__main__":
    main()
