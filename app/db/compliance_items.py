"""Compliance item operations."""

from typing import Any

from app.core.logging import get_logger
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)


def insert_compliance_items(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Bulk insert compliance items.

    Returns:
        Inserted rows

    Raises:
        Exception: If the insert fails
    """
    if not items:
        return []

    supabase = get_supabase()

    try:
        response = supabase.table("compliance_items").insert(items).execute()
        saved = response.data or []
        logger.info(
            f"Inserted {len(saved)} compliance items",
            extra={"employee_id": items[0].get("employee_id")},
        )
        return saved

    except Exception as e:
        logger.error(f"Failed to insert compliance items: {e}")
        raise


def list_urgent_alerts(limit: int = 50) -> list[dict[str, Any]]:
    """Rows of the urgent_compliance_alerts view, soonest expiry first."""
    supabase = get_supabase()

    try:
        response = (
            supabase.table("urgent_compliance_alerts")
            .select("*")
            .order("expiry_date", desc=False)
            .limit(limit)
            .execute()
        )
        return response.data or []

    except Exception as e:
        logger.error(f"Failed to list urgent compliance alerts: {e}")
        raise
