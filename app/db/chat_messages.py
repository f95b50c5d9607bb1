"""Chat message (conversation turn) operations."""

from typing import Any

from app.core.errors import NotFoundError
from app.core.logging import get_logger
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)


def insert_chat_message(row: dict[str, Any]) -> dict[str, Any]:
    """
    Persist one question/answer turn.

    Returns:
        Inserted row including generated id

    Raises:
        Exception: If the insert fails or returns no row
    """
    supabase = get_supabase()

    try:
        response = supabase.table("chat_messages").insert(row).execute()

        if not response.data:
            raise ValueError("No data returned from chat message insert")

        return response.data[0]

    except Exception as e:
        logger.error(
            f"Failed to save chat message: {e}",
            extra={"employee_id": row.get("employee_id")},
        )
        raise


def list_recent_chat_messages(employee_id: str, limit: int) -> list[dict[str, Any]]:
    """
    List the newest `limit` turns for an employee, newest first.

    Args:
        employee_id: Employee UUID
        limit: Maximum number of rows

    Returns:
        Rows ordered by created_at descending
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("chat_messages")
            .select("*")
            .eq("employee_id", str(employee_id))
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return response.data or []

    except Exception as e:
        logger.error(f"Failed to fetch chat history for {employee_id}: {e}")
        raise


def update_chat_feedback(
    message_id: str,
    helpful: bool,
    comment: str | None = None,
) -> dict[str, Any]:
    """
    Overwrite feedback on a stored turn.

    Returns:
        Updated row

    Raises:
        NotFoundError: If no row has this id
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("chat_messages")
            .update({"helpful": helpful, "feedback_comment": comment})
            .eq("id", str(message_id))
            .execute()
        )

        if not response.data:
            raise NotFoundError("chat message", message_id)

        logger.info(f"Recorded feedback on chat message {message_id}", extra={"helpful": helpful})
        return response.data[0]

    except NotFoundError:
        raise
    except Exception as e:
        logger.error(f"Failed to save feedback for {message_id}: {e}")
        raise


def list_chat_messages_since(cutoff_iso: str) -> list[dict[str, Any]]:
    supabase = get_supabase()

    try:
        response = (
            supabase.table("chat_messages")
            .select("id, helpful, response_time_ms, policies_referenced, created_at")
            .gte("created_at", cutoff_iso)
            .execute()
        )
        return response.data or []

    except Exception as e:
        logger.error(f"Failed to fetch chat messages since {cutoff_iso}: {e}")
        raise


def count_chat_messages() -> int:
    supabase = get_supabase()

    try:
        response = supabase.table("chat_messages").select("*", count="exact", head=True).execute()
        return response.count or 0
    except Exception as e:
        logger.error(f"Failed to count chat messages: {e}")
        raise
