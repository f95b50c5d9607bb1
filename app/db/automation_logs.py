"""Automation audit log operations."""

from typing import Any

from app.core.logging import get_logger
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)


def insert_automation_log(
    trigger_event: str,
    actions_taken: list[dict[str, Any]],
    total_duration_ms: int,
    success: bool,
    employee_id: str | None = None,
    error_message: str | None = None,
) -> dict[str, Any]:
    """
    Record one orchestration run.

    Args:
        trigger_event: Name of the triggering workflow
        actions_taken: Ordered timeline entries
        total_duration_ms: Wall-clock duration of the run
        success: Aggregate outcome
        employee_id: Employee the run concerned, if one was created
        error_message: Fatal error text for failed runs

    Returns:
        Inserted row

    Raises:
        Exception: If the insert fails
    """
    supabase = get_supabase()

    row = {
        "trigger_event": trigger_event,
        "employee_id": employee_id,
        "actions_taken": actions_taken,
        "total_duration_ms": total_duration_ms,
        "success": success,
        "error_message": error_message,
    }

    try:
        response = supabase.table("automation_logs").insert(row).execute()
        return response.data[0] if response.data else row

    except Exception as e:
        logger.error(
            f"Failed to write automation log: {e}",
            extra={"trigger_event": trigger_event, "employee_id": employee_id},
        )
        raise
