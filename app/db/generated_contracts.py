"""Generated contract operations."""

from typing import Any

from app.core.logging import get_logger
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)


def insert_generated_contract(
    employee_id: str,
    contract_type: str,
    content: str,
    status: str,
    generation_duration_ms: int,
    ai_model_used: str,
) -> dict[str, Any]:
    """
    Save a generated contract.

    Args:
        employee_id: Employee UUID
        contract_type: employment, nda or equity
        content: Generated contract text
        status: draft or pending_approval
        generation_duration_ms: Time spent generating
        ai_model_used: Model identifier

    Returns:
        Inserted row

    Raises:
        Exception: If the insert fails or returns no row
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("generated_contracts")
            .insert(
                {
                    "employee_id": employee_id,
                    "contract_type": contract_type,
                    "generated_content": content,
                    "status": status,
                    "generation_duration_ms": generation_duration_ms,
                    "ai_model_used": ai_model_used,
                }
            )
            .execute()
        )

        if not response.data:
            raise ValueError("No data returned from contract insert")

        contract = response.data[0]
        logger.info(
            f"Saved {contract_type} contract {contract['id']}",
            extra={"employee_id": employee_id, "status": status},
        )
        return contract

    except Exception as e:
        logger.error(f"Failed to save {contract_type} contract for {employee_id}: {e}")
        raise


def count_generated_contracts() -> int:
    supabase = get_supabase()

    try:
        response = (
            supabase.table("generated_contracts").select("*", count="exact", head=True).execute()
        )
        return response.count or 0
    except Exception as e:
        logger.error(f"Failed to count generated contracts: {e}")
        raise
