"""Employee table operations."""

from typing import Any

from app.core.errors import NotFoundError
from app.core.logging import get_logger
from app.db.supabase_client import get_supabase

logger = get_logger(__name__)


def get_employee(employee_id: str) -> dict[str, Any]:
    """
    Fetch an employee by ID.

    Args:
        employee_id: Employee UUID

    Returns:
        Employee row as dict

    Raises:
        NotFoundError: If employee not found
    """
    supabase = get_supabase()

    try:
        response = supabase.table("employees").select("*").eq("id", str(employee_id)).execute()

        if not response.data:
            raise NotFoundError("employee", employee_id)

        return response.data[0]

    except NotFoundError:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch employee {employee_id}: {e}")
        raise


def insert_employee(row: dict[str, Any]) -> dict[str, Any]:
    """
    Insert a new employee.

    Returns:
        Inserted row including generated id

    Raises:
        Exception: If the insert fails or returns no row
    """
    supabase = get_supabase()

    try:
        response = supabase.table("employees").insert(row).execute()

        if not response.data:
            raise ValueError("No data returned from employee insert")

        employee = response.data[0]
        logger.info(
            f"Created employee {employee['id']}",
            extra={"employee_id": employee["id"], "country": employee.get("country")},
        )
        return employee

    except Exception as e:
        logger.error(f"Failed to insert employee {row.get('email')}: {e}")
        raise


def count_employees() -> int:
    supabase = get_supabase()

    try:
        response = supabase.table("employees").select("*", count="exact", head=True).execute()
        return response.count or 0
    except Exception as e:
        logger.error(f"Failed to count employees: {e}")
        raise
