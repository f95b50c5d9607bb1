"""Render employee data and retrieved policies into the generation context block."""

from datetime import date
from typing import Any

from app.core.schemas_chat import RetrievedPolicy

POLICY_DELIMITER = "---"

NO_POLICY_PLACEHOLDER = (
    "No matching company policy was found for this question. Answer from general HR "
    "knowledge and the employee data above, state clearly that no specific policy covers "
    "this topic, and do not invent a policy."
)


def _parse_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def assemble_context(
    employee: dict[str, Any],
    policies: list[RetrievedPolicy],
    *,
    today: date | None = None,
) -> str:
    """
    Build the text block handed to the generation step.

    Deterministic for a given (employee, policies, today); performs no I/O.

    Args:
        employee: Employee row as returned by the store
        policies: Retrieved policies, most similar first
        today: Reference date for "days since last leave" (defaults to date.today())

    Returns:
        Context text: employee section followed by policy section
    """
    today = today or date.today()

    lines = [
        "EMPLOYEE CONTEXT:",
        f"Name: {employee.get('full_name')}",
        f"Role: {employee.get('role')}",
        f"Department: {employee.get('department')}",
        f"Country: {employee.get('country')}",
        f"Start Date: {employee.get('start_date')}",
        f"Leave Balance: {employee.get('leave_balance_days') or 0} days",
    ]

    last_leave = _parse_date(employee.get("last_leave_date"))
    if last_leave is not None:
        lines.append(f"Last Leave: {(today - last_leave).days} days ago")

    if employee.get("manager_id"):
        lines.append(f"Reports To: Manager (ID: {employee['manager_id']})")

    lines.extend(["", "RELEVANT COMPANY POLICIES:", ""])

    if not policies:
        lines.extend([NO_POLICY_PLACEHOLDER, ""])
        return "\n".join(lines)

    for index, policy in enumerate(policies, start=1):
        lines.append(f"{index}. {policy.title} ({policy.category})")
        lines.append(policy.content)
        lines.append("")
        lines.append(POLICY_DELIMITER)
        lines.append("")

    return "\n".join(lines)
