"""Fake in-memory database layer for HRFlow behavioral testing."""

from datetime import datetime, timezone
from typing import Any, Dict, List
from uuid import uuid4

from app.core.errors import NotFoundError

EMPLOYEE_ID = "11111111-1111-1111-1111-111111111111"

SAMPLE_EMPLOYEE = {
    "id": EMPLOYEE_ID,
    "email": "priya.sharma@hrflow.ai",
    "full_name": "Priya Sharma",
    "first_name": "Priya",
    "last_name": "Sharma",
    "role": "Senior Software Engineer",
    "department": "Engineering",
    "country": "SG",
    "salary_usd": 120000,
    "salary_local": 162000,
    "currency": "SGD",
    "equity_shares": 0,
    "employment_type": "full_time",
    "start_date": "2024-01-15",
    "leave_balance_days": 10,
    "last_leave_date": None,
    "manager_id": None,
}

ANNUAL_LEAVE_POLICY = {
    "id": "22222222-2222-2222-2222-222222222222",
    "title": "Annual Leave Policy - Singapore",
    "category": "leave",
    "country": "SG",
    "content": "Singapore employees receive 14 days of annual leave per calendar year.",
    "similarity": 0.87,
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class FakeDB:
    """In-memory database implementation for testing."""

    def __init__(self):
        self.reset()

    def reset(self):
        """Reset all stores to initial state."""
        self.employees: Dict[str, Dict[str, Any]] = {EMPLOYEE_ID: dict(SAMPLE_EMPLOYEE)}
        self.policy_matches: List[Dict[str, Any]] = [dict(ANNUAL_LEAVE_POLICY)]
        self.chat_messages: List[Dict[str, Any]] = []
        self.generated_contracts: List[Dict[str, Any]] = []
        self.compliance_items: List[Dict[str, Any]] = []
        self.automation_logs: List[Dict[str, Any]] = []
        self.urgent_alerts: List[Dict[str, Any]] = []
        self.match_calls: List[Dict[str, Any]] = []
        self.fail_on: set[str] = set()

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise RuntimeError(f"{operation} unavailable")

    # Employee operations
    def get_employee(self, employee_id: str) -> Dict[str, Any]:
        self._maybe_fail("get_employee")
        employee = self.employees.get(str(employee_id))
        if employee is None:
            raise NotFoundError("employee", employee_id)
        return dict(employee)

    def insert_employee(self, row: Dict[str, Any]) -> Dict[str, Any]:
        self._maybe_fail("insert_employee")
        employee = {"id": str(uuid4()), "created_at": _now_iso(), **row}
        self.employees[employee["id"]] = employee
        return dict(employee)

    def count_employees(self) -> int:
        self._maybe_fail("count_employees")
        return len(self.employees)

    # Policy search
    def match_policies(
        self, query_embedding: List[float], match_threshold: float, match_count: int
    ) -> List[Dict[str, Any]]:
        self._maybe_fail("match_policies")
        self.match_calls.append({"threshold": match_threshold, "count": match_count})
        return [dict(p) for p in self.policy_matches]

    # Chat operations
    def insert_chat_message(self, row: Dict[str, Any]) -> Dict[str, Any]:
        self._maybe_fail("insert_chat_message")
        message = {
            "id": str(uuid4()),
            "created_at": _now_iso(),
            "helpful": None,
            "feedback_comment": None,
            **row,
        }
        self.chat_messages.append(message)
        return dict(message)

    def list_recent_chat_messages(self, employee_id: str, limit: int) -> List[Dict[str, Any]]:
        rows = [m for m in self.chat_messages if m["employee_id"] == employee_id]
        rows.sort(key=lambda m: m["created_at"], reverse=True)
        return [dict(m) for m in rows[:limit]]

    def update_chat_feedback(
        self, message_id: str, helpful: bool, comment: str | None
    ) -> Dict[str, Any]:
        for message in self.chat_messages:
            if message["id"] == message_id:
                message["helpful"] = helpful
                message["feedback_comment"] = comment
                return dict(message)
        raise NotFoundError("chat message", message_id)

    def list_chat_messages_since(self, cutoff_iso: str) -> List[Dict[str, Any]]:
        return [dict(m) for m in self.chat_messages if m["created_at"] >= cutoff_iso]

    def count_chat_messages(self) -> int:
        return len(self.chat_messages)

    # Contract operations
    def insert_generated_contract(self, **fields: Any) -> Dict[str, Any]:
        self._maybe_fail("insert_generated_contract")
        row = {
            "id": str(uuid4()),
            "employee_id": fields["employee_id"],
            "contract_type": fields["contract_type"],
            "generated_content": fields["content"],
            "status": fields["status"],
            "generation_duration_ms": fields["generation_duration_ms"],
            "ai_model_used": fields["ai_model_used"],
            "generated_at": _now_iso(),
        }
        self.generated_contracts.append(row)
        return dict(row)

    def count_generated_contracts(self) -> int:
        return len(self.generated_contracts)

    # Compliance operations
    def insert_compliance_items(self, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        self._maybe_fail("insert_compliance_items")
        saved = [{"id": str(uuid4()), **item} for item in items]
        self.compliance_items.extend(saved)
        return [dict(i) for i in saved]

    def list_urgent_alerts(self, limit: int = 50) -> List[Dict[str, Any]]:
        self._maybe_fail("list_urgent_alerts")
        return [dict(a) for a in self.urgent_alerts[:limit]]

    # Audit log
    def insert_automation_log(self, **fields: Any) -> Dict[str, Any]:
        self._maybe_fail("insert_automation_log")
        row = {"id": str(uuid4()), "created_at": _now_iso(), **fields}
        self.automation_logs.append(row)
        return dict(row)
