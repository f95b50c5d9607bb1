"""Compliance checklist seeding and expiry status rules."""

from datetime import date, timedelta
from typing import Any

MANDATORY_TRAININGS = [
    "Information Security",
    "GDPR Compliance",
    "Code of Conduct",
    "Safety Training",
]

TRAINING_DUE_DAYS = 30
WORK_PERMIT_COUNTRIES = {"UAE", "US"}
WORK_PERMIT_YEARS = 2

EQUIPMENT_LOANS = [
    ('MacBook Pro 16"', 2500),
    ("External Monitor", 400),
]

URGENT_WINDOW_DAYS = 30
EXPIRING_SOON_WINDOW_DAYS = 60


def _add_years(start: date, years: int) -> date:
    try:
        return start.replace(year=start.year + years)
    except ValueError:
        # Feb 29 rolls forward like a calendar date would
        return start.replace(year=start.year + years, month=3, day=1)


def generate_compliance_items(employee: dict[str, Any]) -> list[dict[str, Any]]:
    """
    Derive the fixed onboarding checklist for a newly created employee.

    Args:
        employee: Employee row with id, country and start_date

    Returns:
        Rows ready for bulk insert into compliance_items
    """
    start = date.fromisoformat(str(employee["start_date"])[:10])
    items = []

    training_due = (start + timedelta(days=TRAINING_DUE_DAYS)).isoformat()
    for training in MANDATORY_TRAININGS:
        items.append(
            {
                "employee_id": employee["id"],
                "item_type": "training_certification",
                "item_name": training,
                "description": f"Complete {training} within {TRAINING_DUE_DAYS} days of joining",
                "expiry_date": training_due,
                "status": "active",
            }
        )

    if employee.get("country") in WORK_PERMIT_COUNTRIES:
        items.append(
            {
                "employee_id": employee["id"],
                "item_type": "work_permit",
                "item_name": f"{employee['country']} Work Permit",
                "description": "Employment authorization document",
                "expiry_date": _add_years(start, WORK_PERMIT_YEARS).isoformat(),
                "status": "active",
            }
        )

    for name, value in EQUIPMENT_LOANS:
        items.append(
            {
                "employee_id": employee["id"],
                "item_type": "equipment_loan",
                "item_name": name,
                "description": f"Company equipment - Value: USD {value}",
                "expiry_date": None,
                "status": "active",
            }
        )

    return items


def compliance_status(expiry_date: date | str | None, today: date | None = None) -> str:
    """Status for an item expiring on `expiry_date`; undated items stay active."""
    if expiry_date is None:
        return "active"
    if isinstance(expiry_date, str):
        expiry_date = date.fromisoformat(expiry_date[:10])
    today = today or date.today()

    days_left = (expiry_date - today).days
    if days_left < 0:
        return "overdue"
    if days_left <= URGENT_WINDOW_DAYS:
        return "urgent"
    if days_left <= EXPIRING_SOON_WINDOW_DAYS:
        return "expiring_soon"
    return "active"
