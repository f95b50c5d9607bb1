"""Tests for compliance checklist seeding, status rules and the alerts endpoint."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.core.compliance import compliance_status, generate_compliance_items
from app.main import app

client = TestClient(app, raise_server_exceptions=False)


def _employee(country: str = "SG", start_date: str = "2025-01-10") -> dict:
    return {"id": "emp-1", "country": country, "start_date": start_date}


def test_singapore_checklist_has_no_work_permit():
    items = generate_compliance_items(_employee("SG"))

    assert [i["item_type"] for i in items] == ["training_certification"] * 4 + [
        "equipment_loan"
    ] * 2
    assert all(i["employee_id"] == "emp-1" for i in items)
    assert all(i["status"] == "active" for i in items)


def test_trainings_due_thirty_days_after_start():
    items = generate_compliance_items(_employee(start_date="2025-01-10"))

    trainings = [i for i in items if i["item_type"] == "training_certification"]
    assert {i["expiry_date"] for i in trainings} == {"2025-02-09"}
    assert [i["item_name"] for i in trainings] == [
        "Information Security",
        "GDPR Compliance",
        "Code of Conduct",
        "Safety Training",
    ]


@pytest.mark.parametrize("country", ["UAE", "US"])
def test_work_permit_countries(country):
    items = generate_compliance_items(_employee(country, "2024-02-29"))

    permits = [i for i in items if i["item_type"] == "work_permit"]
    assert len(permits) == 1
    assert permits[0]["item_name"] == f"{country} Work Permit"
    assert permits[0]["expiry_date"] == "2026-03-01"


def test_equipment_loans_have_no_expiry():
    items = generate_compliance_items(_employee())

    equipment = [i for i in items if i["item_type"] == "equipment_loan"]
    assert [i["item_name"] for i in equipment] == ['MacBook Pro 16"', "External Monitor"]
    assert all(i["expiry_date"] is None for i in equipment)


@pytest.mark.parametrize(
    "expiry,status",
    [
        (None, "active"),
        ("2025-05-31", "overdue"),
        ("2025-06-01", "urgent"),
        ("2025-07-01", "urgent"),
        ("2025-07-02", "expiring_soon"),
        ("2025-07-31", "expiring_soon"),
        ("2025-08-01", "active"),
    ],
)
def test_compliance_status_windows(expiry, status):
    assert compliance_status(expiry, today=date(2025, 6, 1)) == status


def test_alerts_endpoint_adds_current_status(fake_db):
    fake_db.urgent_alerts = [
        {"id": "a1", "item_name": "Work Permit", "expiry_date": "2000-01-01"},
        {"id": "a2", "item_name": "Laptop", "expiry_date": None},
    ]

    response = client.get("/compliance/alerts")

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 2
    assert data["alerts"][0]["current_status"] == "overdue"
    assert data["alerts"][1]["current_status"] == "active"


def test_alerts_endpoint_store_failure(fake_db):
    fake_db.fail_on.add("list_urgent_alerts")

    response = client.get("/compliance/alerts")

    assert response.status_code == 500
