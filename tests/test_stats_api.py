"""Tests for the dashboard stats endpoint."""

from fastapi.testclient import TestClient

from app.main import app
from tests.fakes.fake_db import EMPLOYEE_ID

client = TestClient(app, raise_server_exceptions=False)


def test_stats_counts(fake_db):
    fake_db.insert_chat_message({"employee_id": EMPLOYEE_ID, "message": "q", "response": "a"})

    response = client.get("/stats")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "stats": {
            "total_employees": 1,
            "total_contracts": 0,
            "total_chats": 1,
            "time_saved_hours": 4,
        },
    }


def test_stats_store_failure_returns_zeros(fake_db):
    fake_db.fail_on.add("count_employees")

    response = client.get("/stats")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "count_employees unavailable"
    assert data["stats"]["total_employees"] == 0
