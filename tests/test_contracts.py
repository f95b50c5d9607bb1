"""Tests for contract helpers, prompt building, DOCX rendering and the contract endpoint."""

import base64
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from app.core.contracts import (
    build_contract_prompt,
    calculate_local_salary,
    contract_filename,
    contract_types_for,
    format_currency,
    get_currency,
    get_notice_period,
    render_contract_docx,
)
from app.core.llm import ChatResult
from app.core.schemas_onboarding import Candidate
from app.main import app
from tests.fakes.fake_db import EMPLOYEE_ID

client = TestClient(app, raise_server_exceptions=False)


def _candidate(**overrides) -> Candidate:
    data = {
        "full_name": "Arjun Mehta",
        "email": "arjun@example.com",
        "role": "Data Analyst",
        "department": "Analytics",
        "country": "IN",
        "salary_usd": 40000,
        "start_date": "2025-03-01",
        "first_name": "Arjun",
    }
    data.update(overrides)
    return Candidate(**data)


def test_local_salary_and_currency():
    assert calculate_local_salary(40000, "IN") == 3320000
    assert calculate_local_salary(100000, "UK") == 79000
    assert get_currency("UAE") == "AED"
    # Unknown country falls back to USD at 1.0
    assert calculate_local_salary(1000, "XX") == 1000
    assert get_currency("XX") == "USD"


@pytest.mark.parametrize(
    "role,months",
    [
        ("Senior Engineer", 3),
        ("Engineering Director", 3),
        ("Junior Designer", 1),
        ("Data Analyst", 2),
    ],
)
def test_notice_period_by_seniority(role, months):
    assert get_notice_period(role, "SG") == months


def test_format_currency():
    assert format_currency(150000, "USD") == "$150,000"
    assert format_currency(79000, "GBP") == "£79,000"
    assert format_currency(202500, "SGD") == "SGD 202,500"


def test_contract_types_for_equity():
    assert contract_types_for(0) == ["employment", "nda"]
    assert contract_types_for(None) == ["employment", "nda"]
    assert contract_types_for(1) == ["employment", "nda", "equity"]


def test_prompt_carries_country_terms():
    messages = build_contract_prompt(_candidate(), "employment")

    assert [m["role"] for m in messages] == ["system", "user"]
    user = messages[1]["content"]
    assert user.startswith("Generate a employment contract")
    assert "Country: India" in user
    assert "Base Salary: ₹3,320,000 per annum" in user
    assert "Annual Leave: 18 days" in user


def test_prompt_rejects_unknown_type():
    with pytest.raises(ValueError, match="Unsupported contract type"):
        build_contract_prompt(_candidate(), "lease")


def test_render_contract_docx_produces_docx_bytes():
    content = "## Terms\n\n### Salary\n- Paid monthly\nPlain paragraph"

    data = render_contract_docx(content, "Arjun Mehta", "IN", "employment")

    # DOCX is a zip container
    assert data[:2] == b"PK"
    assert len(data) > 1000


def test_contract_filename():
    assert contract_filename("Sarah Chen", "nda") == "Sarah_Chen_nda.docx"
    assert contract_filename("Sarah  Chen", "equity", "_contract") == (
        "Sarah_Chen_equity_contract.docx"
    )


@pytest.fixture
def mock_llm():
    result = ChatResult(text="## NDA\n\nConfidential.", model="gpt-4-turbo-preview")
    with patch(
        "app.chains.generate_contract.complete_chat_async", new=AsyncMock(return_value=result)
    ) as mock:
        yield mock


def test_generate_contract_endpoint_saves_draft(fake_db, mock_llm):
    response = client.post(
        "/contracts/generate", json={"employeeId": EMPLOYEE_ID, "contractType": "nda"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["contract"]["type"] == "nda"
    assert data["contract"]["id"] == fake_db.generated_contracts[0]["id"]
    assert fake_db.generated_contracts[0]["status"] == "draft"
    assert data["file"]["filename"] == "Priya_Sharma_nda_contract.docx"
    assert base64.b64decode(data["file"]["buffer"])[:2] == b"PK"


def test_generate_contract_defaults_to_employment(fake_db, mock_llm):
    response = client.post("/contracts/generate", json={"employeeId": EMPLOYEE_ID})

    assert response.status_code == 200
    assert response.json()["contract"]["type"] == "employment"


def test_generate_contract_save_failure_still_returns_file(fake_db, mock_llm):
    fake_db.fail_on.add("insert_generated_contract")

    response = client.post("/contracts/generate", json={"employeeId": EMPLOYEE_ID})

    assert response.status_code == 200
    data = response.json()
    assert data["contract"]["id"] is None
    assert data["file"]["buffer"]


def test_generate_contract_unknown_employee(fake_db, mock_llm):
    response = client.post("/contracts/generate", json={"employeeId": "nobody"})

    assert response.status_code == 404
    mock_llm.assert_not_called()


def test_generate_contract_requires_employee_id(fake_db, mock_llm):
    response = client.post("/contracts/generate", json={})

    assert response.status_code == 400
    assert response.json()["error"] == "Employee ID is required"
