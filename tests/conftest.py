"""Pytest configuration and fixtures."""

import os
from unittest.mock import patch

import pytest

from tests.fakes.fake_db import FakeDB

# Set before app modules are imported during collection
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("HRFLOW_ENV", "test")


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["SUPABASE_URL"] = "https://test.supabase.co"
    os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-key"
    os.environ["OPENAI_API_KEY"] = "test-openai-key"
    os.environ["HRFLOW_ENV"] = "test"


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Each test sees settings built from the current environment."""
    from app.core.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# Store functions as imported by the modules that call them
_DB_PATCH_TARGETS = {
    "app.chains.answer_question.get_employee": "get_employee",
    "app.chains.answer_question.insert_chat_message": "insert_chat_message",
    "app.chains.answer_question.list_recent_chat_messages": "list_recent_chat_messages",
    "app.chains.answer_question.update_chat_feedback": "update_chat_feedback",
    "app.chains.answer_question.list_chat_messages_since": "list_chat_messages_since",
    "app.chains.policy_retrieval.match_policies": "match_policies",
    "app.graphs.onboarding_graph.insert_employee": "insert_employee",
    "app.graphs.onboarding_graph.insert_generated_contract": "insert_generated_contract",
    "app.graphs.onboarding_graph.insert_compliance_items": "insert_compliance_items",
    "app.graphs.onboarding_graph.insert_automation_log": "insert_automation_log",
    "app.api.contracts.get_employee": "get_employee",
    "app.api.contracts.insert_generated_contract": "insert_generated_contract",
    "app.api.compliance.list_urgent_alerts": "list_urgent_alerts",
    "app.api.stats.count_employees": "count_employees",
    "app.api.stats.count_generated_contracts": "count_generated_contracts",
    "app.api.stats.count_chat_messages": "count_chat_messages",
}


@pytest.fixture
def fake_db():
    """In-memory store patched over every app.db function the app calls."""
    db = FakeDB()
    patchers = [
        patch(target, side_effect=getattr(db, method))
        for target, method in _DB_PATCH_TARGETS.items()
    ]
    for patcher in patchers:
        patcher.start()
    yield db
    for patcher in reversed(patchers):
        patcher.stop()
