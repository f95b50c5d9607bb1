"""Tests for the RAG answer chain with the store and OpenAI mocked."""

from unittest.mock import AsyncMock, patch

import pytest

from app.chains.answer_question import (
    answer_question,
    get_chat_analytics,
    get_conversation_history,
    record_feedback,
)
from app.core.errors import NotFoundError, ProcessingFailedError, ProviderError
from app.core.llm import ChatResult
from tests.fakes.fake_db import ANNUAL_LEAVE_POLICY, EMPLOYEE_ID

ANSWER = ChatResult(
    text="Hi Priya, you get 14 days of annual leave per year in Singapore.",
    model="gpt-4-turbo-preview",
    prompt_tokens=800,
    completion_tokens=60,
    total_tokens=860,
)


@pytest.fixture
def mock_openai():
    with (
        patch(
            "app.chains.policy_retrieval.embed_query_async",
            new=AsyncMock(return_value=[0.1] * 1536),
        ),
        patch(
            "app.chains.answer_question.complete_chat_async",
            new=AsyncMock(return_value=ANSWER),
        ) as mock_complete,
    ):
        yield mock_complete


@pytest.mark.asyncio
async def test_answer_grounded_in_retrieved_policy(fake_db, mock_openai):
    result = await answer_question(EMPLOYEE_ID, "How many days of annual leave do I get?")

    assert result.success is True
    assert "14" in result.answer
    assert result.employee.name == "Priya Sharma"
    assert result.context.policies_used == 1
    assert result.context.policies[0].title == ANNUAL_LEAVE_POLICY["title"]
    assert result.context.policies[0].similarity == "87.0%"
    assert result.metadata.tokens_used == 860
    assert result.metadata.cost_estimate == 0.0098
    assert result.retrieval_error is None

    # Context block reaches the model ahead of the question
    messages = mock_openai.call_args[0][0]
    assert messages[0]["role"] == "system"
    assert "EMPLOYEE CONTEXT:" in messages[1]["content"]
    assert "14 days of annual leave" in messages[1]["content"]
    assert messages[1]["content"].endswith(
        "Employee Question: How many days of annual leave do I get?"
    )


@pytest.mark.asyncio
async def test_answer_persists_exactly_one_turn(fake_db, mock_openai):
    result = await answer_question(EMPLOYEE_ID, "How many days of annual leave do I get?")

    assert len(fake_db.chat_messages) == 1
    saved = fake_db.chat_messages[0]
    assert saved["id"] == result.conversation_id
    assert saved["employee_id"] == EMPLOYEE_ID
    assert saved["policies_referenced"] == [ANNUAL_LEAVE_POLICY["id"]]
    assert saved["similarity_scores"] == [0.87]
    assert saved["ai_model_used"] == "gpt-4-turbo-preview"
    assert saved["response_time_ms"] >= 0
    assert saved["prompt_tokens"] == 800
    assert saved["completion_tokens"] == 60
    assert saved["tokens_used"] == 860


@pytest.mark.asyncio
async def test_trace_has_one_entry_per_stage(fake_db, mock_openai):
    result = await answer_question(EMPLOYEE_ID, "Leave?")

    assert [t.step for t in result.trace] == [
        "fetch_employee",
        "retrieve_policies",
        "assemble_context",
        "generate_answer",
        "save_conversation",
    ]
    assert all(t.duration_ms >= 0 for t in result.trace)


@pytest.mark.asyncio
async def test_unknown_employee_raises_not_found(fake_db, mock_openai):
    with pytest.raises(NotFoundError):
        await answer_question("00000000-0000-0000-0000-000000000000", "Leave?")

    mock_openai.assert_not_called()
    assert fake_db.chat_messages == []


@pytest.mark.asyncio
async def test_generation_failure_persists_nothing(fake_db, mock_openai):
    mock_openai.side_effect = ProviderError("model overloaded")

    with pytest.raises(ProcessingFailedError, match="model overloaded"):
        await answer_question(EMPLOYEE_ID, "Leave?")

    assert fake_db.chat_messages == []


@pytest.mark.asyncio
async def test_save_failure_is_processing_failure(fake_db, mock_openai):
    fake_db.fail_on.add("insert_chat_message")

    with pytest.raises(ProcessingFailedError, match="Failed to save conversation"):
        await answer_question(EMPLOYEE_ID, "Leave?")


@pytest.mark.asyncio
async def test_malformed_employee_row_is_processing_failure(fake_db, mock_openai):
    fake_db.employees[EMPLOYEE_ID]["last_leave_date"] = "last spring"

    with pytest.raises(ProcessingFailedError, match="Failed to assemble context"):
        await answer_question(EMPLOYEE_ID, "Leave?")

    mock_openai.assert_not_called()
    assert fake_db.chat_messages == []


@pytest.mark.asyncio
async def test_retrieval_failure_still_answers(fake_db, mock_openai):
    fake_db.fail_on.add("match_policies")

    result = await answer_question(EMPLOYEE_ID, "Leave?")

    assert result.context.policies_used == 0
    assert result.retrieval_error == "match_policies unavailable"
    assert "No matching company policy" in mock_openai.call_args[0][0][1]["content"]
    assert len(fake_db.chat_messages) == 1


@pytest.mark.asyncio
async def test_repeated_question_creates_new_turns(fake_db, mock_openai):
    first = await answer_question(EMPLOYEE_ID, "Leave?")
    second = await answer_question(EMPLOYEE_ID, "Leave?")

    assert first.conversation_id != second.conversation_id
    assert len(fake_db.chat_messages) == 2


def test_history_returns_newest_turns_oldest_first(fake_db):
    for i in range(4):
        fake_db.insert_chat_message(
            {
                "employee_id": EMPLOYEE_ID,
                "message": f"q{i}",
                "response": f"a{i}",
                "policies_referenced": [],
                "response_time_ms": 100,
            }
        )
        fake_db.chat_messages[-1]["created_at"] = f"2024-05-0{i + 1}T00:00:00+00:00"

    turns = get_conversation_history(EMPLOYEE_ID, limit=3)

    assert [t.question for t in turns] == ["q1", "q2", "q3"]
    assert turns[-1].answer == "a3"
    assert turns[0].policies_used == 0


def test_feedback_round_trip(fake_db):
    saved = fake_db.insert_chat_message(
        {"employee_id": EMPLOYEE_ID, "message": "q", "response": "a"}
    )

    record_feedback(saved["id"], True, "Clear answer")
    record_feedback(saved["id"], False)

    stored = fake_db.chat_messages[0]
    assert stored["helpful"] is False
    assert stored["feedback_comment"] is None


def test_feedback_unknown_message_raises(fake_db):
    with pytest.raises(NotFoundError):
        record_feedback("missing-id", True)


def test_analytics_aggregates_feedback_and_policies(fake_db):
    rows = [
        {"helpful": True, "response_time_ms": 1000, "policies_referenced": ["p1", "p2"]},
        {"helpful": False, "response_time_ms": 3000, "policies_referenced": ["p1"]},
        {"helpful": None, "response_time_ms": 2000, "policies_referenced": []},
    ]
    for row in rows:
        fake_db.insert_chat_message(
            {"employee_id": EMPLOYEE_ID, "message": "q", "response": "a", **row}
        )

    analytics = get_chat_analytics(days=7)

    assert analytics.total_conversations == 3
    assert analytics.feedback == {
        "total_with_feedback": 2,
        "helpful_count": 1,
        "helpful_percentage": 50.0,
    }
    assert analytics.performance["avg_response_time_ms"] == 2000
    assert analytics.top_policies[0] == {"policy_id": "p1", "references": 2}


def test_analytics_with_no_messages(fake_db):
    analytics = get_chat_analytics()

    assert analytics.total_conversations == 0
    assert analytics.feedback["helpful_percentage"] == 0
    assert analytics.top_policies == []
