"""Answer employee HR questions grounded in company policies (RAG)."""

import asyncio
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any

from app.chains.policy_retrieval import retrieve_policies
from app.core.config import get_settings
from app.core.context_assembly import assemble_context
from app.core.errors import ProcessingFailedError, ProviderError
from app.core.llm import complete_chat_async, estimate_cost
from app.core.logging import get_logger
from app.core.pipeline import Stage, StageOutcome, Timeline
from app.core.schemas_chat import (
    AnswerResult,
    ChatAnalytics,
    ChatContext,
    ChatMetadata,
    ConversationTurn,
    EmployeeSummary,
    PolicyReference,
    RetrievalResult,
    StageTrace,
)
from app.db.chat_messages import (
    insert_chat_message,
    list_chat_messages_since,
    list_recent_chat_messages,
    update_chat_feedback,
)
from app.db.employees import get_employee

logger = get_logger(__name__)


SYSTEM_PROMPT = """You are HRFlow AI's intelligent HR assistant. You help employees with HR-related questions using company policies and their personal employment data.

CRITICAL RULES:
1. Base answers ONLY on the provided policies and employee data
2. Be specific and cite policy sections when relevant
3. Personalize answers using the employee's country, role, and tenure
4. If information isn't in the provided context, say "I don't have that information in our current policies"
5. For sensitive topics (termination, legal issues), do not answer; suggest contacting HR directly
6. Be friendly, professional, and concise
7. Use the employee's name when appropriate
8. Always consider country-specific regulations

RESPONSE FORMAT:
- Direct answer first
- Supporting policy details if needed
- Action items if applicable
- Keep it conversational, not robotic"""


async def _fetch_employee(state: dict[str, Any]) -> StageOutcome[dict[str, Any]]:
    employee = await asyncio.to_thread(get_employee, state["employee_id"])
    return StageOutcome(value=employee, details={"employee_id": employee["id"]})


async def _retrieve_policies(state: dict[str, Any]) -> StageOutcome[RetrievalResult]:
    retrieval = await retrieve_policies(state["question"])
    details = {
        "policies_found": len(retrieval.policies),
        "similarity_scores": [p.similarity for p in retrieval.policies],
    }
    if retrieval.error:
        details["error"] = retrieval.error
    return StageOutcome(value=retrieval, details=details)


async def _assemble_context(state: dict[str, Any]) -> StageOutcome[str]:
    try:
        context = assemble_context(state["fetch_employee"], state["retrieve_policies"].policies)
    except (ValueError, TypeError, KeyError) as e:
        raise ProcessingFailedError(f"Failed to assemble context: {e}") from e
    return StageOutcome(value=context, details={"context_chars": len(context)})


async def _generate_answer(state: dict[str, Any]) -> StageOutcome[Any]:
    settings = get_settings()
    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": f"{state['assemble_context']}\n\nEmployee Question: {state['question']}",
        },
    ]
    try:
        result = await complete_chat_async(
            messages,
            model=settings.CHAT_MODEL,
            temperature=settings.CHAT_TEMPERATURE,
            max_tokens=settings.CHAT_MAX_TOKENS,
        )
    except ProviderError as e:
        raise ProcessingFailedError(f"Answer generation failed: {e}") from e

    return StageOutcome(
        value=result,
        details={
            "model": result.model,
            "tokens_used": result.total_tokens,
            "prompt_tokens": result.prompt_tokens,
            "completion_tokens": result.completion_tokens,
        },
    )


async def _save_conversation(state: dict[str, Any]) -> StageOutcome[dict[str, Any]]:
    employee = state["fetch_employee"]
    policies = state["retrieve_policies"].policies
    generation = state["generate_answer"]

    row = {
        "employee_id": employee["id"],
        "message": state["question"],
        "response": generation.text,
        "context_used": {
            "employee_data": {
                "id": employee["id"],
                "name": employee.get("full_name"),
                "role": employee.get("role"),
                "country": employee.get("country"),
                "department": employee.get("department"),
            },
            "policies": [
                {"id": p.id, "title": p.title, "similarity": p.similarity} for p in policies
            ],
        },
        "policies_referenced": [p.id for p in policies],
        "similarity_scores": [p.similarity for p in policies],
        "response_time_ms": state["timeline"].elapsed_ms(),
        "ai_model_used": generation.model,
        "prompt_tokens": generation.prompt_tokens,
        "completion_tokens": generation.completion_tokens,
        "tokens_used": generation.total_tokens,
    }
    try:
        saved = await asyncio.to_thread(insert_chat_message, row)
    except Exception as e:
        raise ProcessingFailedError(f"Failed to save conversation: {e}") from e

    return StageOutcome(value=saved, details={"conversation_id": saved["id"]})


ANSWER_STAGES = [
    Stage("fetch_employee", _fetch_employee, propagate=True),
    Stage("retrieve_policies", _retrieve_policies),
    Stage("assemble_context", _assemble_context, propagate=True),
    Stage("generate_answer", _generate_answer, propagate=True),
    Stage("save_conversation", _save_conversation, propagate=True),
]


async def answer_question(employee_id: str, question: str) -> AnswerResult:
    """
    Answer one question for one employee and persist the turn.

    Every call creates a new chat_messages row; an answer is only returned
    once its turn has been saved.

    Args:
        employee_id: Employee UUID
        question: Question text, already validated at the boundary

    Returns:
        AnswerResult with answer, provenance, usage and per-stage trace

    Raises:
        NotFoundError: If the employee does not exist
        ProcessingFailedError: If generation or persistence fails
    """
    settings = get_settings()
    timeline = Timeline()
    state: dict[str, Any] = {
        "employee_id": employee_id,
        "question": question,
        "timeline": timeline,
    }

    logger.info(
        f"Answering question for employee {employee_id}",
        extra={"employee_id": employee_id, "question_chars": len(question)},
    )

    await timeline.run_stages(ANSWER_STAGES, state)

    employee = state["fetch_employee"]
    retrieval: RetrievalResult = state["retrieve_policies"]
    generation = state["generate_answer"]
    saved = state["save_conversation"]
    total_ms = timeline.elapsed_ms()

    logger.info(
        f"Answered in {total_ms}ms using {len(retrieval.policies)} policies",
        extra={
            "employee_id": employee_id,
            "conversation_id": saved["id"],
            "tokens": generation.total_tokens,
        },
    )

    return AnswerResult(
        conversation_id=str(saved["id"]),
        question=question,
        answer=generation.text,
        employee=EmployeeSummary(
            name=employee.get("full_name"),
            role=employee.get("role"),
            country=employee.get("country"),
        ),
        context=ChatContext(
            policies_used=len(retrieval.policies),
            policies=[
                PolicyReference(
                    title=p.title,
                    category=p.category,
                    similarity=f"{p.similarity * 100:.1f}%",
                    score=p.similarity,
                )
                for p in retrieval.policies
            ],
        ),
        metadata=ChatMetadata(
            response_time_ms=total_ms,
            model=generation.model,
            tokens_used=generation.total_tokens,
            cost_estimate=estimate_cost(
                generation.prompt_tokens, generation.completion_tokens, settings
            ),
        ),
        trace=[StageTrace(step=e.step, duration_ms=e.duration_ms) for e in timeline.entries],
        retrieval_error=retrieval.error,
    )


def get_conversation_history(employee_id: str, limit: int | None = None) -> list[ConversationTurn]:
    """Newest `limit` turns for the employee, returned oldest first."""
    limit = limit or get_settings().CHAT_HISTORY_DEFAULT_LIMIT
    rows = list_recent_chat_messages(employee_id, limit)
    return [ConversationTurn.from_row(row) for row in reversed(rows)]


def record_feedback(message_id: str, helpful: bool, comment: str | None = None) -> dict[str, Any]:
    """
    Overwrite feedback on a turn.

    Raises:
        NotFoundError: If the turn does not exist
    """
    return update_chat_feedback(message_id, helpful, comment)


def get_chat_analytics(days: int = 30) -> ChatAnalytics:
    cutoff = datetime.now(timezone.utc) - timedelta(days=days)
    messages = list_chat_messages_since(cutoff.isoformat())

    total = len(messages)
    with_feedback = [m for m in messages if m.get("helpful") is not None]
    helpful = [m for m in with_feedback if m.get("helpful") is True]

    avg_ms = sum(m.get("response_time_ms") or 0 for m in messages) / total if total else 0.0

    references: Counter[str] = Counter()
    for message in messages:
        references.update(message.get("policies_referenced") or [])

    return ChatAnalytics(
        period_days=days,
        total_conversations=total,
        feedback={
            "total_with_feedback": len(with_feedback),
            "helpful_count": len(helpful),
            "helpful_percentage": (
                round(len(helpful) / len(with_feedback) * 100, 1) if with_feedback else 0
            ),
        },
        performance={
            "avg_response_time_ms": round(avg_ms),
            "avg_response_time_seconds": round(avg_ms / 1000, 2),
        },
        top_policies=[
            {"policy_id": policy_id, "references": count}
            for policy_id, count in references.most_common(5)
        ],
    )
