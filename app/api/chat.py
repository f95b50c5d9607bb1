"""HR chatbot API endpoints: ask, history, feedback and analytics."""

import asyncio

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from app.chains.answer_question import (
    answer_question,
    get_chat_analytics,
    get_conversation_history,
    record_feedback,
)
from app.core.config import get_settings
from app.core.errors import InvalidInputError, ProcessingFailedError
from app.core.logging import get_logger
from app.core.schemas_chat import (
    AnswerResult,
    ChatAnalytics,
    ChatHistoryResponse,
    ChatMessageRequest,
    FeedbackRequest,
    FeedbackResponse,
)

logger = get_logger(__name__)

router = APIRouter()


@router.post("/chat/message", response_model=AnswerResult, response_model_exclude={"trace"})
async def ask_question(request: ChatMessageRequest):
    """
    Answer an employee's HR question from company policies.

    Raises:
        InvalidInputError: 400 when employee id or question is missing or too long
        NotFoundError: 404 when the employee does not exist
    """
    settings = get_settings()

    if not request.employee_id:
        raise InvalidInputError("Employee ID is required")
    if not request.question or not request.question.strip():
        raise InvalidInputError("Question is required")
    if len(request.question) > settings.MAX_QUESTION_CHARS:
        raise InvalidInputError(
            f"Question too long (max {settings.MAX_QUESTION_CHARS} characters)"
        )

    try:
        return await asyncio.wait_for(
            answer_question(request.employee_id, request.question),
            timeout=settings.CHAT_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error(
            f"Chat request timed out after {settings.CHAT_TIMEOUT_SECONDS}s",
            extra={"employee_id": request.employee_id},
        )
        return JSONResponse(status_code=504, content={"error": "timeout"})
    except ProcessingFailedError as e:
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to process question", "details": str(e)},
        )


@router.get("/chat/message", response_model=ChatHistoryResponse)
def conversation_history(
    employee_id: str | None = Query(default=None, alias="employeeId"),
    limit: int | None = Query(default=None, ge=1, le=100),
) -> ChatHistoryResponse:
    """Most recent turns for an employee, oldest first."""
    if not employee_id:
        raise InvalidInputError("Employee ID is required")

    conversations = get_conversation_history(employee_id, limit)
    return ChatHistoryResponse(
        employee_id=employee_id,
        conversations=conversations,
        count=len(conversations),
    )


@router.put("/chat/message", response_model=FeedbackResponse)
def submit_feedback(request: FeedbackRequest) -> FeedbackResponse:
    """
    Record helpful / not helpful feedback on an answer.

    Raises:
        InvalidInputError: 400 when message id is missing or helpful is not a boolean
        NotFoundError: 404 when the message does not exist
    """
    if not request.message_id:
        raise InvalidInputError("Message ID is required")
    if not isinstance(request.helpful, bool):
        raise InvalidInputError("Helpful must be true or false")

    record_feedback(request.message_id, request.helpful, request.comment)
    return FeedbackResponse()


@router.get("/chat/analytics", response_model=ChatAnalytics)
def chat_analytics(days: int = Query(default=30, ge=1, le=365)) -> ChatAnalytics:
    """Usage, feedback and latency figures for the chatbot."""
    return get_chat_analytics(days)
