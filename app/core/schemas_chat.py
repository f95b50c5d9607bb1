"""Pydantic schemas for the HR policy chatbot."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RetrievedPolicy(BaseModel):
    """A policy row returned by similarity search."""

    id: str = Field(..., description="Policy UUID")
    title: str = Field(..., description="Policy title")
    category: str | None = Field(default=None, description="Policy category")
    country: str | None = Field(default=None, description="Country scope, null for global")
    content: str = Field(..., description="Full policy body")
    similarity: float = Field(..., description="Cosine similarity score (0-1)")


class RetrievalResult(BaseModel):
    """Retrieved policies plus the failure message when search degraded to empty."""

    policies: list[RetrievedPolicy] = Field(default_factory=list)
    error: str | None = None


class ChatMessageRequest(BaseModel):
    """POST /chat/message body."""

    model_config = ConfigDict(populate_by_name=True)

    employee_id: str | None = Field(default=None, alias="employeeId")
    question: str | None = None


class FeedbackRequest(BaseModel):
    """PUT /chat/message body. `helpful` is left untyped so non-booleans reach the 400 check."""

    model_config = ConfigDict(populate_by_name=True)

    message_id: str | None = Field(default=None, alias="messageId")
    helpful: Any = None
    comment: str | None = None


class EmployeeSummary(BaseModel):
    name: str | None = None
    role: str | None = None
    country: str | None = None


class PolicyReference(BaseModel):
    """Provenance for one policy used in an answer."""

    title: str
    category: str | None = None
    similarity: str = Field(..., description="Similarity as a percentage string, e.g. '87.3%'")
    score: float


class ChatContext(BaseModel):
    policies_used: int
    policies: list[PolicyReference] = Field(default_factory=list)


class ChatMetadata(BaseModel):
    response_time_ms: int
    model: str
    tokens_used: int
    cost_estimate: float


class StageTrace(BaseModel):
    step: str
    duration_ms: int


class AnswerResult(BaseModel):
    """Response body of POST /chat/message."""

    success: bool = True
    conversation_id: str
    question: str
    answer: str
    employee: EmployeeSummary
    context: ChatContext
    metadata: ChatMetadata
    trace: list[StageTrace] = Field(default_factory=list)
    retrieval_error: str | None = None


class ConversationTurn(BaseModel):
    """One stored question/answer exchange as exposed by the history endpoint."""

    id: str
    question: str
    answer: str
    timestamp: str | None = None
    response_time_ms: int | None = None
    helpful: bool | None = None
    feedback_comment: str | None = None
    policies_used: int = 0

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ConversationTurn":
        return cls(
            id=str(row["id"]),
            question=row.get("message") or "",
            answer=row.get("response") or "",
            timestamp=row.get("created_at"),
            response_time_ms=row.get("response_time_ms"),
            helpful=row.get("helpful"),
            feedback_comment=row.get("feedback_comment"),
            policies_used=len(row.get("policies_referenced") or []),
        )


class ChatHistoryResponse(BaseModel):
    success: bool = True
    employee_id: str
    conversations: list[ConversationTurn] = Field(default_factory=list)
    count: int = 0


class FeedbackResponse(BaseModel):
    success: bool = True
    message: str = "Feedback saved"


class ChatAnalytics(BaseModel):
    period_days: int
    total_conversations: int
    feedback: dict[str, Any]
    performance: dict[str, Any]
    top_policies: list[dict[str, Any]] = Field(default_factory=list)
