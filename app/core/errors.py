"""Exception types shared by the HRFlow chains, graphs and API."""

from typing import Any


class HRFlowError(Exception):
    """Base class for expected, typed failures."""


class InvalidInputError(HRFlowError):
    """Caller input is missing or malformed. Never retried."""

    def __init__(self, message: str, fields: list[str] | None = None, **context: Any):
        super().__init__(message)
        self.fields = fields or []
        self.context = context

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": str(self)}
        if self.fields:
            body["missing"] = self.fields
        body.update(self.context)
        return body


class NotFoundError(HRFlowError):
    """A referenced row (employee, chat message) does not exist."""

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity.capitalize()} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class ProviderError(HRFlowError):
    """An embedding, generation or store call failed."""

    def __init__(self, message: str, provider: str = "openai", rate_limited: bool = False):
        super().__init__(message)
        self.provider = provider
        self.rate_limited = rate_limited


class ProcessingFailedError(HRFlowError):
    """Question answering failed after the employee was resolved."""


class FatalOrchestrationError(HRFlowError):
    """A critical orchestration stage failed; later stages were not run."""

    def __init__(
        self,
        message: str,
        step: str,
        timeline: list[dict[str, Any]] | None = None,
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(message)
        self.step = step
        self.timeline = timeline or []
        self.errors = errors or []
