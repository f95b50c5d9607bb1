"""Invisible onboarding LangGraph agent for new hires."""

import asyncio
import base64
import logging
import operator
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Annotated, Any

from langgraph.graph import END, StateGraph

from app.chains.generate_contract import GeneratedContract, generate_contract
from app.core.compliance import generate_compliance_items
from app.core.config import Settings, get_settings
from app.core.contracts import (
    DOCX_MIME_TYPE,
    calculate_local_salary,
    contract_filename,
    contract_types_for,
    get_currency,
)
from app.core.errors import FatalOrchestrationError
from app.core.logging import get_logger, log_with_context
from app.core.notifiers import (
    Notifier,
    build_access_provisions,
    build_first_week_calendar,
    build_welcome_email,
)
from app.core.pipeline import StageError, StageOutcome, Timeline, gather_outcomes
from app.core.schemas_onboarding import (
    Candidate,
    DocumentDownload,
    GeneratedDocumentOut,
    OnboardingMetrics,
    OnboardingResult,
)
from app.db.automation_logs import insert_automation_log
from app.db.compliance_items import insert_compliance_items
from app.db.employees import insert_employee
from app.db.generated_contracts import insert_generated_contract

logger = get_logger(__name__)

TRIGGER_EVENT = "new_hire_onboarding"


@dataclass
class OnboardingState:
    """State for the onboarding graph."""

    # Input fields
    candidate: Candidate
    notifier: Any
    settings: Settings
    started_at: float

    # Stage outputs
    contracts: list[GeneratedContract] = field(default_factory=list)
    employee: dict[str, Any] | None = None
    saved_contracts: dict[str, dict[str, Any]] = field(default_factory=dict)
    compliance_items: list[dict[str, Any]] = field(default_factory=list)
    welcome_email: dict[str, Any] | None = None
    calendar_events: list[dict[str, Any]] = field(default_factory=list)
    system_access: list[dict[str, Any]] = field(default_factory=list)
    fatal_error: str | None = None

    # Accumulated across nodes
    timeline: Annotated[list[dict[str, Any]], operator.add] = field(default_factory=list)
    errors: Annotated[list[dict[str, Any]], operator.add] = field(default_factory=list)


StageFn = Callable[[OnboardingState], Awaitable[StageOutcome[dict[str, Any]]]]


def _timed_node(name: str, fn: StageFn, fatal: bool = False):
    """Wrap a stage so the node records one timeline entry and its errors."""

    async def node(state: OnboardingState) -> dict[str, Any]:
        timeline = Timeline()
        try:
            outcome = await timeline.run_stage(name, lambda: fn(state), fatal=fatal)
        except FatalOrchestrationError as e:
            return {
                "fatal_error": str(e),
                "timeline": e.timeline,
                "errors": e.errors,
            }
        return {
            **(outcome.value or {}),
            "timeline": timeline.entries_as_dicts(),
            "errors": timeline.errors_as_dicts(),
        }

    return node


async def generate_documents(state: OnboardingState) -> StageOutcome[dict[str, Any]]:
    """Draft every applicable contract concurrently; one failure never cancels the others."""
    types = contract_types_for(state.candidate.equity_shares)

    successes, failures = await gather_outcomes(
        types,
        [generate_contract(state.candidate, contract_type) for contract_type in types],
    )

    contracts = [contract for _, contract in successes]
    errors = [
        StageError(step="contracts_generated", type=contract_type, error=str(exc))
        for contract_type, exc in failures
    ]
    for contract_type, exc in failures:
        logger.warning(f"Contract generation failed for {contract_type}: {exc}")

    return StageOutcome(
        value={"contracts": contracts},
        errors=errors,
        details={
            "contracts_count": len(contracts),
            "contracts": [
                {
                    "type": c.contract_type,
                    "size_bytes": c.file_size,
                    "generation_time_ms": c.generation_ms,
                }
                for c in contracts
            ],
        },
    )


async def create_employee(state: OnboardingState) -> StageOutcome[dict[str, Any]]:
    candidate = state.candidate
    row = {
        "email": candidate.email,
        "full_name": candidate.full_name,
        "first_name": candidate.first_name,
        "last_name": candidate.last_name,
        "role": candidate.role,
        "country": candidate.country,
        "department": candidate.department,
        "salary_usd": candidate.salary_usd,
        "salary_local": calculate_local_salary(candidate.salary_usd, candidate.country),
        "currency": get_currency(candidate.country),
        "equity_shares": candidate.equity_shares,
        "employment_type": candidate.employment_type,
        "start_date": candidate.start_date,
        "manager_id": candidate.manager_id,
        "compliance_scenario": "compliant",
    }
    employee = await asyncio.to_thread(insert_employee, row)
    return StageOutcome(value={"employee": employee}, details={"employee_id": employee["id"]})


async def save_documents(state: OnboardingState) -> StageOutcome[dict[str, Any]]:
    saved: dict[str, dict[str, Any]] = {}
    errors = []
    for contract in state.contracts:
        try:
            saved[contract.contract_type] = await asyncio.to_thread(
                insert_generated_contract,
                employee_id=state.employee["id"],
                contract_type=contract.contract_type,
                content=contract.content,
                status="pending_approval",
                generation_duration_ms=contract.generation_ms,
                ai_model_used=contract.model,
            )
        except Exception as e:
            errors.append(
                StageError(step="contracts_saved", type=contract.contract_type, error=str(e))
            )

    return StageOutcome(
        value={"saved_contracts": saved},
        errors=errors,
        details={"saved_count": len(saved)},
    )


async def seed_compliance(state: OnboardingState) -> StageOutcome[dict[str, Any]]:
    items = generate_compliance_items(state.employee)
    saved = await asyncio.to_thread(insert_compliance_items, items)
    return StageOutcome(
        value={"compliance_items": saved},
        details={
            "items_count": len(saved),
            "items": [
                {"type": i["item_type"], "name": i["item_name"], "expiry_date": i["expiry_date"]}
                for i in items
            ],
        },
    )


async def send_welcome(state: OnboardingState) -> StageOutcome[dict[str, Any]]:
    email = build_welcome_email(state.employee, len(state.contracts), state.settings)
    sent = await state.notifier.send_welcome_email(email)
    return StageOutcome(
        value={"welcome_email": sent},
        details={"simulated": state.notifier.simulated, "recipient": email["to"]},
    )


async def schedule_first_week(state: OnboardingState) -> StageOutcome[dict[str, Any]]:
    events = build_first_week_calendar(state.employee, state.settings)
    created = await state.notifier.create_calendar_events(events)
    return StageOutcome(
        value={"calendar_events": created},
        details={
            "simulated": state.notifier.simulated,
            "events_count": len(created),
            "events": [{"title": e["title"], "date": e["date"]} for e in created],
        },
    )


async def provision_access(state: OnboardingState) -> StageOutcome[dict[str, Any]]:
    provisions = build_access_provisions(state.employee)
    provisioned = await state.notifier.provision_access(provisions)
    return StageOutcome(
        value={"system_access": provisioned},
        details={"simulated": state.notifier.simulated, "provisions": provisioned},
    )


async def write_audit_log(state: OnboardingState) -> dict[str, Any]:
    """Record the run; a failed write is logged and never changes the outcome."""
    total_ms = _elapsed_ms(state.started_at)
    try:
        await asyncio.to_thread(
            insert_automation_log,
            trigger_event=TRIGGER_EVENT,
            employee_id=state.employee["id"] if state.employee else None,
            actions_taken=state.timeline,
            total_duration_ms=total_ms,
            success=state.fatal_error is None and not state.errors,
            error_message=state.fatal_error,
        )
    except Exception as e:
        logger.error(f"Audit log write failed: {e}", extra={"trigger_event": TRIGGER_EVENT})
    return {}


def _after_employee(state: OnboardingState) -> str:
    return "write_audit_log" if state.fatal_error else "contracts_saved"


STAGES: list[tuple[str, StageFn, bool]] = [
    ("contracts_generated", generate_documents, False),
    ("employee_created", create_employee, True),
    ("contracts_saved", save_documents, False),
    ("compliance_initialized", seed_compliance, False),
    ("welcome_email_sent", send_welcome, False),
    ("calendar_events_created", schedule_first_week, False),
    ("system_access_provisioned", provision_access, False),
]


def _build_graph() -> StateGraph:
    """Build the onboarding graph."""
    graph = StateGraph(OnboardingState)

    for name, fn, fatal in STAGES:
        graph.add_node(name, _timed_node(name, fn, fatal=fatal))
    graph.add_node("write_audit_log", write_audit_log)

    graph.set_entry_point("contracts_generated")
    graph.add_edge("contracts_generated", "employee_created")
    graph.add_conditional_edges(
        "employee_created",
        _after_employee,
        {"contracts_saved": "contracts_saved", "write_audit_log": "write_audit_log"},
    )
    graph.add_edge("contracts_saved", "compliance_initialized")
    graph.add_edge("compliance_initialized", "welcome_email_sent")
    graph.add_edge("welcome_email_sent", "calendar_events_created")
    graph.add_edge("calendar_events_created", "system_access_provisioned")
    graph.add_edge("system_access_provisioned", "write_audit_log")
    graph.add_edge("write_audit_log", END)

    return graph


_compiled_graph = _build_graph().compile()


def _elapsed_ms(started_at: float) -> int:
    return int((time.perf_counter() - started_at) * 1000)


def _document_out(
    contract: GeneratedContract,
    saved: dict[str, Any] | None,
    full_name: str,
) -> GeneratedDocumentOut:
    return GeneratedDocumentOut(
        type=contract.contract_type,
        id=str(saved["id"]) if saved else None,
        status=saved.get("status") if saved else None,
        file_size_kb=round(contract.file_size / 1024, 1),
        generation_time_ms=contract.generation_ms,
        download=DocumentDownload(
            buffer=base64.b64encode(contract.docx_bytes).decode("ascii"),
            filename=contract_filename(full_name, contract.contract_type),
            mimeType=DOCX_MIME_TYPE,
        ),
    )


def _metrics(total_ms: int, settings: Settings) -> OnboardingMetrics:
    seconds = total_ms / 1000
    manual_seconds = settings.MANUAL_ONBOARDING_HOURS * 3600
    return OnboardingMetrics(
        manual_time_hours=settings.MANUAL_ONBOARDING_HOURS,
        automated_time_seconds=round(seconds, 1),
        time_saved_percentage=round((1 - seconds / manual_seconds) * 100, 1),
        cost_saved_usd=settings.MANUAL_ONBOARDING_HOURS * settings.HR_ADMIN_HOURLY_RATE_USD,
    )


async def run_onboarding(
    candidate: Candidate,
    *,
    notifier: Notifier,
    settings: Settings | None = None,
) -> OnboardingResult:
    """
    Run the invisible onboarding workflow for one new hire.

    Only employee creation is fatal. Every other stage failure is collected
    in `errors` and the run still reports success.

    Args:
        candidate: Validated new-hire data
        notifier: Delivery capability for email, calendar and access
        settings: Optional settings override

    Returns:
        OnboardingResult with employee, documents, timeline and errors
    """
    settings = settings or get_settings()

    log_with_context(
        logger,
        logging.INFO,
        f"Starting onboarding for {candidate.full_name}",
        role=candidate.role,
        country=candidate.country,
        equity_shares=candidate.equity_shares,
    )

    initial_state = OnboardingState(
        candidate=candidate,
        notifier=notifier,
        settings=settings,
        started_at=time.perf_counter(),
    )

    final = await _compiled_graph.ainvoke(initial_state)

    total_ms = _elapsed_ms(initial_state.started_at)

    if final.get("fatal_error"):
        logger.error(
            f"Onboarding failed for {candidate.full_name}: {final['fatal_error']}",
            extra={"steps_completed": len(final["timeline"])},
        )
        return OnboardingResult(
            success=False,
            error=final["fatal_error"],
            timeline=final["timeline"],
            errors=final["errors"],
            total_duration_ms=total_ms,
        )

    employee = final["employee"]
    saved = final["saved_contracts"]
    documents = [
        _document_out(c, saved.get(c.contract_type), candidate.full_name)
        for c in final["contracts"]
    ]

    logger.info(
        f"Onboarding complete for {candidate.full_name} in {total_ms}ms",
        extra={
            "employee_id": employee["id"],
            "documents": len(documents),
            "errors": len(final["errors"]),
        },
    )

    return OnboardingResult(
        success=True,
        message=f"Onboarding completed for {candidate.full_name} in {total_ms / 1000:.1f}s",
        employee={
            "id": employee["id"],
            "name": employee.get("full_name"),
            "email": employee.get("email"),
            "role": employee.get("role"),
            "country": employee.get("country"),
            "start_date": employee.get("start_date"),
        },
        generated_documents=documents,
        compliance_items=final["compliance_items"],
        calendar_events=final["calendar_events"],
        system_access=final["system_access"],
        timeline=final["timeline"],
        errors=final["errors"],
        total_duration_ms=total_ms,
        metrics=_metrics(total_ms, settings),
    )
