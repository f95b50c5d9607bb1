"""Onboarding API endpoints: invisible onboarding for new hires."""

import asyncio
from functools import lru_cache

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.core.errors import InvalidInputError
from app.core.logging import get_logger
from app.core.notifiers import Notifier, get_notifier
from app.core.schemas_onboarding import (
    SUPPORTED_COUNTRIES,
    Candidate,
    CandidateRequest,
    OnboardingResult,
)
from app.graphs.onboarding_graph import run_onboarding

logger = get_logger(__name__)

router = APIRouter()


@lru_cache(maxsize=1)
def get_onboarding_notifier() -> Notifier:
    """Notifier chosen once per process from settings."""
    return get_notifier(get_settings())


def validate_candidate(request: CandidateRequest) -> Candidate:
    """
    Check presence, email shape and country before anything is written.

    Raises:
        InvalidInputError: With `missing` or `valid_countries` context
    """
    missing = request.missing_fields()
    if missing:
        raise InvalidInputError("Missing required fields", fields=missing)

    if not request.has_valid_email():
        raise InvalidInputError("Invalid email format")

    if not request.has_supported_country():
        raise InvalidInputError("Invalid country", valid_countries=SUPPORTED_COUNTRIES)

    return Candidate.from_request(request)


@router.post("/onboard", response_model=OnboardingResult)
@router.post("/automation/onboard", response_model=OnboardingResult, include_in_schema=False)
async def onboard(
    request: CandidateRequest,
    notifier: Notifier = Depends(get_onboarding_notifier),
):
    """
    Onboard a new hire: contracts, employee record, compliance and notifications.

    Returns:
        OnboardingResult on success (possibly with partial `errors`)

    Raises:
        InvalidInputError: 400 on validation failure
    """
    candidate = validate_candidate(request)
    settings = get_settings()

    try:
        result = await asyncio.wait_for(
            run_onboarding(candidate, notifier=notifier, settings=settings),
            timeout=settings.ONBOARDING_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error(
            f"Onboarding timed out after {settings.ONBOARDING_TIMEOUT_SECONDS}s",
            extra={"email": candidate.email},
        )
        return JSONResponse(status_code=504, content={"error": "timeout"})

    if not result.success:
        return JSONResponse(
            status_code=500,
            content={
                "error": "Onboarding failed",
                "details": result.error,
                "timeline": result.timeline,
                "errors": result.errors,
            },
        )

    return result


@router.get("/automation/onboard")
async def onboarding_service_info() -> dict:
    """Service descriptor for the onboarding automation."""
    return {
        "service": "invisible-onboarding",
        "status": "operational",
        "version": "0.1.0",
        "endpoints": {"POST": ["/onboard", "/automation/onboard"]},
        "notifications_live": get_settings().notifications_live,
        "supported_countries": SUPPORTED_COUNTRIES,
    }
