"""API router for HRFlow endpoints."""

from fastapi import APIRouter

from app.api import chat, compliance, contracts, onboarding, stats

router = APIRouter()

# Invisible onboarding
router.include_router(onboarding.router, tags=["onboarding"])

# HR policy chatbot
router.include_router(chat.router, tags=["chat"])

# On-demand contract generation
router.include_router(contracts.router, tags=["contracts"])

# Compliance alerts
router.include_router(compliance.router, tags=["compliance"])

# Dashboard
router.include_router(stats.router, tags=["stats"])
