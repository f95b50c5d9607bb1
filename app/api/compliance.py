"""Compliance API endpoints."""

from datetime import date

from fastapi import APIRouter, HTTPException, Query

from app.core.compliance import compliance_status
from app.core.logging import get_logger
from app.db.compliance_items import list_urgent_alerts

logger = get_logger(__name__)

router = APIRouter()


@router.get("/compliance/alerts")
def urgent_alerts(limit: int = Query(default=50, ge=1, le=500)) -> dict:
    """
    Compliance items inside the urgency window, soonest first.

    Each row carries its status as of today.
    """
    try:
        alerts = list_urgent_alerts(limit)
    except Exception as e:
        logger.error(f"Failed to list compliance alerts: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve compliance alerts") from e

    today = date.today()
    for alert in alerts:
        alert["current_status"] = compliance_status(alert.get("expiry_date"), today)

    return {"alerts": alerts, "count": len(alerts)}
