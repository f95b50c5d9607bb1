"""New-hire notifications: welcome email, first-week calendar and system access.

Payloads are built by pure functions. Delivery goes through a ``Notifier``
chosen once at startup: ``LoggingNotifier`` logs a preview, ``LiveNotifier``
posts each payload to the configured webhook.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Protocol

import httpx

from app.core.config import Settings, get_settings
from app.core.logging import get_logger

logger = get_logger(__name__)

# (day offset, time, title, duration hours, description, include HR, include IT)
FIRST_WEEK_SCHEDULE = [
    (
        0, "09:00", "Welcome & Orientation", 2,
        "Company overview, values, and meet the team", True, False,
    ),
    (
        0, "11:00", "IT Setup & System Access", 1,
        "Laptop setup, email configuration, tool access", False, True,
    ),
    (0, "14:00", "Meet Your Manager", 1, "One-on-one with your direct manager", False, False),
    (1, "10:00", "Team Introduction", 1, "Meet your team members", False, False),
    (4, "15:00", "First Week Check-in", 0.5, "How are you settling in?", True, False),
]


def build_welcome_email(
    employee: dict[str, Any],
    contract_count: int,
    settings: Settings | None = None,
) -> dict[str, Any]:
    settings = settings or get_settings()
    first_name = employee.get("first_name") or (employee.get("full_name") or "").split(" ")[0]
    equity_shares = employee.get("equity_shares") or 0

    checklist = [
        "Employment contract ready for signature",
        "NDA ready for signature",
    ]
    if equity_shares > 0:
        checklist.append(f"Stock option agreement ({equity_shares:,} shares)")
    checklist.extend(
        [
            "System access will be provisioned on your start date",
            "Calendar invites sent for your first week",
        ]
    )
    checklist_text = "\n".join(f"- {line}" for line in checklist)

    body = f"""Dear {first_name},

Welcome to {settings.COMPANY_NAME}! We're thrilled to have you joining us as {employee.get("role")}.

Your start date is {employee.get("start_date")}.

Your onboarding has been automatically prepared:
{checklist_text}

Please review and sign your contracts in the HR portal.

Looking forward to working with you!

Best regards,
{settings.COMPANY_NAME} Team"""

    return {
        "to": employee.get("email"),
        "subject": f"Welcome to {settings.COMPANY_NAME}, {first_name}!",
        "body": body,
        "contracts_attached": contract_count,
    }


def build_first_week_calendar(
    employee: dict[str, Any],
    settings: Settings | None = None,
) -> list[dict[str, Any]]:
    """Five first-week events anchored to the employee's start date."""
    settings = settings or get_settings()
    start = date.fromisoformat(str(employee["start_date"])[:10])

    events = []
    for offset, time, title, hours, description, with_hr, with_it in FIRST_WEEK_SCHEDULE:
        attendees = [employee.get("email")]
        if with_hr:
            attendees.append(settings.HR_EMAIL)
        if with_it:
            attendees.append(settings.IT_EMAIL)
        events.append(
            {
                "title": title,
                "date": (start + timedelta(days=offset)).isoformat(),
                "time": time,
                "duration_hours": hours,
                "attendees": attendees,
                "description": description,
            }
        )
    return events


def build_access_provisions(employee: dict[str, Any]) -> list[dict[str, str]]:
    email = employee.get("email")
    first = (employee.get("first_name") or "").lower()
    last = (employee.get("last_name") or "").lower()
    github_handle = f"{first}-{last}" if last else first

    return [
        {"system": "Email", "account": email, "status": "pending"},
        {"system": "Slack", "account": f"@{first}", "status": "pending"},
        {"system": "GitHub", "account": github_handle, "status": "pending"},
        {"system": "HR Portal", "account": email, "status": "pending"},
        {"system": "Jira", "account": email, "status": "pending"},
    ]


class Notifier(Protocol):
    """Delivery capability for onboarding notifications."""

    simulated: bool

    async def send_welcome_email(self, email: dict[str, Any]) -> dict[str, Any]: ...

    async def create_calendar_events(
        self, events: list[dict[str, Any]]
    ) -> list[dict[str, Any]]: ...

    async def provision_access(
        self, provisions: list[dict[str, str]]
    ) -> list[dict[str, str]]: ...


class LoggingNotifier:
    """Logs what would be sent. Used outside production."""

    simulated = True

    async def send_welcome_email(self, email: dict[str, Any]) -> dict[str, Any]:
        logger.info(
            f"[SIMULATED] Welcome email to {email['to']}: {email['subject']}",
            extra={"recipient": email["to"], "attachments": email["contracts_attached"]},
        )
        return email

    async def create_calendar_events(
        self, events: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        for event in events:
            logger.info(
                f"[SIMULATED] Calendar event {event['date']} {event['time']}: {event['title']}"
            )
        return events

    async def provision_access(
        self, provisions: list[dict[str, str]]
    ) -> list[dict[str, str]]:
        for provision in provisions:
            logger.info(
                f"[SIMULATED] Access to provision {provision['system']}: {provision['account']}"
            )
        return provisions


class LiveNotifier:
    """Posts each notification payload to a webhook that performs delivery."""

    simulated = False

    def __init__(self, webhook_url: str, timeout: float = 15):
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def _post(self, kind: str, payload: Any) -> None:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(self.webhook_url, json={"kind": kind, "payload": payload})
            resp.raise_for_status()
        logger.info(f"Dispatched {kind} notification", extra={"kind": kind})

    async def send_welcome_email(self, email: dict[str, Any]) -> dict[str, Any]:
        await self._post("welcome_email", email)
        return email

    async def create_calendar_events(
        self, events: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        await self._post("calendar_events", events)
        return events

    async def provision_access(
        self, provisions: list[dict[str, str]]
    ) -> list[dict[str, str]]:
        await self._post("system_access", provisions)
        return provisions


def get_notifier(settings: Settings | None = None) -> Notifier:
    """
    Select the notifier for this process.

    Raises:
        ValueError: If live notifications are enabled without a webhook URL
    """
    settings = settings or get_settings()
    if not settings.notifications_live:
        return LoggingNotifier()
    if not settings.NOTIFICATION_WEBHOOK_URL:
        raise ValueError("NOTIFICATION_WEBHOOK_URL must be set when notifications are live")
    return LiveNotifier(settings.NOTIFICATION_WEBHOOK_URL)
