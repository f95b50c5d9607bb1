"""Pydantic schemas for new-hire onboarding and contract generation."""

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

SUPPORTED_COUNTRIES = ["SG", "UK", "US", "IN", "UAE"]

# wire name -> attribute
REQUIRED_CANDIDATE_FIELDS = {
    "fullName": "full_name",
    "email": "email",
    "role": "role",
    "department": "department",
    "country": "country",
    "salaryUSD": "salary_usd",
    "startDate": "start_date",
}

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

ContractType = Literal["employment", "nda", "equity"]


class CandidateRequest(BaseModel):
    """
    POST /onboard body.

    Fields are optional at the model level so that presence is checked
    explicitly and reported as a `missing` list.
    """

    model_config = ConfigDict(populate_by_name=True)

    full_name: str | None = Field(default=None, alias="fullName")
    email: str | None = None
    role: str | None = None
    department: str | None = None
    country: str | None = None
    salary_usd: float | None = Field(default=None, alias="salaryUSD")
    equity_shares: int | None = Field(default=0, alias="equityShares")
    start_date: str | None = Field(default=None, alias="startDate")
    manager_id: str | None = Field(default=None, alias="managerId")
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    employment_type: str | None = Field(default=None, alias="employmentType")

    def missing_fields(self) -> list[str]:
        """Required fields that are absent or falsy, by their wire names."""
        return [
            wire_name
            for wire_name, attr in REQUIRED_CANDIDATE_FIELDS.items()
            if not getattr(self, attr)
        ]

    def has_valid_email(self) -> bool:
        return bool(self.email and EMAIL_PATTERN.match(self.email))

    def has_supported_country(self) -> bool:
        return self.country in SUPPORTED_COUNTRIES

    @property
    def resolved_first_name(self) -> str:
        return self.first_name or (self.full_name or "").split(" ")[0]

    @property
    def resolved_last_name(self) -> str:
        return self.last_name or " ".join((self.full_name or "").split(" ")[1:])


class Candidate(BaseModel):
    """Validated new-hire data handed to the onboarding graph and contract chain."""

    full_name: str
    email: str
    role: str
    department: str
    country: str
    salary_usd: float
    equity_shares: int = 0
    start_date: str
    manager_id: str | None = None
    first_name: str
    last_name: str = ""
    employment_type: str = "full_time"
    employee_id: str | None = None

    @classmethod
    def from_request(cls, request: CandidateRequest) -> "Candidate":
        return cls(
            full_name=request.full_name,
            email=request.email,
            role=request.role,
            department=request.department,
            country=request.country,
            salary_usd=request.salary_usd,
            equity_shares=request.equity_shares or 0,
            start_date=request.start_date,
            manager_id=request.manager_id,
            first_name=request.resolved_first_name,
            last_name=request.resolved_last_name,
            employment_type=request.employment_type or "full_time",
        )

    @classmethod
    def from_employee(cls, employee: dict[str, Any]) -> "Candidate":
        """Rebuild contract inputs from a stored employee row."""
        full_name = employee.get("full_name") or ""
        return cls(
            full_name=full_name,
            email=employee.get("email") or "",
            role=employee.get("role") or "",
            department=employee.get("department") or "",
            country=employee.get("country") or "",
            salary_usd=employee.get("salary_usd") or 0,
            equity_shares=employee.get("equity_shares") or 0,
            start_date=str(employee.get("start_date") or ""),
            manager_id=employee.get("manager_id"),
            first_name=employee.get("first_name") or full_name.split(" ")[0],
            last_name=employee.get("last_name") or " ".join(full_name.split(" ")[1:]),
            employment_type=employee.get("employment_type") or "full_time",
            employee_id=employee.get("id"),
        )


class DocumentDownload(BaseModel):
    buffer: str = Field(..., description="Base64-encoded DOCX bytes")
    filename: str
    mimeType: str


class GeneratedDocumentOut(BaseModel):
    type: str
    id: str | None = None
    status: str | None = None
    file_size_kb: float
    generation_time_ms: int
    download: DocumentDownload


class OnboardingMetrics(BaseModel):
    manual_time_hours: float
    automated_time_seconds: float
    time_saved_percentage: float
    cost_saved_usd: float


class OnboardingResult(BaseModel):
    """Complete result bundle of one onboarding run."""

    success: bool
    message: str | None = None
    error: str | None = None
    employee: dict[str, Any] | None = None
    generated_documents: list[GeneratedDocumentOut] = Field(default_factory=list)
    compliance_items: list[dict[str, Any]] = Field(default_factory=list)
    calendar_events: list[dict[str, Any]] = Field(default_factory=list)
    system_access: list[dict[str, Any]] = Field(default_factory=list)
    timeline: list[dict[str, Any]] = Field(default_factory=list)
    errors: list[dict[str, Any]] = Field(default_factory=list)
    total_duration_ms: int = 0
    metrics: OnboardingMetrics | None = None


class ContractGenerateRequest(BaseModel):
    """POST /contracts/generate body."""

    model_config = ConfigDict(populate_by_name=True)

    employee_id: str | None = Field(default=None, alias="employeeId")
    contract_type: ContractType = Field(default="employment", alias="contractType")


class ContractGenerateResponse(BaseModel):
    success: bool = True
    contract: dict[str, Any]
    file: DocumentDownload
