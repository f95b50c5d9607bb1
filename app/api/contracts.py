"""Contract API endpoints: on-demand contract generation for existing employees."""

import asyncio
import base64

from fastapi import APIRouter

from app.chains.generate_contract import generate_contract
from app.core.contracts import DOCX_MIME_TYPE, contract_filename
from app.core.errors import InvalidInputError
from app.core.logging import get_logger
from app.core.schemas_onboarding import (
    Candidate,
    ContractGenerateRequest,
    ContractGenerateResponse,
    DocumentDownload,
)
from app.db.employees import get_employee
from app.db.generated_contracts import insert_generated_contract

logger = get_logger(__name__)

router = APIRouter()


@router.post("/contracts/generate", response_model=ContractGenerateResponse)
async def generate_contract_for_employee(
    request: ContractGenerateRequest,
) -> ContractGenerateResponse:
    """
    Generate a contract for a stored employee and save it as a draft.

    A failed save is logged; the generated document is still returned.

    Raises:
        InvalidInputError: 400 when employee id is missing
        NotFoundError: 404 when the employee does not exist
        ProviderError: 500 when generation fails
    """
    if not request.employee_id:
        raise InvalidInputError("Employee ID is required")

    employee = await asyncio.to_thread(get_employee, request.employee_id)
    candidate = Candidate.from_employee(employee)

    contract = await generate_contract(candidate, request.contract_type)

    saved = None
    try:
        saved = await asyncio.to_thread(
            insert_generated_contract,
            employee_id=employee["id"],
            contract_type=request.contract_type,
            content=contract.content,
            status="draft",
            generation_duration_ms=contract.generation_ms,
            ai_model_used=contract.model,
        )
    except Exception as e:
        logger.error(
            f"Failed to save generated contract, returning it unsaved: {e}",
            extra={"employee_id": employee["id"], "contract_type": request.contract_type},
        )

    return ContractGenerateResponse(
        contract={
            "id": saved["id"] if saved else None,
            "type": request.contract_type,
            "employee": {
                "id": employee["id"],
                "name": employee.get("full_name"),
                "role": employee.get("role"),
                "country": employee.get("country"),
            },
            "generation_time_ms": contract.generation_ms,
            "file_size": contract.file_size,
            "model": contract.model,
        },
        file=DocumentDownload(
            buffer=base64.b64encode(contract.docx_bytes).decode("ascii"),
            filename=contract_filename(
                employee.get("full_name") or "employee", request.contract_type, "_contract"
            ),
            mimeType=DOCX_MIME_TYPE,
        ),
    )
