"""Draft a country-specific contract with the LLM and render it to DOCX."""

import asyncio
import time
from dataclasses import dataclass

from app.core.config import get_settings
from app.core.contracts import build_contract_prompt, render_contract_docx
from app.core.llm import complete_chat_async
from app.core.logging import get_logger
from app.core.schemas_onboarding import Candidate

logger = get_logger(__name__)


@dataclass
class GeneratedContract:
    contract_type: str
    content: str
    docx_bytes: bytes
    generation_ms: int
    model: str

    @property
    def file_size(self) -> int:
        return len(self.docx_bytes)


async def generate_contract(candidate: Candidate, contract_type: str) -> GeneratedContract:
    """
    Generate one contract document.

    Args:
        candidate: Validated new-hire data
        contract_type: employment, nda or equity

    Returns:
        GeneratedContract with markdown content and DOCX bytes

    Raises:
        ValueError: If the contract type or country is unsupported
        ProviderError: If the generation call fails
    """
    settings = get_settings()
    messages = build_contract_prompt(candidate, contract_type)

    logger.info(
        f"Generating {contract_type} contract for {candidate.full_name}",
        extra={"contract_type": contract_type, "country": candidate.country},
    )

    start = time.perf_counter()
    result = await complete_chat_async(
        messages,
        model=settings.CONTRACT_MODEL,
        temperature=settings.CONTRACT_TEMPERATURE,
        max_tokens=settings.CONTRACT_MAX_TOKENS,
    )
    generation_ms = int((time.perf_counter() - start) * 1000)

    docx_bytes = await asyncio.to_thread(
        render_contract_docx,
        result.text,
        candidate.full_name,
        candidate.country,
        contract_type,
        settings.COMPANY_NAME,
    )

    logger.info(
        f"Generated {contract_type} contract in {generation_ms}ms "
        f"({len(docx_bytes) / 1024:.1f} KB)",
        extra={"contract_type": contract_type, "tokens": result.total_tokens},
    )

    return GeneratedContract(
        contract_type=contract_type,
        content=result.text,
        docx_bytes=docx_bytes,
        generation_ms=generation_ms,
        model=result.model,
    )
