"""Country legal data, contract prompts and DOCX rendering for generated contracts."""

from dataclasses import dataclass
from io import BytesIO

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt, Twips

from app.core.schemas_onboarding import Candidate

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


@dataclass(frozen=True)
class CountryLegalData:
    name: str
    currency: str
    exchange_rate: float
    annual_leave: int
    notice_period: dict[str, float]
    probation_months: int
    work_week: float
    overtime_rate: float
    requirements: tuple[str, ...]


COUNTRY_LEGAL_DATA: dict[str, CountryLegalData] = {
    "SG": CountryLegalData(
        name="Singapore",
        currency="SGD",
        exchange_rate=1.35,
        annual_leave=14,
        notice_period={"junior": 1, "mid": 2, "senior": 3},
        probation_months=3,
        work_week=44,
        overtime_rate=1.5,
        requirements=(
            "CPF contributions (Employer: 17%, Employee: 20%)",
            "Compliance with Singapore Employment Act",
            "Statutory leave entitlements per Ministry of Manpower",
        ),
    ),
    "UK": CountryLegalData(
        name="United Kingdom",
        currency="GBP",
        exchange_rate=0.79,
        annual_leave=28,
        notice_period={"junior": 1, "mid": 1, "senior": 3},
        probation_months=6,
        work_week=37.5,
        overtime_rate=1.0,
        requirements=(
            "Workplace pension (Employer: 3%, Employee: 5%)",
            "Compliance with UK Employment Rights Act 1996",
            "National Insurance contributions",
            "Statutory sick pay and maternity/paternity leave",
        ),
    ),
    "US": CountryLegalData(
        name="United States",
        currency="USD",
        exchange_rate=1.0,
        annual_leave=15,
        notice_period={"junior": 0, "mid": 0, "senior": 0.5},
        probation_months=3,
        work_week=40,
        overtime_rate=1.5,
        requirements=(
            "At-will employment (unless stated otherwise)",
            "401(k) matching up to 4% of base salary",
            "FMLA compliance for eligible employees",
            "Fair Labor Standards Act (FLSA) compliance",
        ),
    ),
    "IN": CountryLegalData(
        name="India",
        currency="INR",
        exchange_rate=83.0,
        annual_leave=18,
        notice_period={"junior": 1, "mid": 2, "senior": 3},
        probation_months=3,
        work_week=48,
        overtime_rate=2.0,
        requirements=(
            "Provident Fund (PF) contributions (Employer: 12%, Employee: 12%)",
            "Compliance with Indian Shops and Establishments Act",
            "Gratuity applicable after 5 years of service",
            "Professional Tax as per state regulations",
        ),
    ),
    "UAE": CountryLegalData(
        name="United Arab Emirates",
        currency="AED",
        exchange_rate=3.67,
        annual_leave=30,
        notice_period={"junior": 1, "mid": 1, "senior": 3},
        probation_months=6,
        work_week=48,
        overtime_rate=1.25,
        requirements=(
            "End of Service Benefit calculation per UAE Labor Law",
            "Compliance with UAE Federal Law No. 8 of 1980",
            "Work permit and visa sponsorship",
            "Medical insurance coverage mandatory",
        ),
    ),
}

CONTRACT_TITLES = {
    "employment": "EMPLOYMENT AGREEMENT",
    "nda": "NON-DISCLOSURE AGREEMENT",
    "equity": "STOCK OPTION GRANT AGREEMENT",
}

CURRENCY_SYMBOLS = {"USD": "$", "GBP": "£", "INR": "₹"}

SYSTEM_PROMPTS = {
    "employment": """You are an expert employment contract lawyer with deep knowledge of international labor law.

Your task is to generate a complete, legally sound employment contract based on the provided employee data and country requirements.

CRITICAL REQUIREMENTS:
1. Legal accuracy for the specific jurisdiction
2. Include ALL mandatory clauses for the country
3. Use proper legal terminology
4. Be comprehensive yet clear
5. Follow standard employment contract structure
6. Include specific numbers (salary, leave days, notice period)
7. Use formal but readable language

STRUCTURE:
- Header with parties
- Position and duties
- Compensation and benefits
- Working hours and leave
- Probation period
- Notice period and termination
- Confidentiality
- Intellectual property
- Governing law
- Signatures

OUTPUT FORMAT:
Generate markdown-formatted contract text that can be converted to DOCX.
Use ## for main headings, ### for subheadings.
Be precise with numbers and dates.""",
    "nda": """You are an expert in confidentiality agreements and trade secret protection.

Generate a comprehensive Non-Disclosure Agreement (NDA) suitable for an employment context.

The NDA should cover:
- Definition of confidential information
- Obligations of the employee
- Permitted disclosures
- Duration of confidentiality
- Return of materials
- Remedies for breach
- Jurisdiction

Use clear, unambiguous language while maintaining legal enforceability.
Use ## for main headings, ### for subheadings.""",
    "equity": """You are an expert in equity compensation and stock option agreements.

Generate a detailed Stock Option Grant Agreement.

Include:
- Grant details (number of shares, exercise price)
- Vesting schedule (4-year with 1-year cliff is standard)
- Exercise periods and windows
- Tax implications (country-specific)
- Termination provisions
- Acceleration clauses if applicable
- Governing law

Be precise with vesting calculations and dates.
Use ## for main headings, ### for subheadings.""",
}


def get_country(country: str) -> CountryLegalData:
    try:
        return COUNTRY_LEGAL_DATA[country]
    except KeyError:
        raise ValueError(f"Unsupported country: {country}") from None


def calculate_local_salary(salary_usd: float, country: str) -> int:
    """Convert a USD salary with the fixed per-country rate, rounded to whole units."""
    data = COUNTRY_LEGAL_DATA.get(country)
    rate = data.exchange_rate if data else 1.0
    return round(salary_usd * rate)


def get_currency(country: str) -> str:
    data = COUNTRY_LEGAL_DATA.get(country)
    return data.currency if data else "USD"


def get_notice_period(role: str, country: str) -> float:
    """Notice period in months for the seniority implied by the role title."""
    if "Executive" in role or "Director" in role or "Senior" in role:
        level = "senior"
    elif "Junior" in role:
        level = "junior"
    else:
        level = "mid"
    return get_country(country).notice_period[level]


def format_currency(amount: float, currency: str) -> str:
    symbol = CURRENCY_SYMBOLS.get(currency)
    if symbol:
        return f"{symbol}{amount:,.0f}"
    return f"{currency} {amount:,.0f}"


def contract_types_for(equity_shares: int | None) -> list[str]:
    """Employment and NDA always; equity only for a positive grant."""
    types = ["employment", "nda"]
    if equity_shares and equity_shares > 0:
        types.append("equity")
    return types


def _format_number(value: float) -> str:
    return f"{value:g}"


def build_contract_prompt(candidate: Candidate, contract_type: str) -> list[dict[str, str]]:
    """
    Build the chat messages for drafting one contract.

    Args:
        candidate: Validated new-hire data
        contract_type: employment, nda or equity

    Returns:
        System and user messages for the completion call

    Raises:
        ValueError: If the contract type or country is unsupported
    """
    if contract_type not in SYSTEM_PROMPTS:
        raise ValueError(f"Unsupported contract type: {contract_type}")

    country = get_country(candidate.country)
    local_salary = calculate_local_salary(candidate.salary_usd, candidate.country)
    notice_period = get_notice_period(candidate.role, candidate.country)
    requirements = "\n".join(f"- {r}" for r in country.requirements)

    user_prompt = f"""Generate a {contract_type} contract with the following details:

EMPLOYEE INFORMATION:
- Full Name: {candidate.full_name}
- Role: {candidate.role}
- Department: {candidate.department}
- Start Date: {candidate.start_date}

LOCATION & JURISDICTION:
- Country: {country.name}
- Governing Law: {country.name}

COMPENSATION:
- Base Salary: {format_currency(local_salary, country.currency)} per annum
- Equity: {candidate.equity_shares:,} stock options
- Currency: {country.currency}

EMPLOYMENT TERMS:
- Annual Leave: {country.annual_leave} days
- Probation Period: {country.probation_months} months
- Notice Period: {_format_number(notice_period)} month(s)
- Working Hours: {_format_number(country.work_week)} hours per week
- Overtime Rate: {_format_number(country.overtime_rate)}x

LEGAL REQUIREMENTS FOR {country.name}:
{requirements}

Generate a complete, legally sound {contract_type} contract following all applicable laws and regulations for {country.name}."""

    return [
        {"role": "system", "content": SYSTEM_PROMPTS[contract_type]},
        {"role": "user", "content": user_prompt},
    ]


def render_contract_docx(
    content: str,
    candidate_name: str,
    country: str,
    contract_type: str,
    company_name: str = "HRFlow AI",
) -> bytes:
    """
    Render markdown-ish contract text into a DOCX document.

    `## ` lines become level-1 headings, `### ` lines level-2 headings and
    `- ` lines indented bullets. A letterhead precedes the body and
    signature blocks follow it.

    Returns:
        DOCX file bytes
    """
    doc = Document()

    section = doc.sections[0]
    # US Letter with one-inch margins
    section.page_width = Twips(12240)
    section.page_height = Twips(15840)
    for side in ("top_margin", "right_margin", "bottom_margin", "left_margin"):
        setattr(section, side, Inches(1))

    letterhead = doc.add_heading(company_name, level=1)
    letterhead.alignment = WD_ALIGN_PARAGRAPH.CENTER

    office = doc.add_paragraph(f"{get_country(country).name} Office")
    office.alignment = WD_ALIGN_PARAGRAPH.CENTER
    office.paragraph_format.space_after = Pt(20)

    title = doc.add_heading(CONTRACT_TITLES.get(contract_type, contract_type.upper()), level=1)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    title.paragraph_format.space_before = Pt(20)
    title.paragraph_format.space_after = Pt(30)

    for line in content.split("\n"):
        text = line.strip()
        if text.startswith("### "):
            doc.add_heading(text[4:], level=2)
        elif text.startswith("## "):
            doc.add_heading(text[3:], level=1)
        elif text.startswith("- "):
            bullet = doc.add_paragraph(f"• {text[2:]}")
            bullet.paragraph_format.left_indent = Inches(0.5)
        else:
            doc.add_paragraph(text)

    doc.add_paragraph("").paragraph_format.space_before = Pt(30)
    doc.add_paragraph("________________________________")
    doc.add_paragraph(f"Employee Signature: {candidate_name}")
    doc.add_paragraph("Date: _____________").paragraph_format.space_after = Pt(20)
    doc.add_paragraph("________________________________")
    doc.add_paragraph(f"Employer Signature: {company_name}")
    doc.add_paragraph("Date: _____________")

    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def contract_filename(full_name: str, contract_type: str, suffix: str = "") -> str:
    """`Sarah_Chen_employment.docx`, or `Sarah_Chen_employment_contract.docx` with a suffix."""
    stem = "_".join(full_name.split())
    return f"{stem}_{contract_type}{suffix}.docx"
