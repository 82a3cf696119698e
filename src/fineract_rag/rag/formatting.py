"""
Canonical Text Rendering

Turns raw Fineract entities into the labeled text blocks that are embedded
and shown as retrieval sources.

Every label is always emitted. Missing optional fields render as ``N/A`` so
that partially populated records produce structurally identical text and
therefore stable embeddings.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, NamedTuple, Optional, Tuple

from ..fineract import CLIENTS, LOAN_PRODUCTS, LOANS

NA = "N/A"

Entity = Dict[str, Any]


def _get(entity: Any, path: str) -> Any:
    """Follow a dotted path through nested dicts; None if any hop is missing."""
    value = entity
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _text(value: Any, default: str = NA) -> str:
    if value is None:
        return default
    if isinstance(value, str) and not value.strip():
        return default
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, list) and not value:
        return default
    if isinstance(value, list) and all(isinstance(v, int) for v in value):
        # Fineract dates arrive as [yyyy, mm, dd]
        return "-".join(f"{v:02d}" if i else str(v) for i, v in enumerate(value))
    return str(value)


def _money(entity: Entity, path: str) -> str:
    amount = _get(entity, path)
    if amount is None:
        return NA
    symbol = _get(entity, "currency.displaySymbol") or ""
    return f"{symbol}{amount}"


def _range(entity: Entity, prefix: str, suffix: str = "") -> str:
    low = _get(entity, f"{prefix}.min")
    high = _get(entity, f"{prefix}.max")
    default = _get(entity, f"{prefix}.default")
    if low is None and high is None and default is None:
        return NA
    return (
        f"{_text(low)}{suffix} - {_text(high)}{suffix} "
        f"(Default: {_text(default)}{suffix})"
    )


def _render(heading: str, fields: Iterable[Tuple[str, str]]) -> str:
    lines = [f"{heading}:"]
    lines.extend(f"{label}: {value}" for label, value in fields)
    return "\n".join(lines)


# ---------------------------------------------------------------------
# Per-category renderers
# ---------------------------------------------------------------------

def format_client(client: Entity) -> str:
    return _render("Client Information", [
        ("Name", _text(client.get("displayName"))),
        ("Account Number", _text(client.get("accountNo"))),
        ("External ID", _text(client.get("externalId"))),
        ("Status", _text(_get(client, "status.value"), "Unknown")),
        ("Active", _text(bool(client.get("active")))),
        ("Office", _text(client.get("officeName"))),
        ("Mobile", _text(client.get("mobileNo"))),
        ("Email", _text(client.get("emailAddress"))),
        ("Date of Birth", _text(client.get("dateOfBirth"))),
        ("Gender", _text(_get(client, "gender.name"))),
        ("Client Type", _text(_get(client, "clientType.name"))),
        ("Classification", _text(_get(client, "clientClassification.name"))),
        ("Submitted Date", _text(_get(client, "timeline.submittedOnDate"))),
        ("Activated Date", _text(_get(client, "timeline.activatedOnDate"))),
    ])


def format_loan_product(product: Entity) -> str:
    repayment_every = product.get("repaymentEvery")
    frequency = _get(product, "repaymentFrequencyType.value") or "periods"
    return _render("Loan Product Information", [
        ("Name", _text(product.get("name"))),
        ("Short Name", _text(product.get("shortName"))),
        ("Description", _text(product.get("description"))),
        ("Status", _text(product.get("status"))),
        ("Currency", _text(_get(product, "currency.displayLabel"))),
        ("Principal Range", _range(product, "principal")),
        ("Interest Rate Range", _range(product, "annualInterestRate", "%")),
        ("Repayment Terms", _range(product, "numberOfRepayments")),
        (
            "Repayment Frequency",
            f"Every {repayment_every} {frequency}" if repayment_every is not None else NA,
        ),
        ("Interest Type", _text(_get(product, "interestType.value"))),
        ("Amortization Type", _text(_get(product, "amortizationType.value"))),
    ])


def format_loan(loan: Entity) -> str:
    rate = loan.get("annualInterestRate")
    term = loan.get("termFrequency")
    repayments = loan.get("numberOfRepayments")
    return _render("Loan Information", [
        ("Account Number", _text(loan.get("accountNo"))),
        ("Client", _text(loan.get("clientName"))),
        ("Product", _text(loan.get("loanProductName"))),
        ("Status", _text(_get(loan, "status.value"), "Unknown")),
        ("Principal", _money(loan, "principal")),
        ("Approved Principal", _money(loan, "approvedPrincipal")),
        ("Interest Rate", f"{rate}% per annum" if rate is not None else NA),
        (
            "Term",
            f"{term} {_get(loan, 'termPeriodFrequencyType.value') or 'periods'}"
            if term is not None else NA,
        ),
        (
            "Repayments",
            f"{repayments} payments every {_text(loan.get('repaymentEvery'))} "
            f"{_get(loan, 'repaymentFrequencyType.value') or 'periods'}"
            if repayments is not None else NA,
        ),
        ("Outstanding Balance", _money(loan, "summary.principalOutstanding")),
        ("Total Outstanding", _money(loan, "summary.totalOutstanding")),
        ("Overdue Amount", _money(loan, "summary.totalOverdue")),
        ("Submitted Date", _text(_get(loan, "timeline.submittedOnDate"))),
        ("Approved Date", _text(_get(loan, "timeline.approvedOnDate"))),
        ("Disbursed Date", _text(_get(loan, "timeline.actualDisbursementDate"))),
        ("Expected Maturity", _text(_get(loan, "timeline.expectedMaturityDate"))),
        ("Loan Officer", _text(loan.get("loanOfficerName"))),
    ])


# ---------------------------------------------------------------------
# Titles
# ---------------------------------------------------------------------

def client_title(client: Entity) -> str:
    name = client.get("displayName")
    if not name:
        parts = [client.get("firstname"), client.get("lastname")]
        name = " ".join(p for p in parts if p) or "Unknown"
    return f"Client: {name}"


def loan_product_title(product: Entity) -> str:
    return f"Loan Product: {_text(product.get('name'), 'Unnamed')}"


def loan_title(loan: Entity) -> str:
    return (
        f"Loan: {_text(loan.get('accountNo'), 'Unknown')} - "
        f"{_text(loan.get('clientName'), 'Unknown Client')}"
    )


# ---------------------------------------------------------------------
# Category registry
# ---------------------------------------------------------------------

class CategoryFormat(NamedTuple):
    document_type: str
    render: Callable[[Entity], str]
    title: Callable[[Entity], str]


CATEGORY_FORMATS: Dict[str, CategoryFormat] = {
    CLIENTS: CategoryFormat(CLIENTS, format_client, client_title),
    LOAN_PRODUCTS: CategoryFormat(LOAN_PRODUCTS, format_loan_product, loan_product_title),
    LOANS: CategoryFormat(LOANS, format_loan, loan_title),
}

INDEXED_CATEGORIES: List[str] = [CLIENTS, LOAN_PRODUCTS, LOANS]


def entity_id(entity: Any) -> Optional[str]:
    """
    Return the entity's identifier as a string, or None if it has no usable one.
    """
    if not isinstance(entity, dict):
        return None
    raw = entity.get("id")
    if raw is None or isinstance(raw, bool):
        return None
    value = str(raw).strip()
    return value or None
