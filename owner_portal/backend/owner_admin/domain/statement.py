# backend/owner_admin/domain/statement.py
from __future__ import annotations

import math
import re
from dataclasses import dataclass, asdict
from typing import Any, Iterable, Optional

PORTAL_COMMISSION_RATE = 0.15
CLEANING_FEE_PER_INVOICE = 75.0
MANAGEMENT_COMMISSION_RATE = 0.25

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class Invoice:
    id: Any
    name: str
    value: Any  # decimal as string, as delivered by the invoice source
    date: Optional[str] = None
    series: Optional[str] = None


@dataclass(frozen=True)
class StatementBreakdown:
    gross_amount: float
    portal_commission: float
    cleaning_fee: float
    management_commission: float
    final_owner_amount: float

    def as_dict(self) -> dict[str, float]:
        d = asdict(self)
        return {
            "grossAmount": d["gross_amount"],
            "portalCommission": d["portal_commission"],
            "cleaningFee": d["cleaning_fee"],
            "managementCommission": d["management_commission"],
            "finalOwnerAmount": d["final_owner_amount"],
        }


def parse_amount(value: Any) -> float:
    """
    Leading-number parse of an invoice value ("12.50", "12.50 EUR", 12.5).
    Anything that does not start with a number counts as 0.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        v = float(value)
        return v if math.isfinite(v) else 0.0
    if value is None:
        return 0.0
    m = _LEADING_NUMBER.match(str(value))
    if not m:
        return 0.0
    v = float(m.group(0))
    return v if math.isfinite(v) else 0.0


def round_cents(x: float) -> float:
    """Half-up on the cent value: floor(x*100 + 0.5) / 100."""
    return math.floor(x * 100 + 0.5) / 100


def _value_of(inv: Any) -> Any:
    if isinstance(inv, dict):
        return inv.get("value")
    return getattr(inv, "value", None)


def compute_breakdown(
    *,
    is_admin_owned: bool,
    invoices: Iterable[Any],
    portal_rate: float = PORTAL_COMMISSION_RATE,
    cleaning_fee_per_invoice: float = CLEANING_FEE_PER_INVOICE,
    management_rate: float = MANAGEMENT_COMMISSION_RATE,
) -> StatementBreakdown:
    """
    gross -> portal commission -> fixed cleaning fee -> management commission -> owner payout.

    The cleaning fee is a flat amount per invoice; cleaning line items inside
    the invoices are not consulted. Admin-owned properties pay no management
    commission. Each output is rounded on its own from the unrounded figures.
    """
    rows = list(invoices)

    gross = 0.0
    for inv in rows:
        gross += parse_amount(_value_of(inv))

    portal = gross * portal_rate
    cleaning = len(rows) * cleaning_fee_per_invoice
    management = 0.0 if is_admin_owned else (gross - cleaning - portal) * management_rate
    final = gross - portal - cleaning - management

    return StatementBreakdown(
        gross_amount=round_cents(gross),
        portal_commission=round_cents(portal),
        cleaning_fee=round_cents(cleaning),
        management_commission=round_cents(management),
        final_owner_amount=round_cents(final),
    )


def _invoice_out(inv: Any) -> dict[str, Any]:
    get = inv.get if isinstance(inv, dict) else (lambda k: getattr(inv, k, None))
    return {
        "id": get("id"),
        "name": get("name"),
        "value": parse_amount(get("value")),
        "date": get("date"),
        "series": get("series"),
    }


def build_owner_statement(
    *,
    property_external_id: int,
    property_name: str,
    is_admin_owned: bool,
    owner_name: Optional[str],
    start_date: str,
    end_date: str,
    invoices: Iterable[Any],
    **rates: float,
) -> dict[str, Any]:
    rows = list(invoices)
    breakdown = compute_breakdown(is_admin_owned=is_admin_owned, invoices=rows, **rates)

    if is_admin_owned:
        holder = "Admin"
    else:
        holder = owner_name or "Unassigned"

    return {
        "property": {
            "id": int(property_external_id),
            "name": property_name,
            "owner": holder,
            "isAdminOwned": bool(is_admin_owned),
        },
        "period": {"startDate": start_date, "endDate": end_date},
        "calculations": breakdown.as_dict(),
        "invoiceCount": len(rows),
        "invoices": [_invoice_out(inv) for inv in rows],
    }
