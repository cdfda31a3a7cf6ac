# backend/tests/test_statement_math.py
from __future__ import annotations

from owner_admin.domain.statement import (
    Invoice,
    build_owner_statement,
    compute_breakdown,
    parse_amount,
    round_cents,
)


def _inv(*values):
    return [Invoice(id=i + 1, name=f"INV {i + 1}", value=v) for i, v in enumerate(values)]


def test_owner_owned_breakdown():
    b = compute_breakdown(is_admin_owned=False, invoices=_inv("100", "200", "50"))
    assert b.gross_amount == 350.0
    assert b.portal_commission == 52.5
    assert b.cleaning_fee == 225.0
    assert b.management_commission == 18.13
    # each field is rounded from the unrounded figures: 54.375 -> 54.38
    assert b.final_owner_amount == 54.38


def test_admin_owned_pays_no_management_commission():
    b = compute_breakdown(is_admin_owned=True, invoices=_inv("100", "200", "50"))
    assert b.management_commission == 0.0
    assert b.final_owner_amount == 72.5


def test_no_invoices_is_all_zero():
    b = compute_breakdown(is_admin_owned=False, invoices=[])
    assert b.as_dict() == {
        "grossAmount": 0.0,
        "portalCommission": 0.0,
        "cleaningFee": 0.0,
        "managementCommission": 0.0,
        "finalOwnerAmount": 0.0,
    }


def test_cleaning_fee_is_flat_per_invoice_even_for_small_invoices():
    b = compute_breakdown(is_admin_owned=True, invoices=_inv("10"))
    assert b.cleaning_fee == 75.0
    assert b.final_owner_amount == round_cents(10 - 1.5 - 75)
    assert b.final_owner_amount < 0


def test_unparseable_values_count_as_zero():
    assert parse_amount("abc") == 0.0
    assert parse_amount(None) == 0.0
    assert parse_amount("") == 0.0
    assert parse_amount("12.50 EUR") == 12.5
    assert parse_amount(" 7") == 7.0
    assert parse_amount(True) == 0.0

    b = compute_breakdown(is_admin_owned=True, invoices=_inv("abc", "12.50 EUR"))
    assert b.gross_amount == 12.5
    assert b.cleaning_fee == 150.0


def test_negative_invoice_values_are_summed_as_is():
    b = compute_breakdown(is_admin_owned=False, invoices=_inv("-100"))
    assert b.gross_amount == -100.0
    assert b.portal_commission == -15.0
    assert b.management_commission == -40.0
    assert b.final_owner_amount == -120.0


def test_round_cents_is_half_up():
    assert round_cents(18.125) == 18.13
    assert round_cents(2.0) == 2.0


def test_dict_invoices_are_accepted():
    b = compute_breakdown(is_admin_owned=True, invoices=[{"value": "40"}, {"value": 60}])
    assert b.gross_amount == 100.0


def test_statement_document_shape():
    st = build_owner_statement(
        property_external_id=1001,
        property_name="Alfama Loft",
        is_admin_owned=False,
        owner_name=None,
        start_date="2026-01-01",
        end_date="2026-01-31",
        invoices=_inv("100", "200", "50"),
    )
    assert st["property"] == {"id": 1001, "name": "Alfama Loft", "owner": "Unassigned", "isAdminOwned": False}
    assert st["period"] == {"startDate": "2026-01-01", "endDate": "2026-01-31"}
    assert st["invoiceCount"] == 3
    assert [i["value"] for i in st["invoices"]] == [100.0, 200.0, 50.0]
    assert st["calculations"]["finalOwnerAmount"] == 54.38

    admin = build_owner_statement(
        property_external_id=1002,
        property_name="Baixa Studio",
        is_admin_owned=True,
        owner_name="ignored",
        start_date="2026-01-01",
        end_date="2026-01-31",
        invoices=[],
    )
    assert admin["property"]["owner"] == "Admin"
