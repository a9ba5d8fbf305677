from datetime import date
from decimal import Decimal

from common.profit_engine.models import PayoutRecord, Severity, SeverityOrdering


def test_payout_net_amount_derived_from_gross_and_fee():
    rec = PayoutRecord.model_validate(
        {"payout_id": "po_1", "payout_date": "2025-12-01", "gross_amount": "100", "fee_total": "3.2"}
    )
    assert rec.net_amount == Decimal("96.8")


def test_payout_unparsable_net_amount_is_derived():
    rec = PayoutRecord(payout_id="po_2", payout_date=date(2025, 12, 1), gross_amount=50, net_amount="n/a")
    assert rec.net_amount == Decimal("50")


def test_payout_supplied_net_amount_is_kept():
    rec = PayoutRecord(
        payout_id="po_3",
        payout_date=date(2025, 12, 1),
        gross_amount="100",
        fee_total="3.2",
        net_amount="90",
    )
    assert rec.net_amount == Decimal("90")


def test_payout_with_no_amounts_nets_to_zero():
    rec = PayoutRecord(payout_id="po_4", payout_date=date(2025, 12, 1))
    assert rec.gross_amount == Decimal("0")
    assert rec.net_amount == Decimal("0")


def test_severity_levels_and_ordering():
    assert [s.value for s in Severity] == ["INFO", "MEDIUM", "HIGH"]
    ordering = SeverityOrdering.default()
    assert ordering.worst([Severity.INFO, Severity.HIGH, Severity.MEDIUM]) == Severity.HIGH
    assert ordering.worst([]) == Severity.INFO
