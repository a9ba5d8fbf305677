from datetime import date
from decimal import Decimal

import pytest

from adapters.payments import (
    PayoutAdapterError,
    payout_records_from_klarna_settlements,
    payout_records_from_paypal_transactions,
    payout_records_from_stripe_balance_transactions,
)


def test_stripe_balance_transactions_to_payouts():
    payload = {
        "object": "list",
        "data": [
            {
                "id": "txn_1",
                "amount": 10000,
                "fee": 320,
                "currency": "usd",
                "available_on": 1764550800,
                "status": "available",
            },
            {"amount": 500},
        ],
    }
    records = payout_records_from_stripe_balance_transactions(payload)

    assert len(records) == 1
    rec = records[0]
    assert rec.payout_id == "txn_1"
    assert rec.payout_date == date(2025, 12, 1)
    assert rec.currency == "USD"
    assert rec.gross_amount == Decimal("100")
    assert rec.fee_total == Decimal("3.2")
    assert rec.net_amount == Decimal("96.8")
    assert rec.raw_source["source"] == "stripe"


def test_stripe_missing_numbers_default_to_zero():
    records = payout_records_from_stripe_balance_transactions(
        {"data": [{"id": "txn_2", "amount": "oops", "created": 1764550800}]}
    )
    assert records[0].gross_amount == Decimal("0")
    assert records[0].net_amount == Decimal("0")
    assert records[0].status == "paid"


def test_paypal_transactions_to_payouts():
    payload = {
        "transaction_details": [
            {
                "transaction_info": {
                    "transaction_id": "PP-1",
                    "transaction_initiation_date": "2025-12-02T10:00:00+0000",
                    "transaction_currency": "usd",
                    "gross_amount": {"value": "50.00"},
                    "fee_amount": {"value": "1.75"},
                }
            },
            {
                "transaction_info": {
                    "transaction_id": "PP-2",
                    "transaction_initiation_date": "2025-12-02T11:00:00+0000",
                    "gross_amount": {"value": "45.00"},
                    "fee_amount": {"value": "2.00"},
                    "net_amount": {"value": "40.00"},
                }
            },
        ]
    }
    first, second = payout_records_from_paypal_transactions(payload)

    assert first.payout_id == "PP-1"
    assert first.payout_date == date(2025, 12, 2)
    assert first.currency == "USD"
    assert first.net_amount == Decimal("48.25")
    assert first.status == "COMPLETED"
    assert second.net_amount == Decimal("40.00")


def test_paypal_rejects_non_object_payload():
    with pytest.raises(PayoutAdapterError):
        payout_records_from_paypal_transactions("not json")


@pytest.mark.parametrize("bad_epoch", ["nan", "inf", float("inf"), 10**20])
def test_stripe_unusable_available_on_falls_back_to_created(bad_epoch):
    payload = {"data": [{"id": "txn_3", "amount": 100, "available_on": bad_epoch, "created": 1764550800}]}
    (rec,) = payout_records_from_stripe_balance_transactions(payload)
    assert rec.payout_date == date(2025, 12, 1)


def test_stripe_unusable_dates_use_fallback_date():
    payload = {"data": [{"id": "txn_4", "available_on": "nan", "created": "-inf"}]}
    (rec,) = payout_records_from_stripe_balance_transactions(payload, fallback_date=date(2025, 1, 31))
    assert rec.payout_date == date(2025, 1, 31)


def test_klarna_settlements_to_payouts():
    payload = {
        "transactions": [
            {
                "id": "K-1",
                "amount": "120.00",
                "fee_amount": "4.20",
                "currency": "eur",
                "payout_date": "2025-12-03T00:00:00Z",
                "created_at": "2025-12-01T09:00:00Z",
            },
            {
                "transaction_id": "K-2",
                "gross_amount": 80,
                "fees": 2,
                "net_amount": "77.50",
                "created_at": "2025-12-02T09:00:00Z",
                "status": "SETTLED",
            },
            {"settlement_id": "S-9", "amount": 10},
        ]
    }
    first, second, third = payout_records_from_klarna_settlements(payload, fallback_date=date(2025, 12, 4))

    assert first.payout_id == "K-1"
    assert first.payout_date == date(2025, 12, 3)
    assert first.currency == "EUR"
    assert first.net_amount == Decimal("115.80")
    assert first.status == "PAID"
    assert first.raw_source["source"] == "klarna"

    assert second.payout_id == "K-2"
    assert second.payout_date == date(2025, 12, 2)
    assert second.gross_amount == Decimal("80")
    assert second.fee_total == Decimal("2")
    assert second.net_amount == Decimal("77.50")
    assert second.status == "SETTLED"

    assert third.payout_id == "klarna-S-9"
    assert third.payout_date == date(2025, 12, 4)
    assert third.net_amount == Decimal("10")


def test_klarna_reads_data_rows_and_indexes_missing_ids():
    (rec,) = payout_records_from_klarna_settlements({"data": [{"amount": "5"}]}, fallback_date=date(2025, 12, 1))
    assert rec.payout_id == "klarna-0"


def test_klarna_rejects_non_object_payload():
    with pytest.raises(PayoutAdapterError):
        payout_records_from_klarna_settlements("oops")
