from __future__ import annotations

from datetime import date
from typing import Any

from common.profit_engine.coercion import decimal_or_zero, parse_decimal
from common.profit_engine.models import PayoutRecord

from ._common import parse_iso_date, require_list


def payout_records_from_paypal_transactions(
    payload: Any,
    *,
    fallback_date: date | None = None,
) -> list[PayoutRecord]:
    """
    Convert a PayPal reporting `transaction_details` response into PayoutRecords.

    `net_amount` is taken from the payload when present, otherwise derived as gross - fee.
    """
    records: list[PayoutRecord] = []
    for index, detail in enumerate(require_list(payload, "transaction_details")):
        if not isinstance(detail, dict):
            continue
        txn = detail.get("transaction_info") or {}
        if not isinstance(txn, dict):
            continue
        gross = decimal_or_zero((txn.get("gross_amount") or {}).get("value"))
        fee = decimal_or_zero((txn.get("fee_amount") or {}).get("value"))
        net = parse_decimal((txn.get("net_amount") or {}).get("value"))
        payout_date = parse_iso_date(txn.get("transaction_initiation_date")) or fallback_date or date.today()
        payout_id = txn.get("transaction_id") or txn.get("transaction_event_code") or f"paypal-{payout_date.isoformat()}-{index}"
        records.append(
            PayoutRecord(
                payout_id=str(payout_id),
                status=str(txn.get("transaction_status") or "COMPLETED"),
                payout_date=payout_date,
                currency=str(txn.get("transaction_currency") or "USD").upper(),
                gross_amount=gross,
                fee_total=fee,
                net_amount=net if net is not None else gross - fee,
                raw_source={"source": "paypal", **detail},
            )
        )
    return records
