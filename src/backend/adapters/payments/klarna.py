from __future__ import annotations

from datetime import date
from typing import Any

from common.profit_engine.coercion import decimal_or_zero, parse_decimal
from common.profit_engine.models import PayoutRecord

from ._common import PayoutAdapterError, parse_iso_date


def _settlement_rows(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        raise PayoutAdapterError("Klarna payload must be a JSON object or list.")
    for key in ("transactions", "data"):
        rows = payload.get(key)
        if isinstance(rows, list):
            return rows
    return []


def _first_present(row: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return None


def payout_records_from_klarna_settlements(
    payload: Any,
    *,
    fallback_date: date | None = None,
) -> list[PayoutRecord]:
    """
    Convert a Klarna `/settlements/v1/transactions` response into PayoutRecords.

    Rows come from `transactions` (or `data`); amounts are major units. `net_amount` wins when
    present, otherwise gross - fee. The date is `payout_date`, falling back to `created_at`.
    """
    records: list[PayoutRecord] = []
    for index, row in enumerate(_settlement_rows(payload)):
        if not isinstance(row, dict):
            continue
        payout_id = _first_present(row, "id", "transaction_id")
        if payout_id is None:
            settlement_id = row.get("settlement_id")
            payout_id = f"klarna-{settlement_id if settlement_id is not None else index}"
        gross = decimal_or_zero(_first_present(row, "amount", "gross_amount"))
        fee = decimal_or_zero(_first_present(row, "fee_amount", "fees"))
        net = parse_decimal(row.get("net_amount"))
        payout_date = (
            parse_iso_date(row.get("payout_date"))
            or parse_iso_date(row.get("created_at"))
            or fallback_date
            or date.today()
        )
        records.append(
            PayoutRecord(
                payout_id=str(payout_id),
                status=str(row.get("status") or "PAID"),
                payout_date=payout_date,
                currency=str(row.get("currency") or "USD").upper(),
                gross_amount=gross,
                fee_total=fee,
                net_amount=net if net is not None else gross - fee,
                raw_source={"source": "klarna", **row},
            )
        )
    return records
