from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from common.profit_engine.coercion import decimal_or_zero
from common.profit_engine.models import PayoutRecord

from ._common import parse_epoch_date, require_list

# Stripe amounts are integer minor units.
_MINOR_UNITS = Decimal("100")


def payout_records_from_stripe_balance_transactions(
    payload: Any,
    *,
    fallback_date: date | None = None,
) -> list[PayoutRecord]:
    """
    Convert a Stripe `/v1/balance_transactions?type=payout` response into PayoutRecords.

    - Amounts are cents; fees come from `fee`.
    - `available_on` (epoch seconds) is the payout date, falling back to `created`.
    - Entries without an id are skipped.
    """
    records: list[PayoutRecord] = []
    for entry in require_list(payload, "data"):
        if not isinstance(entry, dict) or not entry.get("id"):
            continue
        payout_date = (
            parse_epoch_date(entry.get("available_on"))
            or parse_epoch_date(entry.get("created"))
            or fallback_date
            or date.today()
        )
        gross = decimal_or_zero(entry.get("amount")) / _MINOR_UNITS
        fee = decimal_or_zero(entry.get("fee")) / _MINOR_UNITS
        records.append(
            PayoutRecord(
                payout_id=str(entry["id"]),
                status=str(entry.get("status") or "paid"),
                payout_date=payout_date,
                currency=str(entry.get("currency") or "usd").upper(),
                gross_amount=gross,
                fee_total=fee,
                net_amount=gross - fee,
                raw_source={"source": "stripe", **entry},
            )
        )
    return records
