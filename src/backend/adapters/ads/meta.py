from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from common.profit_engine.coercion import decimal_or_zero
from common.profit_engine.models import AdMetricRecord

PROVIDER = "meta-ads"
PURCHASE_ACTION_TYPES = ("purchase", "offsite_conversion.purchase")


class AdMetricAdapterError(ValueError):
    pass


def normalize_meta_account_id(account_id: str | None) -> str | None:
    if not account_id:
        return None
    account_id = str(account_id).strip()
    return account_id if account_id.startswith("act_") else f"act_{account_id}"


def parse_metric_date(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def purchase_conversions(actions: Any) -> Decimal:
    if not isinstance(actions, list):
        return Decimal("0")
    total = Decimal("0")
    for action in actions:
        if isinstance(action, dict) and action.get("action_type") in PURCHASE_ACTION_TYPES:
            total += decimal_or_zero(action.get("value"))
    return total


def ad_metric_records_from_meta_insights(
    payload: Any,
    *,
    account_id: str,
    default_currency: str = "USD",
) -> list[AdMetricRecord]:
    """
    Convert a Meta Graph `/{account}/insights?level=ad&time_increment=1` response into AdMetricRecords.

    Conversions are the sum of purchase actions; rows without `date_start` are skipped.
    """
    normalized_account = normalize_meta_account_id(account_id)
    if not normalized_account:
        raise AdMetricAdapterError("Meta Ads credential is missing an account id.")
    if not isinstance(payload, dict):
        raise AdMetricAdapterError("Meta insights payload must be a JSON object.")

    rows = payload.get("data")
    records: list[AdMetricRecord] = []
    for row in rows if isinstance(rows, list) else []:
        if not isinstance(row, dict):
            continue
        row_date = parse_metric_date(row.get("date_start"))
        if row_date is None:
            continue
        records.append(
            AdMetricRecord(
                provider=PROVIDER,
                account_id=normalized_account,
                campaign_id=row.get("campaign_id"),
                campaign_name=row.get("campaign_name"),
                ad_set_id=row.get("adset_id"),
                ad_set_name=row.get("adset_name"),
                ad_id=row.get("ad_id"),
                ad_name=row.get("ad_name"),
                date=row_date,
                currency=row.get("account_currency") or default_currency,
                spend=row.get("spend"),
                impressions=row.get("impressions"),
                clicks=row.get("clicks"),
                conversions=purchase_conversions(row.get("actions")),
            )
        )
    return records
