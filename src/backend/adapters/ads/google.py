from __future__ import annotations

from decimal import Decimal
from typing import Any

from common.profit_engine.coercion import decimal_or_zero
from common.profit_engine.models import AdMetricRecord

from .meta import AdMetricAdapterError, parse_metric_date

PROVIDER = "google-ads"
_MICROS = Decimal("1000000")


def ad_metric_records_from_google_ads_rows(
    payload: Any,
    *,
    account_id: str,
    default_currency: str = "USD",
) -> list[AdMetricRecord]:
    """
    Convert a Google Ads `googleAds:search` response (`results[]`) into AdMetricRecords.

    Spend is `metrics.costMicros / 1e6`; ad groups map onto ad sets.
    """
    if not isinstance(payload, dict):
        raise AdMetricAdapterError("Google Ads payload must be a JSON object.")

    records: list[AdMetricRecord] = []
    rows = payload.get("results")
    for row in rows if isinstance(rows, list) else []:
        if not isinstance(row, dict):
            continue
        segments = row.get("segments") or {}
        row_date = parse_metric_date(segments.get("date"))
        if row_date is None:
            continue
        metrics = row.get("metrics") or {}
        campaign = row.get("campaign") or {}
        ad_group = row.get("adGroup") or {}
        ad = (row.get("adGroupAd") or {}).get("ad") or {}
        customer = row.get("customer") or {}
        records.append(
            AdMetricRecord(
                provider=PROVIDER,
                account_id=str(account_id),
                campaign_id=campaign.get("id"),
                campaign_name=campaign.get("name"),
                ad_set_id=ad_group.get("id"),
                ad_set_name=ad_group.get("name"),
                ad_id=ad.get("id"),
                ad_name=ad.get("name"),
                date=row_date,
                currency=customer.get("currencyCode") or default_currency,
                spend=decimal_or_zero(metrics.get("costMicros")) / _MICROS,
                impressions=metrics.get("impressions"),
                clicks=metrics.get("clicks"),
                conversions=metrics.get("conversions"),
            )
        )
    return records
