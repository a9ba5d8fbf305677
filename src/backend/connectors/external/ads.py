from __future__ import annotations

import json
from datetime import date
from typing import Any

from adapters.ads import normalize_meta_account_id

from .client import fetch_json, require_secret
from .errors import ExternalServiceError

META_GRAPH_BASE = "https://graph.facebook.com/v20.0"
GOOGLE_ADS_BASE = "https://googleads.googleapis.com/v16"

META_INSIGHT_FIELDS = (
    "date_start",
    "campaign_id",
    "campaign_name",
    "adset_id",
    "adset_name",
    "ad_id",
    "ad_name",
    "spend",
    "impressions",
    "clicks",
    "actions",
    "account_currency",
)

GOOGLE_ADS_QUERY = """
SELECT
  customer.currency_code,
  segments.date,
  campaign.id,
  campaign.name,
  ad_group.id,
  ad_group.name,
  ad_group_ad.ad.id,
  ad_group_ad.ad.name,
  metrics.cost_micros,
  metrics.impressions,
  metrics.clicks,
  metrics.conversions
FROM ad_group_ad
WHERE segments.date BETWEEN '{since}' AND '{until}'
"""


def fetch_meta_insights(*, account_id: str, since: date, until: date) -> Any:
    """Daily ad-level insights for one Meta ad account (`META_ADS_ACCESS_TOKEN`)."""
    account = normalize_meta_account_id(account_id)
    if not account:
        raise ExternalServiceError("meta-ads", message="Meta Ads account id is missing")
    access_token = require_secret("META_ADS_ACCESS_TOKEN", "meta-ads")
    return fetch_json(
        "meta-ads",
        f"{META_GRAPH_BASE}/{account}/insights",
        headers={"Authorization": f"Bearer {access_token}"},
        params={
            "level": "ad",
            "time_increment": 1,
            "time_range": json.dumps({"since": since.isoformat(), "until": until.isoformat()}),
            "fields": ",".join(META_INSIGHT_FIELDS),
        },
    )


def fetch_google_ads_rows(
    *,
    customer_id: str,
    since: date,
    until: date,
    login_customer_id: str | None = None,
) -> Any:
    """`googleAds:search` over ad_group_ad metrics (`GOOGLE_ADS_ACCESS_TOKEN`, `GOOGLE_ADS_DEVELOPER_TOKEN`)."""
    if not customer_id:
        raise ExternalServiceError("google-ads", message="Google Ads customer id is missing")
    headers = {
        "Authorization": f"Bearer {require_secret('GOOGLE_ADS_ACCESS_TOKEN', 'google-ads')}",
        "developer-token": require_secret("GOOGLE_ADS_DEVELOPER_TOKEN", "google-ads"),
    }
    if login_customer_id:
        headers["login-customer-id"] = str(login_customer_id)
    customer = str(customer_id).replace("-", "")
    return fetch_json(
        "google-ads",
        f"{GOOGLE_ADS_BASE}/customers/{customer}/googleAds:search",
        headers=headers,
        method="POST",
        json_body={"query": GOOGLE_ADS_QUERY.format(since=since.isoformat(), until=until.isoformat())},
    )
