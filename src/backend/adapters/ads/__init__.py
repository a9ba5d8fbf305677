"""Ad platform payload adapters (no I/O)."""

from .google import ad_metric_records_from_google_ads_rows
from .meta import (
    AdMetricAdapterError,
    ad_metric_records_from_meta_insights,
    normalize_meta_account_id,
)

__all__ = [
    "AdMetricAdapterError",
    "ad_metric_records_from_google_ads_rows",
    "ad_metric_records_from_meta_insights",
    "normalize_meta_account_id",
]
