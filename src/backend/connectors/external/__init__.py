"""Payment and ad platform HTTP connectors (payload normalization lives in src/backend/adapters)."""

from .ads import fetch_google_ads_rows, fetch_meta_insights
from .client import fetch_json, require_secret
from .errors import ExternalServiceError
from .payments import (
    fetch_klarna_settlements,
    fetch_paypal_access_token,
    fetch_paypal_transactions,
    fetch_stripe_balance_transactions,
)

__all__ = [
    "ExternalServiceError",
    "fetch_google_ads_rows",
    "fetch_json",
    "fetch_klarna_settlements",
    "fetch_meta_insights",
    "fetch_paypal_access_token",
    "fetch_paypal_transactions",
    "fetch_stripe_balance_transactions",
    "require_secret",
]
