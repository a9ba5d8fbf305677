from __future__ import annotations

import base64
import os
from datetime import date, datetime, time, timezone
from typing import Any

from .client import fetch_json, require_secret
from .errors import ExternalServiceError

STRIPE_API_BASE = "https://api.stripe.com/v1"
PAYPAL_API_BASE = "https://api-m.paypal.com"
KLARNA_API_BASE = "https://api-na.klarna.com"


def _base_url(env_name: str, default: str) -> str:
    return (os.getenv(env_name, "").strip() or default).rstrip("/")


def _basic_auth(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _end_of_day(day: date) -> datetime:
    return datetime.combine(day, time(23, 59, 59), tzinfo=timezone.utc)


def fetch_stripe_balance_transactions(*, since: date, limit: int = 100) -> Any:
    """`GET /v1/balance_transactions?type=payout` for payouts available on or after `since`."""
    secret_key = require_secret("STRIPE_SECRET_KEY", "stripe")
    return fetch_json(
        "stripe",
        f"{_base_url('STRIPE_API_BASE_URL', STRIPE_API_BASE)}/balance_transactions",
        headers={"Authorization": f"Bearer {secret_key}"},
        params={
            "type": "payout",
            "limit": min(limit, 100),
            "available_on[gte]": int(_start_of_day(since).timestamp()),
        },
    )


def fetch_paypal_access_token() -> str:
    client_id = require_secret("PAYPAL_CLIENT_ID", "paypal")
    client_secret = require_secret("PAYPAL_CLIENT_SECRET", "paypal")
    payload = fetch_json(
        "paypal",
        f"{_base_url('PAYPAL_API_BASE_URL', PAYPAL_API_BASE)}/v1/oauth2/token",
        headers={"Authorization": _basic_auth(client_id, client_secret)},
        method="POST",
        form={"grant_type": "client_credentials"},
    )
    token = payload.get("access_token") if isinstance(payload, dict) else None
    if not token:
        raise ExternalServiceError("paypal", message="PayPal auth response missing access_token")
    return token


def fetch_paypal_transactions(*, start: date, end: date) -> Any:
    """`GET /v1/reporting/transactions` for payout transactions between `start` and `end` (inclusive days)."""
    token = fetch_paypal_access_token()
    return fetch_json(
        "paypal",
        f"{_base_url('PAYPAL_API_BASE_URL', PAYPAL_API_BASE)}/v1/reporting/transactions",
        headers={"Authorization": f"Bearer {token}"},
        params={
            "start_date": _start_of_day(start).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "end_date": _end_of_day(end).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "transaction_type": "PAYOUT",
        },
    )


def fetch_klarna_settlements(*, start: date, end: date) -> Any:
    """`GET /settlements/v1/transactions` between `start` and `end` (inclusive days)."""
    username = require_secret("KLARNA_USERNAME", "klarna")
    password = require_secret("KLARNA_PASSWORD", "klarna")
    return fetch_json(
        "klarna",
        f"{_base_url('KLARNA_API_BASE_URL', KLARNA_API_BASE)}/settlements/v1/transactions",
        headers={"Authorization": _basic_auth(username, password)},
        params={"from": _start_of_day(start).isoformat(), "to": _end_of_day(end).isoformat()},
    )
