from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any


class PayoutAdapterError(ValueError):
    pass


def parse_epoch_date(value: Any) -> date | None:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        return datetime.fromtimestamp(float(value), tz=timezone.utc).date()
    except (ValueError, OverflowError, OSError):
        # NaN, inf and out-of-range epochs.
        return None


def parse_iso_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def require_list(payload: Any, key: str) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        raise PayoutAdapterError("Payout payload must be a JSON object or list.")
    items = payload.get(key)
    return items if isinstance(items, list) else []
