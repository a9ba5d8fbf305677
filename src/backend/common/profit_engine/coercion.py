from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

ZERO = Decimal("0")


def parse_decimal(value: Any) -> Optional[Decimal]:
    """Parse a connector/storage value into a finite Decimal, or None when it cannot be parsed."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, (int, float)):
        # Avoid float binary artifacts: go through str.
        parsed = Decimal(str(value))
    elif isinstance(value, str):
        s = value.strip().replace(",", "")
        if not s:
            return None
        try:
            parsed = Decimal(s)
        except InvalidOperation:
            return None
    else:
        return None
    if not parsed.is_finite():
        return None
    return parsed


def decimal_or_zero(value: Any) -> Decimal:
    parsed = parse_decimal(value)
    return ZERO if parsed is None else parsed


def int_or_zero(value: Any) -> int:
    parsed = parse_decimal(value)
    if parsed is None:
        return 0
    return int(parsed)


def optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def money_or_none(value: Any) -> Optional[Decimal]:
    # Absent stays absent so fallbacks can apply; present-but-garbage becomes 0.
    if value is None:
        return None
    return decimal_or_zero(value)
