from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from .config import MerchantReconciliationConfig, ReconciliationRuleConfig, format_number
from .models import AdWindow, PaymentWindow

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class ReconciliationContext:
    window_start: Optional[date] = None
    window_end: Optional[date] = None
    payment_windows: tuple[PaymentWindow, ...] = ()
    ad_windows: tuple[AdWindow, ...] = ()
    merchant_config: MerchantReconciliationConfig = field(default_factory=MerchantReconciliationConfig)

    @property
    def thresholds(self) -> ReconciliationRuleConfig:
        return self.merchant_config.thresholds


def quantize_amount(value: Decimal, quantize: Optional[Decimal] = CENTS) -> Decimal:
    if quantize is None:
        return value
    return value.quantize(quantize, rounding=ROUND_HALF_UP)


def format_money(value: Decimal, currency: Optional[str] = None) -> str:
    text = f"{quantize_amount(value):,.2f}"
    if currency:
        return f"{currency} {text}"
    return text


def format_count(value: Decimal) -> str:
    return format_number(value)
