from __future__ import annotations

import re
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T", bound=BaseModel)

DEFAULT_PAYMENT_DIFF_THRESHOLD = Decimal("50")
DEFAULT_PAYMENT_PERCENT_THRESHOLD = Decimal("0.05")
DEFAULT_AD_CONVERSION_MULTIPLE = Decimal("1.5")
DEFAULT_AD_SPEND_HIGH = Decimal("200")
DEFAULT_MIN_ORDERS_FOR_AD_CHECK = 5


class PaymentThresholds(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    # Absolute currency units.
    amount_delta: Decimal = DEFAULT_PAYMENT_DIFF_THRESHOLD
    # Fraction of expected revenue (0.05 = 5%).
    percent_delta: Decimal = DEFAULT_PAYMENT_PERCENT_THRESHOLD
    # A percent-only breach up to percent_delta * this multiple is reported as INFO.
    informational_percent_multiple: Decimal = Decimal("2")


class AdsThresholds(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    conversion_multiple: Decimal = DEFAULT_AD_CONVERSION_MULTIPLE
    min_spend_without_conversions: Decimal = DEFAULT_AD_SPEND_HIGH
    min_orders_for_spend_check: int = DEFAULT_MIN_ORDERS_FOR_AD_CHECK


class ReconciliationRuleConfig(BaseModel):
    """Thresholds shared by every reconciliation rule in one evaluation run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    payment: PaymentThresholds = Field(default_factory=PaymentThresholds)
    ads: AdsThresholds = Field(default_factory=AdsThresholds)

    def with_overrides(self, overrides: Optional[Mapping[str, Any]]) -> "ReconciliationRuleConfig":
        """Return a new config with merchant overrides merged over this one.

        Keys may be snake_case or camelCase (``amountDelta``); unknown keys are rejected by validation.
        """
        if not overrides:
            return self
        merged = _deep_merge(self.model_dump(), _snake_keys(overrides))
        return ReconciliationRuleConfig.model_validate(merged)


class RuleConfigBase(BaseModel):
    enabled: bool = True


class MerchantReconciliationConfig(BaseModel):
    """Merchant-specific thresholds and per-rule toggles.

    Rules pull their typed toggle config via `get_rule_config`.
    """

    thresholds: ReconciliationRuleConfig = Field(default_factory=ReconciliationRuleConfig)
    rules: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    def get_rule_config(
        self,
        rule_id: str,
        model: Type[T],
        default: Optional[T] = None,
    ) -> T:
        if rule_id not in self.rules:
            if default is not None:
                return default
            return model()  # type: ignore[call-arg]
        raw = self.rules.get(rule_id, {})
        return model.model_validate(raw)


def describe_reconciliation_rules(config: Optional[ReconciliationRuleConfig] = None) -> Dict[str, str]:
    cfg = config or ReconciliationRuleConfig()
    payment_percent = format_number(cfg.payment.percent_delta * 100)
    payment_amount = format_number(cfg.payment.amount_delta)
    ads_multiple = format_number(cfg.ads.conversion_multiple)
    ads_spend = format_number(cfg.ads.min_spend_without_conversions)
    return {
        "payment": (
            f"Payout variance flagged above {payment_percent}% or {payment_amount} base currency."
        ),
        "ads": (
            f"Ads flagged when conversions exceed store orders by {ads_multiple}x "
            f"or spend above {ads_spend} with zero conversions."
        ),
    }


def format_number(value: Decimal) -> str:
    return format(value.normalize(), "f")


_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _snake_keys(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {_CAMEL_RE.sub("_", str(k)).lower(): _snake_keys(v) for k, v in value.items()}
    return value


def _deep_merge(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(out.get(key), dict):
            out[key] = _deep_merge(out[key], value)
        else:
            out[key] = value
    return out
