from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from ..config import PaymentThresholds, RuleConfigBase, format_number
from ..context import ReconciliationContext, format_money
from ..models import DiscrepancyFlag, PaymentWindow, Severity
from ..predicates import (
    exceeds_amount_delta,
    exceeds_percent_delta,
    payment_variance_triggered,
    percent_of_expected,
)
from ..registry import register_rule
from ..rule import Rule

PAYMENT_PAYOUT_VARIANCE_ID = "PAYMENT-PAYOUT-VARIANCE"


def payment_variance_severity(percent: Decimal, thresholds: PaymentThresholds, *, amount_exceeded: bool) -> Severity:
    percent_exceeded = exceeds_percent_delta(percent, thresholds)
    if amount_exceeded and percent_exceeded:
        return Severity.HIGH
    if amount_exceeded:
        return Severity.MEDIUM
    if percent <= thresholds.percent_delta * thresholds.informational_percent_multiple:
        return Severity.INFO
    return Severity.MEDIUM


def evaluate_payment_variance(
    observed_payout_total: Decimal,
    expected_revenue_total: Decimal,
    thresholds: PaymentThresholds,
    *,
    window_key: str = "",
    channel: str = "payments",
    currency: Optional[str] = None,
) -> Optional[DiscrepancyFlag]:
    """Compare payouts received against order revenue for one window; None when within tolerance."""
    delta = abs(observed_payout_total - expected_revenue_total)
    percent = percent_of_expected(delta, expected_revenue_total)
    if not payment_variance_triggered(delta, percent, thresholds):
        return None

    amount_exceeded = exceeds_amount_delta(delta, thresholds)
    severity = payment_variance_severity(percent, thresholds, amount_exceeded=amount_exceeded)
    percent_label = format_number(thresholds.percent_delta * 100)
    message = (
        f"Orders total {format_money(expected_revenue_total)} vs payout {format_money(observed_payout_total)} "
        f"(>{percent_label}% or {format_money(thresholds.amount_delta, currency)})"
    )
    return DiscrepancyFlag(
        rule_id=PAYMENT_PAYOUT_VARIANCE_ID,
        severity=severity,
        message=message,
        observed=observed_payout_total,
        expected=expected_revenue_total,
        delta=delta,
        window_key=window_key,
        channel=channel,
        currency=currency,
        values={
            "percent_of_expected": str(percent),
            "amount_delta_exceeded": amount_exceeded,
            "percent_delta_exceeded": exceeds_percent_delta(percent, thresholds),
            "amount_delta": str(thresholds.amount_delta),
            "percent_delta": str(thresholds.percent_delta),
        },
    )


class PaymentVarianceRuleConfig(RuleConfigBase):
    # Skip windows where neither payouts nor orders were recorded.
    skip_empty_windows: bool = True


@register_rule
class PAYMENT_PAYOUT_VARIANCE(Rule):
    rule_id = PAYMENT_PAYOUT_VARIANCE_ID
    rule_title = "Payouts reconcile to order revenue"
    description = (
        "Net payouts from the payment processor should match order revenue for the same window "
        "within the configured absolute or percentage tolerance."
    )
    sources = ["Payment processor payouts", "Store orders"]
    config_model = PaymentVarianceRuleConfig

    def check(self, ctx: ReconciliationContext, cfg: PaymentVarianceRuleConfig) -> List[DiscrepancyFlag]:
        thresholds = ctx.thresholds.payment
        flags: List[DiscrepancyFlag] = []
        for window in ctx.payment_windows:
            if cfg.skip_empty_windows and _is_empty(window):
                continue
            flag = evaluate_payment_variance(
                window.observed_payout_total,
                window.expected_revenue_total,
                thresholds,
                window_key=window.window_key,
                channel=window.channel,
                currency=window.currency,
            )
            if flag is not None:
                flag.values["payout_ids"] = list(window.payout_ids)
                flags.append(flag)
        return flags


def _is_empty(window: PaymentWindow) -> bool:
    return window.observed_payout_total == 0 and window.expected_revenue_total == 0
