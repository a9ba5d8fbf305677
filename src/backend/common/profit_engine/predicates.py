"""Threshold predicates for the reconciliation rules.

Kept separate from the rules so each trigger condition can be tested on its own.
"""

from __future__ import annotations

from decimal import Decimal

from .coercion import ZERO
from .config import AdsThresholds, PaymentThresholds

ONE = Decimal("1")


def percent_of_expected(delta: Decimal, expected: Decimal) -> Decimal:
    if expected > 0:
        return delta / expected
    return ONE if delta > 0 else ZERO


def exceeds_amount_delta(delta: Decimal, thresholds: PaymentThresholds) -> bool:
    return delta > thresholds.amount_delta


def exceeds_percent_delta(percent: Decimal, thresholds: PaymentThresholds) -> bool:
    return percent > thresholds.percent_delta


def payment_variance_triggered(delta: Decimal, percent: Decimal, thresholds: PaymentThresholds) -> bool:
    # Either threshold alone is sufficient.
    return exceeds_amount_delta(delta, thresholds) or exceeds_percent_delta(percent, thresholds)


def meets_min_orders(order_count: int, thresholds: AdsThresholds) -> bool:
    return order_count >= thresholds.min_orders_for_spend_check


def conversions_inflated(conversions: Decimal, order_count: int, thresholds: AdsThresholds) -> bool:
    if not meets_min_orders(order_count, thresholds):
        return False
    return conversions > order_count * thresholds.conversion_multiple


def spend_without_conversions(spend: Decimal, conversions: Decimal, thresholds: AdsThresholds) -> bool:
    return spend >= thresholds.min_spend_without_conversions and conversions == 0
