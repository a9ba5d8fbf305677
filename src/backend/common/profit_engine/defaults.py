"""Per-field defaulting used by the cost template evaluator.

Each fallback chain is its own function so the precedence can be tested in isolation.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from .coercion import ZERO
from .models import BaseAmount, CostLine, CostTemplate, OrderContext


def subtotal_base(context: OrderContext) -> Decimal:
    return context.subtotal if context.subtotal is not None else ZERO


def shipping_revenue_base(context: OrderContext) -> Decimal:
    return context.shipping_revenue if context.shipping_revenue is not None else ZERO


def order_total_base(context: OrderContext) -> Decimal:
    if context.order_total is not None:
        return context.order_total
    return subtotal_base(context)


def resolve_base_target(line_applies_to: Optional[str], template_applies_to: Optional[str]) -> BaseAmount:
    # First value present wins; an unrecognised value (e.g. legacy "TOTAL") means order total.
    target = line_applies_to if line_applies_to is not None else template_applies_to
    if target is None:
        return BaseAmount.ORDER_TOTAL
    try:
        return BaseAmount(target)
    except ValueError:
        return BaseAmount.ORDER_TOTAL


def base_amount(target: BaseAmount, context: OrderContext) -> Decimal:
    if target == BaseAmount.SUBTOTAL:
        return subtotal_base(context)
    if target == BaseAmount.SHIPPING_REVENUE:
        return shipping_revenue_base(context)
    return order_total_base(context)


def template_applies_to(template: CostTemplate) -> Optional[str]:
    if template.config is None:
        return None
    return template.config.applies_to


def line_base_amount(line: CostLine, template: CostTemplate, context: OrderContext) -> Decimal:
    target = resolve_base_target(line.applies_to, template_applies_to(template))
    return base_amount(target, context)
