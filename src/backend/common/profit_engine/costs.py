from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from .coercion import ZERO
from .defaults import line_base_amount
from .models import (
    CostTemplate,
    CostTotals,
    CostType,
    OrderContext,
    VariableCost,
    VariableCostBreakdown,
)

logger = logging.getLogger(__name__)


def template_matches_context(template: CostTemplate, context: OrderContext) -> bool:
    cfg = template.config
    if cfg is None:
        return True
    if cfg.gateway:
        if not context.payment_gateway or cfg.gateway != context.payment_gateway:
            return False
    if cfg.channel:
        if cfg.channel != context.channel:
            return False
    return True


def template_amount(template: CostTemplate, context: OrderContext) -> Decimal:
    amount = ZERO
    for line in template.lines or []:
        amount += line_base_amount(line, template, context) * line.percentage_rate + line.flat_amount
    return amount


def evaluate_template(template: CostTemplate, context: OrderContext) -> Optional[VariableCost]:
    if not template.lines:
        return None
    if not template_matches_context(template, context):
        return None

    amount = template_amount(template, context)
    if amount <= 0:
        logger.debug("Cost template %r produced no positive amount; skipped.", template.name)
        return None

    return VariableCost(type=template.type, template_name=template.name, amount=amount)


def evaluate_templates(
    templates: Optional[Sequence[CostTemplate]],
    context: OrderContext,
) -> List[VariableCost]:
    """Evaluate each template against one order; order-preserving, never raises for inert templates."""
    costs: List[VariableCost] = []
    for template in templates or []:
        cost = evaluate_template(template, context)
        if cost is not None:
            costs.append(cost)
    return costs


def aggregate_cost_totals(costs: Iterable[VariableCost]) -> CostTotals:
    totals = CostTotals()
    for cost in costs:
        totals.totals[cost.type] = totals.get(cost.type) + cost.amount
    return totals


def calc_variable_costs(
    templates: Optional[Sequence[CostTemplate]],
    context: OrderContext,
) -> VariableCostBreakdown:
    variable_costs = evaluate_templates(templates, context)
    totals = aggregate_cost_totals(variable_costs)
    return VariableCostBreakdown(
        variable_costs=variable_costs,
        totals=totals,
        shipping_cost=totals.get(CostType.SHIPPING),
        payment_fees=totals.get(CostType.PAYMENT_FEE),
        platform_fees=totals.get(CostType.PLATFORM_FEE),
        custom_costs=totals.get(CostType.CUSTOM),
    )
