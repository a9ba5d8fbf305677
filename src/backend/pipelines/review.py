from __future__ import annotations

from typing import Iterable, List, Sequence

from pydantic import BaseModel, Field

from common.profit_engine.costs import calc_variable_costs
from common.profit_engine.models import (
    CostTemplate,
    CostTotals,
    CostType,
    FlagSummary,
    OrderRecord,
    ReconciliationRunReport,
    VariableCostBreakdown,
)
from common.profit_engine.runner import RulesRunner, summarize_flags

from .data_source import MerchantInputs
from .windows import AdGrouping, build_reconciliation_context


class OrderCostResult(BaseModel):
    order_id: str
    breakdown: VariableCostBreakdown


class MerchantReview(BaseModel):
    merchant_id: str
    order_costs: List[OrderCostResult] = Field(default_factory=list)
    cost_totals: CostTotals = Field(default_factory=CostTotals)
    report: ReconciliationRunReport
    flag_summary: List[FlagSummary] = Field(default_factory=list)


def evaluate_order_costs(
    orders: Iterable[OrderRecord],
    templates: Sequence[CostTemplate],
) -> List[OrderCostResult]:
    return [
        OrderCostResult(order_id=order.order_id, breakdown=calc_variable_costs(templates, order))
        for order in orders
    ]


def sum_cost_totals(results: Iterable[OrderCostResult]) -> CostTotals:
    totals = CostTotals()
    for result in results:
        for cost_type in CostType:
            totals.totals[cost_type] = totals.get(cost_type) + result.breakdown.totals.get(cost_type)
    return totals


def run_merchant_review(
    inputs: MerchantInputs,
    *,
    grouping: AdGrouping = AdGrouping.ACCOUNT,
    runner: RulesRunner | None = None,
) -> MerchantReview:
    order_costs = evaluate_order_costs(inputs.orders, inputs.cost_templates)
    ctx = build_reconciliation_context(
        orders=inputs.orders,
        payouts=inputs.payouts,
        ad_metrics=inputs.ad_metrics,
        merchant_config=inputs.merchant_config,
        grouping=grouping,
    )
    report = (runner or RulesRunner()).run(ctx)
    return MerchantReview(
        merchant_id=inputs.merchant_id,
        order_costs=order_costs,
        cost_totals=sum_cost_totals(order_costs),
        report=report,
        flag_summary=summarize_flags(report.flags),
    )
