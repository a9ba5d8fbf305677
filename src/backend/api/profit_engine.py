from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, ValidationError

from adapters.cost_templates import cost_templates_from_storage
from common.profit_engine.catalog import RuleCatalog, build_catalog
from common.profit_engine.config import MerchantReconciliationConfig, ReconciliationRuleConfig
from common.profit_engine.context import ReconciliationContext
from common.profit_engine.costs import calc_variable_costs
from common.profit_engine.models import (
    AdWindow,
    FlagSummary,
    OrderContext,
    PaymentWindow,
    ReconciliationRunReport,
    VariableCostBreakdown,
)
from common.profit_engine.registry import UnknownRuleError, registry
from common.profit_engine.runner import RulesRunner, summarize_flags


router = APIRouter(prefix="/profit-engine", tags=["profit-engine"])


class CostEvaluationRequest(BaseModel):
    # Stored template rows; ones that cannot be understood are dropped rather than failing the request.
    templates: List[Any] = Field(default_factory=list)
    context: OrderContext


class ReconciliationRunRequest(BaseModel):
    payment_windows: List[PaymentWindow] = Field(default_factory=list)
    ad_windows: List[AdWindow] = Field(default_factory=list)
    thresholds: Optional[Dict[str, Any]] = None
    rules: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    rule_ids: Optional[List[str]] = None


class ReconciliationRunResponse(BaseModel):
    report: ReconciliationRunReport
    summary: List[FlagSummary] = Field(default_factory=list)


def _merchant_config(thresholds: Optional[Dict[str, Any]], rules: Dict[str, Dict[str, Any]]) -> MerchantReconciliationConfig:
    try:
        merged = ReconciliationRuleConfig().with_overrides(thresholds)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=f"Invalid threshold overrides: {exc.errors()}") from exc
    merchant_config = MerchantReconciliationConfig(thresholds=merged, rules=rules)
    try:
        registry.validate_rule_configs(merchant_config)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=f"Invalid rule config: {exc.errors()}") from exc
    return merchant_config


@router.post("/costs/evaluate", response_model=VariableCostBreakdown)
def evaluate_costs(body: CostEvaluationRequest) -> VariableCostBreakdown:
    return calc_variable_costs(cost_templates_from_storage(body.templates), body.context)


@router.post("/reconciliation/run", response_model=ReconciliationRunResponse)
def run_reconciliation(body: ReconciliationRunRequest) -> ReconciliationRunResponse:
    ctx = ReconciliationContext(
        payment_windows=tuple(body.payment_windows),
        ad_windows=tuple(body.ad_windows),
        merchant_config=_merchant_config(body.thresholds, body.rules),
    )
    rule_ids = set(body.rule_ids) if body.rule_ids is not None else None
    try:
        report = RulesRunner().run(ctx, rule_ids=rule_ids)
    except UnknownRuleError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return ReconciliationRunResponse(report=report, summary=summarize_flags(report.flags))


@router.get("/reconciliation/rules", response_model=RuleCatalog)
def reconciliation_rules() -> RuleCatalog:
    return build_catalog()
