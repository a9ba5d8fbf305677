"""Source-agnostic profit engine: variable cost templates and reconciliation flags.

This package contains only domain logic:
- Inputs are normalized payout/ad-metric records, order contexts and merchant config.
- No connector, storage, or network calls live here.
"""

from .config import MerchantReconciliationConfig, ReconciliationRuleConfig, describe_reconciliation_rules
from .context import ReconciliationContext
from .costs import aggregate_cost_totals, calc_variable_costs, evaluate_templates
from .models import (
    AdMetricRecord,
    AdWindow,
    CostLine,
    CostTemplate,
    CostTotals,
    CostType,
    DiscrepancyFlag,
    OrderContext,
    PaymentWindow,
    PayoutRecord,
    ReconciliationRunReport,
    Severity,
    VariableCost,
)
from .runner import RulesRunner, summarize_flags

# Import built-in rules so they self-register with the global registry.
from . import rules as _builtin_rules  # noqa: F401
