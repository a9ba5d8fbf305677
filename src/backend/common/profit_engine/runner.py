from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from .context import ReconciliationContext
from .models import DiscrepancyFlag, FlagSummary, ReconciliationRunReport, Severity, SeverityOrdering
from .registry import UnknownRuleError, registry

logger = logging.getLogger(__name__)


class RulesRunner:
    def __init__(self, rules: Optional[Iterable] = None):
        self._rules = list(rules) if rules is not None else registry.create_all()

    def run(self, ctx: ReconciliationContext, *, rule_ids: Optional[set[str]] = None) -> ReconciliationRunReport:
        if rule_ids is not None:
            unknown = set(rule_ids) - {rule.rule_id for rule in self._rules}
            if unknown:
                raise UnknownRuleError(unknown)

        flags: List[DiscrepancyFlag] = []
        evaluated: List[str] = []
        for rule in self._rules:
            if rule_ids is not None and rule.rule_id not in rule_ids:
                continue
            evaluated.append(rule.rule_id)
            flags.extend(rule.evaluate(ctx))

        totals: Dict[Severity, int] = {}
        for flag in flags:
            totals[flag.severity] = totals.get(flag.severity, 0) + 1

        report = ReconciliationRunReport(
            run_id=str(uuid.uuid4()),
            generated_at=datetime.now(timezone.utc),
            window_start=ctx.window_start,
            window_end=ctx.window_end,
            rules_evaluated=evaluated,
            flags=flags,
            totals=totals,
        )
        logger.info(
            "reconciliation_run run_id=%s rules=%d payment_windows=%d ad_windows=%d flags=%d",
            report.run_id,
            len(evaluated),
            len(ctx.payment_windows),
            len(ctx.ad_windows),
            len(flags),
        )
        return report


def summarize_flags(flags: Iterable[DiscrepancyFlag]) -> List[FlagSummary]:
    """Group flags per rule with a count, summed delta and worst severity."""
    ordering = SeverityOrdering.default()
    grouped: Dict[str, List[DiscrepancyFlag]] = {}
    for flag in flags:
        grouped.setdefault(flag.rule_id, []).append(flag)

    summaries: List[FlagSummary] = []
    for rule_id, rule_flags in grouped.items():
        summaries.append(
            FlagSummary(
                rule_id=rule_id,
                flags=len(rule_flags),
                delta_total=sum((f.delta for f in rule_flags), Decimal("0")),
                worst_severity=ordering.worst([f.severity for f in rule_flags]),
            )
        )
    return summaries
