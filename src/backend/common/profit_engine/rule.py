from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import ClassVar, List, Type

from .config import RuleConfigBase
from .context import ReconciliationContext
from .models import DiscrepancyFlag

logger = logging.getLogger(__name__)


class Rule(ABC):
    """A reconciliation check over the windows of one context.

    Subclasses implement `check`; `evaluate` resolves the merchant's per-rule toggles first and
    returns nothing when the rule is disabled.
    """

    rule_id: ClassVar[str]
    rule_title: ClassVar[str] = ""
    description: ClassVar[str] = ""
    sources: ClassVar[List[str]] = []
    config_model: ClassVar[Type[RuleConfigBase]] = RuleConfigBase

    def __init__(self):
        if not getattr(self, "rule_id", None):
            raise ValueError(f"{type(self).__name__} must define rule_id")

    def rule_config(self, ctx: ReconciliationContext) -> RuleConfigBase:
        return ctx.merchant_config.get_rule_config(self.rule_id, self.config_model)

    def evaluate(self, ctx: ReconciliationContext) -> List[DiscrepancyFlag]:
        cfg = self.rule_config(ctx)
        if not cfg.enabled:
            logger.debug("Rule %s disabled for this merchant; skipped.", self.rule_id)
            return []
        return self.check(ctx, cfg)

    @abstractmethod
    def check(self, ctx: ReconciliationContext, cfg: RuleConfigBase) -> List[DiscrepancyFlag]:  # pragma: no cover
        raise NotImplementedError
