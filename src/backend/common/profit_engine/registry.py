from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Type

from .config import MerchantReconciliationConfig
from .rule import Rule


class UnknownRuleError(ValueError):
    def __init__(self, rule_ids: Iterable[str]):
        self.rule_ids = sorted(rule_ids)
        super().__init__(f"Unknown reconciliation rule id(s): {', '.join(self.rule_ids)}")


class RuleRegistry:
    """Rule classes keyed by rule id, in registration order."""

    def __init__(self):
        self._by_id: Dict[str, Type[Rule]] = {}

    def register(self, rule_cls: Type[Rule]) -> None:
        rule_id = getattr(rule_cls, "rule_id", None)
        if not rule_id:
            raise ValueError(f"{rule_cls.__name__} is missing rule_id")
        if rule_id in self._by_id:
            raise ValueError(f"Duplicate rule_id registered: {rule_id}")
        self._by_id[rule_id] = rule_cls

    def create_all(self, rule_ids: Optional[Iterable[str]] = None) -> List[Rule]:
        """Instantiate every registered rule, or only `rule_ids` (unknown ids raise UnknownRuleError)."""
        if rule_ids is None:
            return [rule_cls() for rule_cls in self._by_id.values()]
        wanted = set(rule_ids)
        unknown = wanted - self._by_id.keys()
        if unknown:
            raise UnknownRuleError(unknown)
        return [rule_cls() for rule_id, rule_cls in self._by_id.items() if rule_id in wanted]

    def get(self, rule_id: str) -> Type[Rule]:
        try:
            return self._by_id[rule_id]
        except KeyError:
            raise UnknownRuleError([rule_id]) from None

    def validate_rule_configs(self, merchant_config: MerchantReconciliationConfig) -> None:
        """Check each registered rule's merchant toggles against its config model.

        Raises pydantic ValidationError; entries for rules not registered here are left alone.
        """
        for rule_id, raw in merchant_config.rules.items():
            rule_cls = self._by_id.get(rule_id)
            if rule_cls is not None:
                rule_cls.config_model.model_validate(raw)

    def ids(self) -> List[str]:
        return list(self._by_id)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._by_id


registry = RuleRegistry()


def register_rule(rule_cls: Type[Rule]) -> Type[Rule]:
    registry.register(rule_cls)
    return rule_cls
