"""Reconciliation rule catalog: what each registered rule checks and how a merchant has it configured.

Run as `python -m common.profit_engine.catalog [--merchant-config path.json] [--format json]`.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field

from .config import MerchantReconciliationConfig, ReconciliationRuleConfig, describe_reconciliation_rules
from .registry import registry

# Built-in rules register on import.
from . import rules as _builtin_rules  # noqa: F401


class RuleCatalogEntry(BaseModel):
    rule_id: str
    rule_title: str
    description: str = ""
    sources: List[str] = Field(default_factory=list)
    class_name: str

    config_model: str
    config_schema: Dict[str, Any]
    # Per-rule toggles after merging the merchant's `rules` entry over the model defaults.
    effective_config: Dict[str, Any] = Field(default_factory=dict)


class RuleCatalog(BaseModel):
    thresholds: Dict[str, Any]
    threshold_summary: Dict[str, str]
    rules: List[RuleCatalogEntry] = Field(default_factory=list)


def build_catalog(merchant_config: Optional[MerchantReconciliationConfig] = None) -> RuleCatalog:
    merchant_config = merchant_config or MerchantReconciliationConfig()
    entries: List[RuleCatalogEntry] = []
    for rule_id in sorted(registry.ids()):
        rule_cls = registry.get(rule_id)
        cfg_model = rule_cls.config_model
        entries.append(
            RuleCatalogEntry(
                rule_id=rule_id,
                rule_title=rule_cls.rule_title,
                description=rule_cls.description,
                sources=list(rule_cls.sources),
                class_name=rule_cls.__name__,
                config_model=cfg_model.__name__,
                config_schema=cfg_model.model_json_schema(),
                effective_config=merchant_config.get_rule_config(rule_id, cfg_model).model_dump(mode="json"),
            )
        )

    return RuleCatalog(
        thresholds=merchant_config.thresholds.model_dump(mode="json"),
        threshold_summary=describe_reconciliation_rules(merchant_config.thresholds),
        rules=entries,
    )


def load_merchant_config(path: Path) -> MerchantReconciliationConfig:
    """Read a `{"thresholds": {...}, "rules": {...}}` file as used by merchant fixtures."""
    raw = json.loads(path.read_text())
    return MerchantReconciliationConfig(
        thresholds=ReconciliationRuleConfig().with_overrides(raw.get("thresholds")),
        rules=raw.get("rules") or {},
    )


def dump_catalog(catalog: RuleCatalog, fmt: str = "yaml") -> str:
    data = catalog.model_dump(mode="json")
    if fmt == "json":
        return json.dumps(data, indent=2, sort_keys=True)
    return yaml.safe_dump(data, sort_keys=True)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Print the reconciliation rule catalog.")
    parser.add_argument(
        "--merchant-config",
        default=None,
        help="Optional merchant_config.json; shows that merchant's thresholds and rule toggles.",
    )
    parser.add_argument("--format", choices=("yaml", "json"), default="yaml")
    args = parser.parse_args(argv)

    merchant_config = load_merchant_config(Path(args.merchant_config)) if args.merchant_config else None
    print(dump_catalog(build_catalog(merchant_config), args.format))


if __name__ == "__main__":
    main()
