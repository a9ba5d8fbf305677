from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from adapters.ads import ad_metric_records_from_google_ads_rows, ad_metric_records_from_meta_insights
from adapters.cost_templates import cost_templates_from_storage
from adapters.payments import (
    payout_records_from_klarna_settlements,
    payout_records_from_paypal_transactions,
    payout_records_from_stripe_balance_transactions,
)
from common.profit_engine.config import MerchantReconciliationConfig, ReconciliationRuleConfig
from common.profit_engine.models import AdMetricRecord, CostTemplate, OrderRecord, PayoutRecord
from common.profit_engine.registry import registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MerchantInputs:
    merchant_id: str
    orders: tuple[OrderRecord, ...] = ()
    payouts: tuple[PayoutRecord, ...] = ()
    ad_metrics: tuple[AdMetricRecord, ...] = ()
    cost_templates: tuple[CostTemplate, ...] = ()
    merchant_config: MerchantReconciliationConfig = field(default_factory=MerchantReconciliationConfig)


class DataSource(Protocol):
    def build_merchant_inputs(self, *, merchant_id: str) -> MerchantInputs:
        """Return normalized inputs for one merchant's evaluation window."""
        ...


class FixturesDataSource:
    """Reads `<root>/<merchant_id>/{orders,payouts,ad_metrics,cost_templates,merchant_config}.json`."""

    def __init__(self, *, fixtures_root: Path, base_thresholds: ReconciliationRuleConfig | None = None) -> None:
        self._fixtures_root = fixtures_root
        self._base_thresholds = base_thresholds

    def build_merchant_inputs(self, *, merchant_id: str) -> MerchantInputs:
        return load_fixture_inputs(
            self._fixtures_root / merchant_id,
            merchant_id=merchant_id,
            base_thresholds=self._base_thresholds,
        )


def _load_optional_json(path: Path) -> Any:
    if not path.exists():
        return None
    with path.open() as handle:
        return json.load(handle)


def payouts_from_fixture(payload: Any) -> list[PayoutRecord]:
    """Accepts normalized `records` plus raw `stripe` / `paypal` / `klarna` provider payloads."""
    if payload is None:
        return []
    if isinstance(payload, list):
        return [PayoutRecord.model_validate(item) for item in payload]
    records = [PayoutRecord.model_validate(item) for item in payload.get("records") or []]
    if payload.get("stripe") is not None:
        records.extend(payout_records_from_stripe_balance_transactions(payload["stripe"]))
    if payload.get("paypal") is not None:
        records.extend(payout_records_from_paypal_transactions(payload["paypal"]))
    if payload.get("klarna") is not None:
        records.extend(payout_records_from_klarna_settlements(payload["klarna"]))
    return records


def ad_metrics_from_fixture(payload: Any) -> list[AdMetricRecord]:
    """Accepts normalized `records` plus raw `meta` / `google` payloads (`{"account_id", "payload"}`)."""
    if payload is None:
        return []
    if isinstance(payload, list):
        return [AdMetricRecord.model_validate(item) for item in payload]
    records = [AdMetricRecord.model_validate(item) for item in payload.get("records") or []]
    meta = payload.get("meta")
    if meta:
        records.extend(ad_metric_records_from_meta_insights(meta.get("payload"), account_id=meta.get("account_id")))
    google = payload.get("google")
    if google:
        records.extend(
            ad_metric_records_from_google_ads_rows(google.get("payload"), account_id=google.get("account_id"))
        )
    return records


def load_store_files(
    merchant_dir: Path,
    *,
    base_thresholds: ReconciliationRuleConfig | None = None,
) -> tuple[list[OrderRecord], list[CostTemplate], MerchantReconciliationConfig]:
    """Orders, cost templates and merchant config kept locally for a merchant (shared by every source).

    Per-rule toggles are validated here so a bad `merchant_config.json` fails at load, not mid-run.
    """
    orders = [OrderRecord.model_validate(o) for o in _load_optional_json(merchant_dir / "orders.json") or []]
    templates = cost_templates_from_storage(_load_optional_json(merchant_dir / "cost_templates.json") or [])
    raw_config = _load_optional_json(merchant_dir / "merchant_config.json") or {}
    merchant_config = MerchantReconciliationConfig(
        thresholds=(base_thresholds or ReconciliationRuleConfig()).with_overrides(raw_config.get("thresholds")),
        rules=raw_config.get("rules") or {},
    )
    registry.validate_rule_configs(merchant_config)
    return orders, templates, merchant_config


def load_fixture_inputs(
    fixtures_dir: Path,
    *,
    merchant_id: str | None = None,
    base_thresholds: ReconciliationRuleConfig | None = None,
) -> MerchantInputs:
    """Load one merchant's fixtures; merchant threshold overrides merge over `base_thresholds`."""
    if not fixtures_dir.is_dir():
        raise FileNotFoundError(f"Fixtures directory not found: {fixtures_dir}")

    orders, templates, merchant_config = load_store_files(fixtures_dir, base_thresholds=base_thresholds)
    payouts = payouts_from_fixture(_load_optional_json(fixtures_dir / "payouts.json"))
    ad_metrics = ad_metrics_from_fixture(_load_optional_json(fixtures_dir / "ad_metrics.json"))

    logger.info(
        "Loaded fixtures from %s: orders=%d payouts=%d ad_metrics=%d templates=%d",
        fixtures_dir,
        len(orders),
        len(payouts),
        len(ad_metrics),
        len(templates),
    )
    return MerchantInputs(
        merchant_id=merchant_id or fixtures_dir.name,
        orders=tuple(orders),
        payouts=tuple(payouts),
        ad_metrics=tuple(ad_metrics),
        cost_templates=tuple(templates),
        merchant_config=merchant_config,
    )
