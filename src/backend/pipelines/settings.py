from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from dotenv import load_dotenv

from common.profit_engine.coercion import parse_decimal
from common.profit_engine.config import ReconciliationRuleConfig

from .windows import AdGrouping


load_dotenv()

DATA_SOURCES = ("fixtures", "live")

_THRESHOLD_ENV = {
    "PROFIT_ENGINE_PAYMENT_AMOUNT_DELTA": ("payment", "amount_delta"),
    "PROFIT_ENGINE_PAYMENT_PERCENT_DELTA": ("payment", "percent_delta"),
    "PROFIT_ENGINE_ADS_CONVERSION_MULTIPLE": ("ads", "conversion_multiple"),
    "PROFIT_ENGINE_ADS_MIN_SPEND_WITHOUT_CONVERSIONS": ("ads", "min_spend_without_conversions"),
    "PROFIT_ENGINE_ADS_MIN_ORDERS_FOR_SPEND_CHECK": ("ads", "min_orders_for_spend_check"),
}


@dataclass(frozen=True)
class ProfitEngineSettings:
    fixtures_root: Path | None = None
    data_source: str = "fixtures"
    live_days: int = 7
    log_level: str = "INFO"
    ad_grouping: AdGrouping = AdGrouping.ACCOUNT
    threshold_overrides: dict[str, Any] = field(default_factory=dict)

    def rule_config(self) -> ReconciliationRuleConfig:
        return ReconciliationRuleConfig().with_overrides(self.threshold_overrides)


def get_settings(environ: Mapping[str, str] | None = None) -> ProfitEngineSettings:
    """
    Load process settings from environment variables (a local .env is loaded on import).

    Reads PROFIT_ENGINE_FIXTURES_ROOT, PROFIT_ENGINE_DATA_SOURCE, PROFIT_ENGINE_LIVE_DAYS,
    PROFIT_ENGINE_LOG_LEVEL, PROFIT_ENGINE_AD_GROUPING and the PROFIT_ENGINE_PAYMENT_* /
    PROFIT_ENGINE_ADS_* threshold overrides. Invalid values raise ValueError naming the variable.
    """
    env = os.environ if environ is None else environ
    fixtures_root = env.get("PROFIT_ENGINE_FIXTURES_ROOT", "").strip()
    return ProfitEngineSettings(
        fixtures_root=Path(fixtures_root) if fixtures_root else None,
        data_source=_data_source(env),
        live_days=_live_days(env),
        log_level=env.get("PROFIT_ENGINE_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        ad_grouping=_ad_grouping(env),
        threshold_overrides=_threshold_overrides(env),
    )


def _data_source(env: Mapping[str, str]) -> str:
    raw = env.get("PROFIT_ENGINE_DATA_SOURCE", "").strip().lower() or "fixtures"
    if raw not in DATA_SOURCES:
        raise ValueError(
            f"Invalid value for PROFIT_ENGINE_DATA_SOURCE: {raw!r} (expected one of {', '.join(DATA_SOURCES)})."
        )
    return raw


def _live_days(env: Mapping[str, str]) -> int:
    raw = env.get("PROFIT_ENGINE_LIVE_DAYS", "").strip()
    if not raw:
        return 7
    if not raw.isdigit() or int(raw) < 1:
        raise ValueError(f"Invalid value for PROFIT_ENGINE_LIVE_DAYS: {raw!r} (expected a positive integer).")
    return int(raw)


def _ad_grouping(env: Mapping[str, str]) -> AdGrouping:
    raw = env.get("PROFIT_ENGINE_AD_GROUPING", "").strip().upper() or AdGrouping.ACCOUNT.value
    try:
        return AdGrouping(raw)
    except ValueError:
        choices = ", ".join(g.value for g in AdGrouping)
        raise ValueError(f"Invalid value for PROFIT_ENGINE_AD_GROUPING: {raw!r} (expected one of {choices}).") from None


def _threshold_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name, (section, key) in _THRESHOLD_ENV.items():
        raw = env.get(name, "").strip()
        if not raw:
            continue
        value = parse_decimal(raw)
        if value is None or value < 0:
            raise ValueError(f"Invalid value for {name}: {raw!r} (expected a non-negative number).")
        overrides.setdefault(section, {})[key] = int(value) if key == "min_orders_for_spend_check" else value
    return overrides
