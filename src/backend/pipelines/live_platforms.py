from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Callable

from adapters.ads import ad_metric_records_from_google_ads_rows, ad_metric_records_from_meta_insights
from adapters.payments import (
    payout_records_from_klarna_settlements,
    payout_records_from_paypal_transactions,
    payout_records_from_stripe_balance_transactions,
)
from common.profit_engine.config import ReconciliationRuleConfig
from connectors.external import (
    fetch_google_ads_rows,
    fetch_klarna_settlements,
    fetch_meta_insights,
    fetch_paypal_transactions,
    fetch_stripe_balance_transactions,
)

from .data_source import MerchantInputs, load_store_files

logger = logging.getLogger(__name__)

PAYMENT_PLATFORMS = ("stripe", "paypal", "klarna")


@dataclass(frozen=True)
class AdAccountConfig:
    account_id: str
    login_customer_id: str | None = None


@dataclass(frozen=True)
class PlatformsConfig:
    payments: tuple[str, ...] = ()
    meta_accounts: tuple[AdAccountConfig, ...] = ()
    google_accounts: tuple[AdAccountConfig, ...] = ()


def _ad_accounts(raw: Any) -> tuple[AdAccountConfig, ...]:
    accounts = []
    for item in raw or []:
        if isinstance(item, dict):
            if item.get("account_id"):
                accounts.append(
                    AdAccountConfig(
                        account_id=str(item["account_id"]),
                        login_customer_id=item.get("login_customer_id"),
                    )
                )
        elif item:
            accounts.append(AdAccountConfig(account_id=str(item)))
    return tuple(accounts)


def load_platforms_config(path: Path) -> PlatformsConfig:
    """
    Parse `platforms.json`:

        {"payments": ["stripe", "paypal"],
         "meta": ["act_123"],
         "google": [{"account_id": "123-456-7890", "login_customer_id": "999"}]}
    """
    if not path.exists():
        return PlatformsConfig()
    with path.open() as handle:
        raw = json.load(handle)
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a JSON object")
    payments = tuple(str(p).lower() for p in raw.get("payments") or [])
    unknown = sorted(set(payments) - set(PAYMENT_PLATFORMS))
    if unknown:
        raise ValueError(f"Unknown payment platform(s) in {path}: {', '.join(unknown)}")
    return PlatformsConfig(
        payments=payments,
        meta_accounts=_ad_accounts(raw.get("meta")),
        google_accounts=_ad_accounts(raw.get("google")),
    )


class LivePlatformsDataSource:
    """Orders, templates and config from `<root>/<merchant_id>/`; payouts and ad metrics fetched live.

    The window covers the `days` calendar days ending on `today` (inclusive).
    """

    def __init__(
        self,
        *,
        merchants_root: Path,
        days: int = 7,
        base_thresholds: ReconciliationRuleConfig | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        if days < 1:
            raise ValueError("days must be at least 1")
        self._merchants_root = merchants_root
        self._days = days
        self._base_thresholds = base_thresholds
        self._today = today

    def window(self) -> tuple[date, date]:
        end = self._today()
        return end - timedelta(days=self._days - 1), end

    def build_merchant_inputs(self, *, merchant_id: str) -> MerchantInputs:
        merchant_dir = self._merchants_root / merchant_id
        if not merchant_dir.is_dir():
            raise FileNotFoundError(f"Merchant directory not found: {merchant_dir}")

        orders, templates, merchant_config = load_store_files(merchant_dir, base_thresholds=self._base_thresholds)
        platforms = load_platforms_config(merchant_dir / "platforms.json")
        start, end = self.window()

        payouts = []
        if "stripe" in platforms.payments:
            payload = fetch_stripe_balance_transactions(since=start)
            payouts.extend(payout_records_from_stripe_balance_transactions(payload, fallback_date=end))
        if "paypal" in platforms.payments:
            payload = fetch_paypal_transactions(start=start, end=end)
            payouts.extend(payout_records_from_paypal_transactions(payload, fallback_date=end))
        if "klarna" in platforms.payments:
            payload = fetch_klarna_settlements(start=start, end=end)
            payouts.extend(payout_records_from_klarna_settlements(payload, fallback_date=end))

        ad_metrics = []
        for account in platforms.meta_accounts:
            payload = fetch_meta_insights(account_id=account.account_id, since=start, until=end)
            ad_metrics.extend(ad_metric_records_from_meta_insights(payload, account_id=account.account_id))
        for account in platforms.google_accounts:
            payload = fetch_google_ads_rows(
                customer_id=account.account_id,
                since=start,
                until=end,
                login_customer_id=account.login_customer_id,
            )
            ad_metrics.extend(ad_metric_records_from_google_ads_rows(payload, account_id=account.account_id))

        logger.info(
            "Fetched live inputs for %s (%s to %s): payouts=%d ad_metrics=%d",
            merchant_id,
            start.isoformat(),
            end.isoformat(),
            len(payouts),
            len(ad_metrics),
        )
        return MerchantInputs(
            merchant_id=merchant_id,
            orders=tuple(orders),
            payouts=tuple(payouts),
            ad_metrics=tuple(ad_metrics),
            cost_templates=tuple(templates),
            merchant_config=merchant_config,
        )
