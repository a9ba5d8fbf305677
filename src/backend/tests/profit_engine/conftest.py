import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from datetime import date
from decimal import Decimal

import pytest

from common.profit_engine.config import MerchantReconciliationConfig, ReconciliationRuleConfig
from common.profit_engine.context import ReconciliationContext
from common.profit_engine.models import AdWindow, CostTemplate, OrderContext, PaymentWindow


@pytest.fixture
def window_day() -> date:
    return date(2025, 12, 1)


@pytest.fixture
def make_template():
    def _make(*, type="SHIPPING", name="Template", lines=None, config=None) -> CostTemplate:
        return CostTemplate.model_validate(
            {"type": type, "name": name, "lines": lines, "config": config}
        )

    return _make


@pytest.fixture
def make_order():
    def _make(**fields) -> OrderContext:
        return OrderContext.model_validate(fields)

    return _make


@pytest.fixture
def make_payment_window(window_day):
    def _make(*, observed, expected, key=None, payout_ids=(), currency="USD") -> PaymentWindow:
        return PaymentWindow(
            window_key=key or window_day.isoformat(),
            window_start=window_day,
            window_end=window_day,
            currency=currency,
            observed_payout_total=Decimal(str(observed)),
            expected_revenue_total=Decimal(str(expected)),
            payout_ids=list(payout_ids),
        )

    return _make


@pytest.fixture
def make_ad_window(window_day):
    def _make(*, conversions=0, spend=0, orders=0, provider="meta-ads", key=None) -> AdWindow:
        return AdWindow(
            window_key=key or f"{provider}:{window_day.isoformat()}",
            window_start=window_day,
            window_end=window_day,
            provider=provider,
            currency="USD",
            ad_spend=Decimal(str(spend)),
            ad_conversions=Decimal(str(conversions)),
            order_count=orders,
        )

    return _make


@pytest.fixture
def make_ctx(window_day):
    def _make(
        *,
        payment_windows=(),
        ad_windows=(),
        thresholds: dict | None = None,
        rules: dict | None = None,
    ) -> ReconciliationContext:
        cfg = MerchantReconciliationConfig(
            thresholds=ReconciliationRuleConfig().with_overrides(thresholds),
            rules=rules or {},
        )
        return ReconciliationContext(
            window_start=window_day,
            window_end=window_day,
            payment_windows=tuple(payment_windows),
            ad_windows=tuple(ad_windows),
            merchant_config=cfg,
        )

    return _make
