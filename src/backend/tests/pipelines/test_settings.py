from decimal import Decimal
from pathlib import Path

import pytest

from pipelines.settings import get_settings
from pipelines.windows import AdGrouping


def test_defaults_without_environment():
    settings = get_settings({})
    assert settings.fixtures_root is None
    assert settings.log_level == "INFO"
    assert settings.ad_grouping == "ACCOUNT"
    assert settings.threshold_overrides == {}
    assert settings.rule_config().payment.amount_delta == Decimal("50")


def test_environment_overrides():
    settings = get_settings(
        {
            "PROFIT_ENGINE_FIXTURES_ROOT": "/tmp/fixtures",
            "PROFIT_ENGINE_LOG_LEVEL": "debug",
            "PROFIT_ENGINE_AD_GROUPING": "campaign",
            "PROFIT_ENGINE_PAYMENT_PERCENT_DELTA": "0.1",
            "PROFIT_ENGINE_ADS_MIN_ORDERS_FOR_SPEND_CHECK": "3",
        }
    )
    assert settings.fixtures_root == Path("/tmp/fixtures")
    assert settings.log_level == "DEBUG"
    assert settings.ad_grouping == "CAMPAIGN"

    cfg = settings.rule_config()
    assert cfg.payment.percent_delta == Decimal("0.1")
    assert cfg.payment.amount_delta == Decimal("50")
    assert cfg.ads.min_orders_for_spend_check == 3


@pytest.mark.parametrize("raw", ["abc", "-5"])
def test_invalid_threshold_names_the_variable(raw):
    with pytest.raises(ValueError) as excinfo:
        get_settings({"PROFIT_ENGINE_PAYMENT_AMOUNT_DELTA": raw})
    assert "PROFIT_ENGINE_PAYMENT_AMOUNT_DELTA" in str(excinfo.value)


def test_invalid_ad_grouping_names_the_variable():
    with pytest.raises(ValueError) as excinfo:
        get_settings({"PROFIT_ENGINE_AD_GROUPING": "by-vibes"})
    assert "PROFIT_ENGINE_AD_GROUPING" in str(excinfo.value)
    assert "PROVIDER" in str(excinfo.value)


def test_provider_grouping_and_live_settings():
    settings = get_settings(
        {
            "PROFIT_ENGINE_AD_GROUPING": "provider",
            "PROFIT_ENGINE_DATA_SOURCE": "LIVE",
            "PROFIT_ENGINE_LIVE_DAYS": "14",
        }
    )
    assert settings.ad_grouping == AdGrouping.PROVIDER
    assert settings.data_source == "live"
    assert settings.live_days == 14


@pytest.mark.parametrize(
    "name, raw",
    [("PROFIT_ENGINE_DATA_SOURCE", "database"), ("PROFIT_ENGINE_LIVE_DAYS", "0"), ("PROFIT_ENGINE_LIVE_DAYS", "x")],
)
def test_invalid_source_settings_name_the_variable(name, raw):
    with pytest.raises(ValueError) as excinfo:
        get_settings({name: raw})
    assert name in str(excinfo.value)
