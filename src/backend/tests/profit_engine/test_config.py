from decimal import Decimal

import pytest
from pydantic import ValidationError

from common.profit_engine.config import (
    MerchantReconciliationConfig,
    ReconciliationRuleConfig,
    RuleConfigBase,
    describe_reconciliation_rules,
)


def test_documented_defaults():
    cfg = ReconciliationRuleConfig()
    assert cfg.payment.amount_delta == Decimal("50")
    assert cfg.payment.percent_delta == Decimal("0.05")
    assert cfg.ads.conversion_multiple == Decimal("1.5")
    assert cfg.ads.min_spend_without_conversions == Decimal("200")
    assert cfg.ads.min_orders_for_spend_check == 5


def test_overrides_merge_over_defaults_with_camel_case_keys():
    cfg = ReconciliationRuleConfig().with_overrides(
        {"payment": {"amountDelta": 25}, "ads": {"minOrdersForSpendCheck": 10}}
    )
    assert cfg.payment.amount_delta == Decimal("25")
    assert cfg.payment.percent_delta == Decimal("0.05")
    assert cfg.ads.min_orders_for_spend_check == 10
    assert cfg.ads.conversion_multiple == Decimal("1.5")


def test_overrides_do_not_mutate_the_base_config():
    base = ReconciliationRuleConfig()
    base.with_overrides({"payment": {"amount_delta": 1}})
    assert base.payment.amount_delta == Decimal("50")
    assert base.with_overrides(None) is base


def test_config_is_frozen():
    cfg = ReconciliationRuleConfig()
    with pytest.raises(ValidationError):
        cfg.payment.amount_delta = Decimal("1")


def test_unknown_override_keys_are_rejected():
    with pytest.raises(ValidationError):
        ReconciliationRuleConfig().with_overrides({"payment": {"amountDeltaTypo": 1}})


def test_rule_config_lookup_defaults_when_missing():
    cfg = MerchantReconciliationConfig(rules={"X": {"enabled": False}})
    assert cfg.get_rule_config("X", RuleConfigBase).enabled is False
    assert cfg.get_rule_config("Y", RuleConfigBase).enabled is True


def test_describe_default_rules():
    text = describe_reconciliation_rules()
    assert text == {
        "payment": "Payout variance flagged above 5% or 50 base currency.",
        "ads": "Ads flagged when conversions exceed store orders by 1.5x or spend above 200 with zero conversions.",
    }


def test_describe_reflects_overrides():
    cfg = ReconciliationRuleConfig().with_overrides({"payment": {"percentDelta": "0.025"}, "ads": {"conversionMultiple": 2}})
    text = describe_reconciliation_rules(cfg)
    assert "2.5%" in text["payment"]
    assert "by 2x" in text["ads"]
