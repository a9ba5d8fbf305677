from decimal import Decimal

import pytest

from common.profit_engine.models import Severity
from common.profit_engine.registry import RuleRegistry, UnknownRuleError
from common.profit_engine.rules import PAYMENT_PAYOUT_VARIANCE
from common.profit_engine.runner import RulesRunner, summarize_flags


def _ctx(make_ctx, make_payment_window, make_ad_window, **kwargs):
    return make_ctx(
        payment_windows=[
            make_payment_window(observed="890", expected="1000", key="2025-12-01"),
            make_payment_window(observed="700", expected="800", key="2025-12-02"),
        ],
        ad_windows=[
            make_ad_window(conversions=16, spend=80, orders=10),
            make_ad_window(conversions=0, spend=300, orders=1, provider="google-ads"),
        ],
        **kwargs,
    )


def test_runner_collects_flags_from_all_rules(make_ctx, make_payment_window, make_ad_window):
    report = RulesRunner().run(_ctx(make_ctx, make_payment_window, make_ad_window))

    assert set(report.rules_evaluated) == {"PAYMENT-PAYOUT-VARIANCE", "ADS-CONVERSION-ANOMALIES"}
    assert len(report.flags) == 4
    assert report.totals == {Severity.HIGH: 3, Severity.MEDIUM: 1}
    assert report.window_start == report.window_end
    assert report.run_id


def test_runner_can_limit_rule_ids(make_ctx, make_payment_window, make_ad_window):
    report = RulesRunner().run(
        _ctx(make_ctx, make_payment_window, make_ad_window),
        rule_ids={"ADS-CONVERSION-ANOMALIES"},
    )
    assert report.rules_evaluated == ["ADS-CONVERSION-ANOMALIES"]
    assert {f.rule_id for f in report.flags} == {"ADS-CONVERSION-INFLATION", "ADS-SPEND-WITHOUT-CONVERSIONS"}


def test_runner_with_no_windows_reports_nothing(make_ctx):
    report = RulesRunner().run(make_ctx())
    assert report.flags == []
    assert report.totals == {}


def test_summarize_flags(make_ctx, make_payment_window, make_ad_window):
    report = RulesRunner().run(_ctx(make_ctx, make_payment_window, make_ad_window))
    summary = {s.rule_id: s for s in summarize_flags(report.flags)}

    payment = summary["PAYMENT-PAYOUT-VARIANCE"]
    assert payment.flags == 2
    assert payment.delta_total == Decimal("210")
    assert payment.worst_severity == Severity.HIGH
    assert summary["ADS-CONVERSION-INFLATION"].worst_severity == Severity.MEDIUM


def test_registry_rejects_duplicates():
    reg = RuleRegistry()
    reg.register(PAYMENT_PAYOUT_VARIANCE)
    with pytest.raises(ValueError):
        reg.register(PAYMENT_PAYOUT_VARIANCE)
    assert "PAYMENT-PAYOUT-VARIANCE" in reg
    assert [r.rule_id for r in reg.create_all(["PAYMENT-PAYOUT-VARIANCE"])] == ["PAYMENT-PAYOUT-VARIANCE"]
    with pytest.raises(UnknownRuleError):
        reg.create_all(["PAYMENT-PAYOUT-VARIANCE", "NOPE"])
    with pytest.raises(UnknownRuleError):
        reg.get("NOPE")


def test_runner_rejects_unknown_rule_ids(make_ctx):
    with pytest.raises(UnknownRuleError) as excinfo:
        RulesRunner().run(make_ctx(), rule_ids={"NOT-A-RULE"})
    assert excinfo.value.rule_ids == ["NOT-A-RULE"]

