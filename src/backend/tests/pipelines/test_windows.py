from datetime import date
from decimal import Decimal

from common.profit_engine.models import AdMetricRecord, OrderRecord, PayoutRecord
from pipelines.windows import (
    AdGrouping,
    ad_windows_from_records,
    build_reconciliation_context,
    order_counts_by_day,
    order_totals_by_day,
    payment_windows_from_records,
)


DAY1 = date(2025, 12, 1)
DAY2 = date(2025, 12, 2)


def _order(order_id, day, total=None, subtotal=None):
    return OrderRecord(order_id=order_id, processed_on=day, order_total=total, subtotal=subtotal)


def _ad(provider, account, campaign, day, spend="0", conversions="0"):
    return AdMetricRecord(
        provider=provider,
        account_id=account,
        campaign_id=campaign,
        date=day,
        spend=spend,
        conversions=conversions,
    )


def test_order_totals_fall_back_to_subtotal():
    orders = [_order("1", DAY1, total="100"), _order("2", DAY1, subtotal="40"), _order("3", DAY2)]
    assert order_totals_by_day(orders) == {DAY1: Decimal("140"), DAY2: Decimal("0")}
    assert order_counts_by_day(orders) == {DAY1: 2, DAY2: 1}


def test_payment_windows_group_payouts_by_day():
    payouts = [
        PayoutRecord(payout_id="b", payout_date=DAY2, net_amount="50"),
        PayoutRecord(payout_id="a1", payout_date=DAY1, gross_amount="100", fee_total="3"),
        PayoutRecord(payout_id="a2", payout_date=DAY1, net_amount="10", currency="CAD"),
    ]
    windows = payment_windows_from_records(payouts, {DAY1: Decimal("120")})

    assert [w.window_key for w in windows] == ["2025-12-01", "2025-12-02"]
    first, second = windows
    assert first.observed_payout_total == Decimal("107")
    assert first.expected_revenue_total == Decimal("120")
    assert first.payout_ids == ["a1", "a2"]
    assert first.currency == "USD"
    assert second.expected_revenue_total == Decimal("0")


def test_ad_windows_by_account():
    records = [
        _ad("meta-ads", "act_1", "c1", DAY1, spend="10", conversions="2"),
        _ad("meta-ads", "act_1", "c2", DAY1, spend="5", conversions="1"),
        _ad("google-ads", "9", "g1", DAY1, spend="7"),
    ]
    windows = ad_windows_from_records(records, {DAY1: 4})

    by_key = {w.window_key: w for w in windows}
    assert set(by_key) == {"meta-ads:act_1:2025-12-01", "google-ads:9:2025-12-01"}
    meta = by_key["meta-ads:act_1:2025-12-01"]
    assert meta.ad_spend == Decimal("15")
    assert meta.ad_conversions == Decimal("3")
    assert meta.order_count == 4
    assert meta.campaign_id is None


def test_ad_windows_by_campaign_and_store():
    records = [
        _ad("meta-ads", "act_1", "c1", DAY1, spend="10"),
        _ad("meta-ads", "act_1", "c2", DAY2, spend="5"),
    ]
    by_campaign = ad_windows_from_records(records, {}, grouping=AdGrouping.CAMPAIGN)
    assert [w.window_key for w in by_campaign] == [
        "meta-ads:act_1:c1:2025-12-01",
        "meta-ads:act_1:c2:2025-12-02",
    ]
    assert by_campaign[0].order_count == 0

    store = ad_windows_from_records(records + [_ad("google-ads", "9", "g", DAY1, spend="1")], {}, grouping=AdGrouping.STORE)
    assert [w.window_key for w in store] == ["all:2025-12-01", "all:2025-12-02"]
    assert store[0].ad_spend == Decimal("11")


def test_build_context_spans_all_inputs():
    ctx = build_reconciliation_context(
        orders=[_order("1", DAY2, total="10")],
        payouts=[PayoutRecord(payout_id="p", payout_date=DAY1, net_amount="10")],
    )
    assert ctx.window_start == DAY1
    assert ctx.window_end == DAY2
    assert len(ctx.payment_windows) == 1
    assert ctx.ad_windows == ()


def test_build_context_with_no_inputs():
    ctx = build_reconciliation_context(orders=[])
    assert ctx.window_start is None
    assert ctx.payment_windows == ()


def test_ad_windows_by_provider_merge_accounts():
    records = [
        _ad("meta-ads", "act_1", "c1", DAY1, spend="10", conversions="2"),
        _ad("meta-ads", "act_2", "c9", DAY1, spend="5", conversions="1"),
        _ad("google-ads", "9", "g1", DAY1, spend="7"),
    ]
    windows = ad_windows_from_records(records, {DAY1: 6}, grouping=AdGrouping.PROVIDER)

    by_key = {w.window_key: w for w in windows}
    assert set(by_key) == {"meta-ads:2025-12-01", "google-ads:2025-12-01"}
    meta = by_key["meta-ads:2025-12-01"]
    assert meta.provider == "meta-ads"
    assert meta.account_id is None
    assert meta.ad_spend == Decimal("15")
    assert meta.ad_conversions == Decimal("3")
