from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Iterable, Mapping

from common.profit_engine.config import MerchantReconciliationConfig
from common.profit_engine.context import ReconciliationContext
from common.profit_engine.defaults import order_total_base
from common.profit_engine.models import AdMetricRecord, AdWindow, OrderRecord, PaymentWindow, PayoutRecord


class AdGrouping(str, Enum):
    STORE = "STORE"
    PROVIDER = "PROVIDER"
    ACCOUNT = "ACCOUNT"
    CAMPAIGN = "CAMPAIGN"


def order_totals_by_day(orders: Iterable[OrderRecord]) -> dict[date, Decimal]:
    totals: dict[date, Decimal] = defaultdict(lambda: Decimal("0"))
    for order in orders:
        totals[order.processed_on] += order_total_base(order)
    return dict(totals)


def order_counts_by_day(orders: Iterable[OrderRecord]) -> dict[date, int]:
    counts: dict[date, int] = defaultdict(int)
    for order in orders:
        counts[order.processed_on] += 1
    return dict(counts)


def payment_windows_from_records(
    payouts: Iterable[PayoutRecord],
    order_totals: Mapping[date, Decimal],
) -> list[PaymentWindow]:
    """One window per payout date: summed net payouts vs that day's order revenue."""
    by_day: dict[date, list[PayoutRecord]] = defaultdict(list)
    for payout in payouts:
        by_day[payout.payout_date].append(payout)

    windows: list[PaymentWindow] = []
    for day in sorted(by_day):
        day_payouts = by_day[day]
        windows.append(
            PaymentWindow(
                window_key=day.isoformat(),
                window_start=day,
                window_end=day,
                currency=day_payouts[0].currency,
                observed_payout_total=sum((p.net_amount for p in day_payouts), Decimal("0")),
                expected_revenue_total=order_totals.get(day, Decimal("0")),
                payout_ids=[p.payout_id for p in day_payouts],
            )
        )
    return windows


def _ad_group_key(record: AdMetricRecord, grouping: AdGrouping) -> tuple[str, str | None, str | None]:
    if grouping == AdGrouping.STORE:
        return ("all", None, None)
    if grouping == AdGrouping.PROVIDER:
        return (record.provider, None, None)
    if grouping == AdGrouping.CAMPAIGN:
        return (record.provider, record.account_id or None, record.campaign_id)
    return (record.provider, record.account_id or None, None)


def ad_windows_from_records(
    records: Iterable[AdMetricRecord],
    order_counts: Mapping[date, int],
    *,
    grouping: AdGrouping = AdGrouping.ACCOUNT,
) -> list[AdWindow]:
    """One window per (group, day): summed spend/conversions vs that day's store order count."""
    grouped: dict[tuple[tuple[str, str | None, str | None], date], list[AdMetricRecord]] = defaultdict(list)
    for record in records:
        grouped[(_ad_group_key(record, grouping), record.date)].append(record)

    windows: list[AdWindow] = []
    for (group, day), rows in sorted(grouped.items(), key=lambda item: (item[0][1], str(item[0][0]))):
        provider, account_id, campaign_id = group
        key_parts = [part for part in (provider, account_id, campaign_id) if part]
        windows.append(
            AdWindow(
                window_key=":".join(key_parts + [day.isoformat()]),
                window_start=day,
                window_end=day,
                provider=provider,
                account_id=account_id,
                campaign_id=campaign_id,
                currency=rows[0].currency,
                ad_spend=sum((r.spend for r in rows), Decimal("0")),
                ad_conversions=sum((r.conversions for r in rows), Decimal("0")),
                order_count=order_counts.get(day, 0),
            )
        )
    return windows


def build_reconciliation_context(
    *,
    orders: Iterable[OrderRecord],
    payouts: Iterable[PayoutRecord] = (),
    ad_metrics: Iterable[AdMetricRecord] = (),
    merchant_config: MerchantReconciliationConfig | None = None,
    grouping: AdGrouping = AdGrouping.ACCOUNT,
) -> ReconciliationContext:
    orders = list(orders)
    payment_windows = payment_windows_from_records(payouts, order_totals_by_day(orders))
    ad_windows = ad_windows_from_records(ad_metrics, order_counts_by_day(orders), grouping=grouping)

    days = [w.window_start for w in payment_windows] + [w.window_start for w in ad_windows]
    days += [o.processed_on for o in orders]
    return ReconciliationContext(
        window_start=min(days) if days else None,
        window_end=max(days) if days else None,
        payment_windows=tuple(payment_windows),
        ad_windows=tuple(ad_windows),
        merchant_config=merchant_config or MerchantReconciliationConfig(),
    )
