from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from ..config import AdsThresholds, RuleConfigBase
from ..context import ReconciliationContext, format_count, format_money
from ..models import DiscrepancyFlag, Severity
from ..predicates import conversions_inflated, spend_without_conversions
from ..registry import register_rule
from ..rule import Rule

ADS_CONVERSION_ANOMALIES_ID = "ADS-CONVERSION-ANOMALIES"
ADS_CONVERSION_INFLATION_ID = "ADS-CONVERSION-INFLATION"
ADS_SPEND_WITHOUT_CONVERSIONS_ID = "ADS-SPEND-WITHOUT-CONVERSIONS"


def evaluate_ad_anomalies(
    ad_conversions: Decimal,
    ad_spend: Decimal,
    order_count: int,
    thresholds: AdsThresholds,
    *,
    window_key: str = "",
    provider: str = "",
    currency: Optional[str] = None,
) -> List[DiscrepancyFlag]:
    """Run both ad sub-checks for one window; each breach yields its own flag."""
    label = provider or "Ads"
    flags: List[DiscrepancyFlag] = []

    if conversions_inflated(ad_conversions, order_count, thresholds):
        orders = Decimal(order_count)
        flags.append(
            DiscrepancyFlag(
                rule_id=ADS_CONVERSION_INFLATION_ID,
                severity=Severity.MEDIUM,
                message=(
                    f"{label} conversions ({format_count(ad_conversions)}) exceed store orders "
                    f"({order_count}) on {window_key}"
                ),
                observed=ad_conversions,
                expected=orders,
                delta=ad_conversions - orders,
                window_key=window_key,
                channel=provider,
                currency=currency,
                values={
                    "conversion_multiple": str(thresholds.conversion_multiple),
                    "conversion_threshold": str(orders * thresholds.conversion_multiple),
                    "min_orders_for_spend_check": thresholds.min_orders_for_spend_check,
                },
            )
        )

    if spend_without_conversions(ad_spend, ad_conversions, thresholds):
        flags.append(
            DiscrepancyFlag(
                rule_id=ADS_SPEND_WITHOUT_CONVERSIONS_ID,
                severity=Severity.HIGH,
                message=f"{label} spent {format_money(ad_spend, currency)} with no attributed conversions",
                observed=ad_spend,
                expected=Decimal("0"),
                delta=ad_spend,
                window_key=window_key,
                channel=provider,
                currency=currency,
                values={
                    "min_spend_without_conversions": str(thresholds.min_spend_without_conversions),
                    "order_count": order_count,
                },
            )
        )

    return flags


class AdsConversionRuleConfig(RuleConfigBase):
    check_conversion_inflation: bool = True
    check_spend_without_conversions: bool = True


@register_rule
class ADS_CONVERSION_ANOMALIES(Rule):
    rule_id = ADS_CONVERSION_ANOMALIES_ID
    rule_title = "Ad conversions are consistent with store orders"
    description = (
        "Flags ad platforms reporting materially more conversions than recorded orders, "
        "and material spend with no attributed conversions."
    )
    sources = ["Ad platform metrics", "Store orders"]
    config_model = AdsConversionRuleConfig

    def check(self, ctx: ReconciliationContext, cfg: AdsConversionRuleConfig) -> List[DiscrepancyFlag]:
        enabled_checks = set()
        if cfg.check_conversion_inflation:
            enabled_checks.add(ADS_CONVERSION_INFLATION_ID)
        if cfg.check_spend_without_conversions:
            enabled_checks.add(ADS_SPEND_WITHOUT_CONVERSIONS_ID)

        flags: List[DiscrepancyFlag] = []
        for window in ctx.ad_windows:
            window_flags = evaluate_ad_anomalies(
                window.ad_conversions,
                window.ad_spend,
                window.order_count,
                ctx.thresholds.ads,
                window_key=window.window_key,
                provider=window.provider,
                currency=window.currency,
            )
            flags.extend(f for f in window_flags if f.rule_id in enabled_checks)
        return flags
