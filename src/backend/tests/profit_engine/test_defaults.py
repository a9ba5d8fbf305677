from decimal import Decimal

from common.profit_engine.defaults import (
    base_amount,
    order_total_base,
    resolve_base_target,
    shipping_revenue_base,
    subtotal_base,
)
from common.profit_engine.models import BaseAmount, OrderContext


def test_resolve_base_target_precedence():
    assert resolve_base_target("SUBTOTAL", "SHIPPING_REVENUE") == BaseAmount.SUBTOTAL
    assert resolve_base_target(None, "SHIPPING_REVENUE") == BaseAmount.SHIPPING_REVENUE
    assert resolve_base_target(None, None) == BaseAmount.ORDER_TOTAL


def test_unknown_target_means_order_total():
    # The line value wins even when unknown; it does not fall through to the template value.
    assert resolve_base_target("TOTAL", "SUBTOTAL") == BaseAmount.ORDER_TOTAL
    assert resolve_base_target(None, "TOTAL") == BaseAmount.ORDER_TOTAL


def test_order_total_fallback_chain():
    assert order_total_base(OrderContext(order_total="120", subtotal="100")) == Decimal("120")
    assert order_total_base(OrderContext(subtotal="100")) == Decimal("100")
    assert order_total_base(OrderContext()) == Decimal("0")


def test_unparsable_order_total_is_zero_not_subtotal():
    ctx = OrderContext(order_total="n/a", subtotal="100")
    assert order_total_base(ctx) == Decimal("0")


def test_missing_bases_default_to_zero():
    ctx = OrderContext(order_total=10)
    assert subtotal_base(ctx) == Decimal("0")
    assert shipping_revenue_base(ctx) == Decimal("0")
    assert base_amount(BaseAmount.SHIPPING_REVENUE, ctx) == Decimal("0")
    assert base_amount(BaseAmount.ORDER_TOTAL, ctx) == Decimal("10")
