from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .coercion import ZERO, decimal_or_zero, int_or_zero, money_or_none, optional_str, parse_decimal


class CostType(str, Enum):
    SHIPPING = "SHIPPING"
    PAYMENT_FEE = "PAYMENT_FEE"
    PLATFORM_FEE = "PLATFORM_FEE"
    CUSTOM = "CUSTOM"


class BaseAmount(str, Enum):
    SUBTOTAL = "SUBTOTAL"
    SHIPPING_REVENUE = "SHIPPING_REVENUE"
    ORDER_TOTAL = "ORDER_TOTAL"


class Severity(str, Enum):
    INFO = "INFO"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


def _enum_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


class CostLine(BaseModel):
    label: str = ""
    applies_to: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("applies_to", "appliesTo")
    )
    percentage_rate: Decimal = Field(
        default=ZERO, validation_alias=AliasChoices("percentage_rate", "percentageRate")
    )
    flat_amount: Decimal = Field(
        default=ZERO, validation_alias=AliasChoices("flat_amount", "flatAmount")
    )

    @field_validator("label", mode="before")
    @classmethod
    def _coerce_label(cls, value: Any) -> str:
        return optional_str(value) or ""

    @field_validator("applies_to", mode="before")
    @classmethod
    def _coerce_applies_to(cls, value: Any) -> Optional[str]:
        return optional_str(_enum_value(value))

    @field_validator("percentage_rate", "flat_amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Decimal:
        return decimal_or_zero(value)


class CostTemplateConfig(BaseModel):
    # Storage configs carry extra display keys (e.g. defaultRate); keep them untouched.
    model_config = ConfigDict(extra="allow")

    gateway: Optional[str] = None
    channel: Optional[str] = None
    applies_to: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("applies_to", "appliesTo")
    )

    @field_validator("gateway", "channel", "applies_to", mode="before")
    @classmethod
    def _coerce_filter(cls, value: Any) -> Optional[str]:
        return optional_str(_enum_value(value))


class CostTemplate(BaseModel):
    """A merchant-configured rule describing how to compute one variable cost component."""

    type: CostType
    name: str = ""
    lines: Optional[List[CostLine]] = None
    config: Optional[CostTemplateConfig] = None

    @field_validator("config", mode="before")
    @classmethod
    def _coerce_config(cls, value: Any) -> Any:
        if isinstance(value, (dict, CostTemplateConfig)):
            return value
        return None


class OrderContext(BaseModel):
    order_total: Optional[Decimal] = Field(
        default=None, validation_alias=AliasChoices("order_total", "orderTotal")
    )
    subtotal: Optional[Decimal] = None
    shipping_revenue: Optional[Decimal] = Field(
        default=None, validation_alias=AliasChoices("shipping_revenue", "shippingRevenue")
    )
    payment_gateway: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("payment_gateway", "paymentGateway")
    )
    channel: Optional[str] = None

    @field_validator("order_total", "subtotal", "shipping_revenue", mode="before")
    @classmethod
    def _coerce_money(cls, value: Any) -> Optional[Decimal]:
        return money_or_none(value)

    @field_validator("payment_gateway", "channel", mode="before")
    @classmethod
    def _coerce_filter(cls, value: Any) -> Optional[str]:
        return optional_str(value)


class OrderRecord(OrderContext):
    order_id: str
    processed_on: dt.date
    currency: str = "USD"


class VariableCost(BaseModel):
    type: CostType
    template_name: str
    amount: Decimal


def _zero_totals() -> Dict[CostType, Decimal]:
    return {cost_type: ZERO for cost_type in CostType}


class CostTotals(BaseModel):
    totals: Dict[CostType, Decimal] = Field(default_factory=_zero_totals)

    def get(self, cost_type: CostType) -> Decimal:
        return self.totals.get(cost_type, ZERO)

    def as_dict(self) -> Dict[CostType, Decimal]:
        return {cost_type: self.get(cost_type) for cost_type in CostType}

    @property
    def shipping_cost(self) -> Decimal:
        return self.get(CostType.SHIPPING)

    @property
    def payment_fees(self) -> Decimal:
        return self.get(CostType.PAYMENT_FEE)

    @property
    def platform_fees(self) -> Decimal:
        return self.get(CostType.PLATFORM_FEE)

    @property
    def custom_costs(self) -> Decimal:
        return self.get(CostType.CUSTOM)


class VariableCostBreakdown(BaseModel):
    variable_costs: List[VariableCost] = Field(default_factory=list)
    totals: CostTotals = Field(default_factory=CostTotals)

    shipping_cost: Decimal = ZERO
    payment_fees: Decimal = ZERO
    platform_fees: Decimal = ZERO
    custom_costs: Decimal = ZERO


class PayoutRecord(BaseModel):
    payout_id: str
    status: str = ""
    payout_date: dt.date
    currency: str = "USD"
    gross_amount: Decimal = ZERO
    fee_total: Decimal = ZERO
    net_amount: Decimal = ZERO
    raw_source: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _derive_net_amount(cls, data: Any) -> Any:
        if isinstance(data, dict) and parse_decimal(data.get("net_amount")) is None:
            data = dict(data)
            data["net_amount"] = decimal_or_zero(data.get("gross_amount")) - decimal_or_zero(
                data.get("fee_total")
            )
        return data

    @field_validator("gross_amount", "fee_total", "net_amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Decimal:
        return decimal_or_zero(value)


class AdMetricRecord(BaseModel):
    provider: str = ""
    account_id: str = ""
    campaign_id: Optional[str] = None
    campaign_name: Optional[str] = None
    ad_set_id: Optional[str] = None
    ad_set_name: Optional[str] = None
    ad_id: Optional[str] = None
    ad_name: Optional[str] = None
    date: dt.date
    currency: str = "USD"
    spend: Decimal = ZERO
    impressions: int = 0
    clicks: int = 0
    conversions: Decimal = ZERO

    @field_validator(
        "campaign_id", "campaign_name", "ad_set_id", "ad_set_name", "ad_id", "ad_name", mode="before"
    )
    @classmethod
    def _coerce_label(cls, value: Any) -> Optional[str]:
        return optional_str(value)

    @field_validator("spend", "conversions", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Decimal:
        return decimal_or_zero(value)

    @field_validator("impressions", "clicks", mode="before")
    @classmethod
    def _coerce_count(cls, value: Any) -> int:
        return int_or_zero(value)


class PaymentWindow(BaseModel):
    """Payout vs order revenue totals for one reconciliation window."""

    window_key: str
    window_start: dt.date
    window_end: dt.date
    channel: str = "payments"
    currency: Optional[str] = None
    observed_payout_total: Decimal = ZERO
    expected_revenue_total: Decimal = ZERO
    payout_ids: List[str] = Field(default_factory=list)


class AdWindow(BaseModel):
    """Ad spend/conversions vs store order count for one reconciliation window."""

    window_key: str
    window_start: dt.date
    window_end: dt.date
    provider: str = ""
    account_id: Optional[str] = None
    campaign_id: Optional[str] = None
    currency: Optional[str] = None
    ad_spend: Decimal = ZERO
    ad_conversions: Decimal = ZERO
    order_count: int = 0


class DiscrepancyFlag(BaseModel):
    rule_id: str
    severity: Severity
    message: str
    observed: Decimal
    expected: Decimal
    delta: Decimal

    window_key: str = ""
    channel: str = ""
    currency: Optional[str] = None
    values: Dict[str, Any] = Field(default_factory=dict)


class FlagSummary(BaseModel):
    rule_id: str
    flags: int = 0
    delta_total: Decimal = ZERO
    worst_severity: Severity = Severity.INFO


class ReconciliationRunReport(BaseModel):
    run_id: str
    generated_at: dt.datetime
    window_start: Optional[dt.date] = None
    window_end: Optional[dt.date] = None

    rules_evaluated: List[str] = Field(default_factory=list)
    flags: List[DiscrepancyFlag] = Field(default_factory=list)
    totals: Dict[Severity, int] = Field(default_factory=dict)


@dataclass(frozen=True)
class SeverityOrdering:
    order: Dict[Severity, int]

    @classmethod
    def default(cls) -> "SeverityOrdering":
        # Higher wins.
        return cls(
            order={
                Severity.HIGH: 30,
                Severity.MEDIUM: 20,
                Severity.INFO: 10,
            }
        )

    def worst(self, severities: List[Severity]) -> Severity:
        if not severities:
            return Severity.INFO
        return max(severities, key=lambda s: self.order.get(s, 0))
