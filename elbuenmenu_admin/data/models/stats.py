from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from .base import CamelApiModel, Count, Money


class PeriodTotals(CamelApiModel):
    """Revenue and order totals for a period."""
    revenue: Money = 0.0
    orders: Count = 0
    delivery_fee: Money = 0.0
    subtotal: Money = 0.0
    average_order_value: Money = 0.0


class PaymentMethodStat(CamelApiModel):
    method: str = "desconocido"
    count: Count = 0
    total: Money = 0.0
    percentage: Money = 0.0


class DeliverySplit(CamelApiModel):
    delivery_orders: Count = 0
    pickup_orders: Count = 0
    delivery_revenue: Money = 0.0
    pickup_revenue: Money = 0.0


class DailyPoint(CamelApiModel):
    date: str
    revenue: Money = 0.0
    orders: Count = 0


class HourlyPoint(CamelApiModel):
    hour: str
    revenue: Money = 0.0
    orders: Count = 0

    @field_validator("hour", mode="before")
    @classmethod
    def _hour_as_text(cls, value: Any) -> Any:
        if isinstance(value, int):
            return f"{value:02d}:00"
        return value


class ProductStat(CamelApiModel):
    name: str = Field(default="", validation_alias=AliasChoices("name", "product_name", "productName"))
    quantity: Count = 0
    revenue: Money = 0.0


def _section(value: Any) -> Any:
    return {} if value is None else value


def _rows(value: Any) -> Any:
    return [] if value is None else value


class SalesStats(CamelApiModel):
    """Aggregates behind the sales dashboard. Missing sections default to zeros."""
    total: PeriodTotals = Field(default_factory=PeriodTotals)
    current_month: PeriodTotals = Field(default_factory=PeriodTotals)
    current_week: PeriodTotals = Field(default_factory=PeriodTotals)
    payment_methods: list[PaymentMethodStat] = Field(default_factory=list)
    delivery: DeliverySplit = Field(default_factory=DeliverySplit)
    last_30_days: list[DailyPoint] = Field(
        default_factory=list, validation_alias=AliasChoices("last_30_days", "last30Days")
    )
    last_24_hours: list[HourlyPoint] = Field(
        default_factory=list, validation_alias=AliasChoices("last_24_hours", "last24Hours")
    )
    top_products: list[ProductStat] = Field(default_factory=list)

    @field_validator("total", "current_month", "current_week", "delivery", mode="before")
    @classmethod
    def _missing_section(cls, value: Any) -> Any:
        return _section(value)

    @field_validator("payment_methods", "last_30_days", "last_24_hours", "top_products", mode="before")
    @classmethod
    def _missing_rows(cls, value: Any) -> Any:
        return _rows(value)


class RealtimeAnalytics(CamelApiModel):
    """Today's figures from /analytics/realtime."""
    today_sales: Money = 0.0
    today_orders: Optional[int] = None


class RealtimeMetrics(BaseModel):
    """What the real-time panel shows."""
    pending: int = 0
    preparing: int = 0
    ready: int = 0
    today_sales: float = 0.0
    today_orders: int = 0
    average_ticket: float = 0.0


class ExpenseSummary(BaseModel):
    total: float = 0.0
    by_category: dict[str, float] = Field(default_factory=dict)
    count: int = 0


class ReviewStats(BaseModel):
    total: int = 0
    average: float = 0.0
    pending: int = 0
    histogram: dict[int, int] = Field(default_factory=dict)


class InventoryStats(BaseModel):
    total_items: int = 0
    low_stock: int = 0
    out_of_stock: int = 0
    total_value: float = 0.0


class LoyaltyStats(BaseModel):
    members: int = 0
    total_points: int = 0
    redeemed_points: int = 0
    active_members: int = 0


class CouponStats(BaseModel):
    active: int = 0
    expired: int = 0
    total_uses: int = 0


class PromotionStats(BaseModel):
    active: int = 0
    discount: int = 0
    combo: int = 0


class OrderStats(BaseModel):
    pending: int = 0
    cancelled: int = 0
    completed: int = 0
    pending_delivery: int = 0
    pending_pickup: int = 0
    pending_transfers: int = 0
