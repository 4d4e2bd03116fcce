from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field

from .base import ApiModel, CamelApiModel, Count, Id, Money, UtcDatetime

CouponStatus = Literal["active", "inactive", "expired", "exhausted"]

COUPON_STATUS_LABELS: dict[str, str] = {
    "active": "ACTIVO",
    "inactive": "INACTIVO",
    "expired": "VENCIDO",
    "exhausted": "AGOTADO",
}


class Coupon(ApiModel):
    """Discount coupon the customer types at checkout."""
    id: Optional[Id] = Field(default=None, description="Coupon identifier")
    code: str = Field(default="", description="Code entered by the customer")
    description: Optional[str] = Field(default=None, description="Internal description")
    discount_type: Literal["percentage", "fixed"] = Field(default="percentage", description="Percentage or fixed amount")
    discount_value: Money = Field(default=0.0, description="Percentage points or currency amount")
    min_purchase: Money = Field(default=0.0, description="Minimum order subtotal")
    max_discount: Optional[float] = Field(default=None, description="Cap for percentage discounts")
    valid_from: Optional[UtcDatetime] = Field(default=None, description="Start of validity")
    valid_until: Optional[UtcDatetime] = Field(default=None, description="End of validity")
    usage_limit: Optional[int] = Field(default=None, description="Maximum redemptions; empty means unlimited")
    usage_count: Count = Field(default=0, description="Redemptions so far")
    is_active: bool = Field(default=True, description="Manually enabled")
    store_id: Optional[Id] = Field(default=None, description="Owning store")


PromoCodeType = Literal[
    "discount_percent",
    "discount_fixed",
    "free_product",
    "bonus_points",
    "level_upgrade",
    "special_gift",
]


class ValidHours(ApiModel):
    """Time-of-day window a promo code can be used in (HH:MM)."""
    from_: str = Field(default="00:00", alias="from", description="Window start")
    to: str = Field(default="23:59", description="Window end")


class PromoCode(CamelApiModel):
    """Loyalty promo code (camelCase on the wire)."""
    id: Optional[Id] = Field(default=None, description="Promo code identifier")
    code: str = Field(default="", description="Code entered by the customer")
    type: PromoCodeType = Field(default="discount_percent", description="Reward kind")
    value: Money = Field(default=0.0, description="Reward value")
    description: Optional[str] = Field(default=None, description="Description")
    product_id: Optional[Id] = Field(default=None, description="Product for free_product codes")
    level_restriction: Optional[list[str]] = Field(default=None, description="Loyalty levels allowed to redeem")
    max_total_uses: Optional[int] = Field(default=None, description="Global redemption cap")
    max_uses_per_customer: Optional[int] = Field(default=1, description="Per-customer redemption cap")
    total_uses: Count = Field(default=0, description="Redemptions so far")
    valid_from: Optional[UtcDatetime] = Field(default=None, description="Start of validity")
    valid_until: Optional[UtcDatetime] = Field(default=None, description="End of validity")
    valid_hours: Optional[ValidHours] = Field(default=None, description="Daily time window")
    is_active: bool = Field(default=True, description="Manually enabled")


PromotionType = Literal["discount", "2x1", "combo", "free_delivery"]


class Promotion(ApiModel):
    """Store-wide promotion shown on the menu."""
    id: Optional[Id] = Field(default=None, description="Promotion identifier")
    title: str = Field(default="", description="Title shown to customers")
    description: Optional[str] = Field(default=None, description="Description")
    type: PromotionType = Field(default="discount", description="Promotion kind")
    discount_percentage: Optional[float] = Field(default=None, description="Percentage off")
    discount_amount: Optional[float] = Field(default=None, description="Fixed amount off")
    min_purchase: Money = Field(default=0.0, description="Minimum order subtotal")
    valid_from: Optional[UtcDatetime] = Field(default=None, description="Start of validity")
    valid_until: Optional[UtcDatetime] = Field(default=None, description="End of validity")
    is_active: bool = Field(default=True, description="Manually enabled")
    product_ids: list[Id] = Field(default_factory=list, description="Products the promotion applies to")
    image_url: Optional[str] = Field(default=None, description="Banner image")
    store_id: Optional[Id] = Field(default=None, description="Owning store")
