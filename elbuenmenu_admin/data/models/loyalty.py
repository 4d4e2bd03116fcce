from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field

from .base import ApiModel, CamelApiModel, Count, Id, Money, UtcDatetime

CustomerTier = Literal["regular", "bronze", "silver", "gold", "vip"]
CUSTOMER_TIERS: tuple[str, ...] = ("regular", "bronze", "silver", "gold", "vip")

TIER_LABELS: dict[str, str] = {
    "regular": "Regular",
    "bronze": "Bronce",
    "silver": "Plata",
    "gold": "Oro",
    "vip": "VIP",
}


class CustomerLoyalty(CamelApiModel):
    """Loyalty profile of a customer (camelCase on the wire)."""
    customer_id: Id = Field(description="Customer identifier")
    customer_name: Optional[str] = Field(default=None, description="Customer name")
    customer_phone: Optional[str] = Field(default=None, description="Customer phone")
    tier: CustomerTier = Field(default="regular", description="Loyalty tier")
    total_orders: Count = Field(default=0, description="Delivered orders")
    total_spent: Money = Field(default=0.0, description="Lifetime spend")
    last_order_date: Optional[UtcDatetime] = Field(default=None, description="Most recent order")
    favorite_products: list[str] = Field(default_factory=list, description="Most ordered products")
    discount_percentage: Money = Field(default=0.0, description="Automatic discount for the tier")
    points: Count = Field(default=0, description="Points balance")
    priority: bool = Field(default=False, description="Kitchen priority")


class CustomerLoyaltyUpdate(CamelApiModel):
    """Fields an admin may override on a customer's loyalty profile."""
    tier: CustomerTier
    discount_percentage: float = 0.0
    priority: bool = False


class LoyaltyProgram(ApiModel):
    """Store loyalty program parameters."""
    id: Optional[Id] = Field(default=None, description="Program identifier")
    points_per_order: Count = Field(default=10, description="Points granted per order")
    points_per_currency: Money = Field(default=1.0, description="Points granted per currency unit spent")
    discount_per_points: Money = Field(default=100.0, description="Points needed for one currency unit of discount")
    is_active: bool = Field(default=True, description="Whether the program is running")
    store_id: Optional[Id] = Field(default=None, description="Owning store")


class LoyaltyUser(ApiModel):
    """Points balance of a program member."""
    id: Optional[Id] = Field(default=None, description="Member identifier")
    name: Optional[str] = Field(default=None, description="Member name")
    phone: Optional[str] = Field(default=None, description="Member phone")
    total_points: Count = Field(default=0, description="Points ever earned")
    redeemed_points: Count = Field(default=0, description="Points redeemed")
    available_points: Count = Field(default=0, description="Points available")
    level: Optional[str] = Field(default=None, description="Loyalty level")
    total_orders: Count = Field(default=0, description="Orders placed")
