from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

OrderBucket = Literal["pending", "cancelled", "completed", "all"]
PaymentFamily = Literal["mercadopago", "transferencia", "efectivo"]
DateRange = Literal["today", "week", "month", "all"]
OrderSort = Literal["newest", "oldest", "amount_high", "amount_low"]


class OrderFilters(BaseModel):
    """Filters for the orders board."""
    bucket: OrderBucket = Field(default="pending", description="Tab: pending, cancelled, completed or all")
    fulfillment: Optional[Literal["delivery", "pickup"]] = Field(default=None, description="Delivery or pickup only")
    payment_method: Optional[PaymentFamily] = Field(default=None, description="Payment method family")
    date_range: DateRange = Field(default="all", description="today, last 7 days, last 30 days or all")
    search: Optional[str] = Field(default=None, description="Matches order number, customer name or phone")
    sort: OrderSort = Field(default="newest", description="Sort order")


class CustomerLoyaltyFilters(BaseModel):
    """Filters for the customer loyalty table."""
    tier: Optional[str] = Field(default=None, description="Tier filter")
    sort_by: Literal["total_spent", "total_orders", "points"] = Field(default="total_spent", description="Sort key (descending)")


class ReviewFilters(BaseModel):
    """Filters for the reviews list."""
    status: Literal["all", "pending", "responded"] = Field(default="all", description="Response status")
