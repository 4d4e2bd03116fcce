from __future__ import annotations

import random
import string
from collections import Counter
from datetime import datetime, tzinfo
from typing import Iterable, Optional

from elbuenmenu_admin.data.models import (
    EXPENSE_CATEGORIES,
    Coupon,
    Expense,
    InventoryItem,
    Order,
    Promotion,
    RealtimeAnalytics,
    Review,
    utc_now,
)
from elbuenmenu_admin.data.models.stats import (
    CouponStats,
    ExpenseSummary,
    InventoryStats,
    PromotionStats,
    RealtimeMetrics,
    ReviewStats,
)


# ---------- expenses ----------

def summarize_expenses(expenses: Iterable[Expense]) -> ExpenseSummary:
    """Totals per category and overall. Every known category is present, zero when unused."""
    by_category = {category: 0.0 for category in EXPENSE_CATEGORIES}
    total = 0.0
    count = 0
    for expense in expenses:
        by_category[expense.category] = by_category.get(expense.category, 0.0) + expense.amount
        total += expense.amount
        count += 1
    return ExpenseSummary(total=total, by_category=by_category, count=count)


def month_key(value: datetime) -> str:
    return value.strftime("%Y-%m")


# ---------- coupons ----------

def coupon_status(coupon: Coupon, now: Optional[datetime] = None) -> str:
    """expired > exhausted > inactive > active; expiry wins even for active coupons."""
    now = now or utc_now()
    if coupon.valid_until is not None and coupon.valid_until < now:
        return "expired"
    if coupon.usage_limit and coupon.usage_count >= coupon.usage_limit:
        return "exhausted"
    return "active" if coupon.is_active else "inactive"


def coupon_stats(coupons: Iterable[Coupon], now: Optional[datetime] = None) -> CouponStats:
    now = now or utc_now()
    stats = CouponStats()
    for coupon in coupons:
        status = coupon_status(coupon, now)
        if status == "active":
            stats.active += 1
        elif status == "expired":
            stats.expired += 1
        stats.total_uses += coupon.usage_count
    return stats


def generate_code(length: int = 8, rng: Optional[random.Random] = None) -> str:
    """Random uppercase alphanumeric code for coupons and promo codes."""
    rng = rng or random.SystemRandom()
    alphabet = string.ascii_uppercase + string.digits
    return "".join(rng.choice(alphabet) for _ in range(length))


def describe_discount(coupon: Coupon) -> str:
    if coupon.discount_type == "percentage":
        return f"{coupon.discount_value:g}% OFF"
    return f"${coupon.discount_value:,.0f} OFF".replace(",", ".")


# ---------- promotions ----------

def promotion_stats(promotions: Iterable[Promotion]) -> PromotionStats:
    stats = PromotionStats()
    for promotion in promotions:
        if promotion.is_active:
            stats.active += 1
        if promotion.type == "discount":
            stats.discount += 1
        elif promotion.type == "combo":
            stats.combo += 1
    return stats


# ---------- reviews ----------

def review_stats(reviews: Iterable[Review]) -> ReviewStats:
    reviews = list(reviews)
    histogram = {stars: 0 for stars in (5, 4, 3, 2, 1)}
    for review in reviews:
        histogram[review.rating] += 1
    average = round(sum(r.rating for r in reviews) / len(reviews), 1) if reviews else 0.0
    return ReviewStats(
        total=len(reviews),
        average=average,
        pending=sum(1 for r in reviews if not r.responded),
        histogram=histogram,
    )


def filter_reviews(reviews: Iterable[Review], status: str) -> list[Review]:
    if status == "pending":
        return [r for r in reviews if not r.responded]
    if status == "responded":
        return [r for r in reviews if r.responded]
    return list(reviews)


# ---------- inventory ----------

def is_low_stock(item: InventoryItem) -> bool:
    return 0 < item.current_stock <= item.min_stock


def is_out_of_stock(item: InventoryItem) -> bool:
    return item.current_stock <= 0


def inventory_stats(items: Iterable[InventoryItem]) -> InventoryStats:
    stats = InventoryStats()
    for item in items:
        stats.total_items += 1
        if is_out_of_stock(item):
            stats.out_of_stock += 1
        elif is_low_stock(item):
            stats.low_stock += 1
        stats.total_value += item.current_stock * item.cost_per_unit
    return stats


def stock_fill_ratio(item: InventoryItem) -> float:
    """Share of capacity in use, clamped to [0, 1]."""
    if item.max_stock <= 0:
        return 0.0
    return max(0.0, min(1.0, item.current_stock / item.max_stock))


# ---------- real time ----------

def realtime_metrics(
    orders: Iterable[Order],
    analytics: Optional[RealtimeAnalytics],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> RealtimeMetrics:
    """Kitchen queue counts plus today's sales.

    When the analytics endpoint doesn't report today's order count, it is
    counted from the orders created today.
    """
    orders = list(orders)
    now = now or utc_now()
    counts = Counter(order.status for order in orders)

    today_orders = analytics.today_orders if analytics is not None else None
    if today_orders is None:
        today = now.astimezone(tz).date() if tz else now.date()
        today_orders = sum(
            1
            for order in orders
            if order.created_at is not None
            and (order.created_at.astimezone(tz).date() if tz else order.created_at.date()) == today
        )

    today_sales = analytics.today_sales if analytics is not None else 0.0
    return RealtimeMetrics(
        pending=counts["pending"],
        preparing=counts["preparing"],
        ready=counts["ready"],
        today_sales=today_sales,
        today_orders=today_orders,
        average_ticket=round(today_sales / today_orders, 2) if today_orders else 0.0,
    )
