from __future__ import annotations

from typing import Iterable, Optional

from elbuenmenu_admin.data.models import (
    CUSTOMER_TIERS,
    CustomerLoyalty,
    CustomerLoyaltyFilters,
    LoyaltyProgram,
    LoyaltyUser,
)
from elbuenmenu_admin.data.models.stats import LoyaltyStats

# (tier, minimum orders, minimum spend, discount %) checked top-down; either threshold qualifies
TIER_RULES: tuple[tuple[str, int, float, float], ...] = (
    ("vip", 20, 50000.0, 15.0),
    ("gold", 15, 35000.0, 10.0),
    ("silver", 10, 25000.0, 5.0),
    ("bronze", 5, 15000.0, 3.0),
)


def tier_for(total_orders: int, total_spent: float) -> tuple[str, float]:
    """(tier, discount percentage) earned by a customer's order history."""
    for tier, min_orders, min_spent, discount in TIER_RULES:
        if total_orders >= min_orders or total_spent >= min_spent:
            return tier, discount
    return "regular", 0.0


def history_points(total_orders: int, total_spent: float) -> int:
    """10 points per order plus one per $100 spent."""
    return total_orders * 10 + int(total_spent // 100)


def tier_stats(customers: Iterable[CustomerLoyalty]) -> dict[str, int]:
    """Customers per tier, counting each customer once; every tier is present."""
    counts = {tier: 0 for tier in CUSTOMER_TIERS}
    seen: set[str] = set()
    for customer in customers:
        if customer.customer_id in seen:
            continue
        seen.add(customer.customer_id)
        counts[customer.tier] = counts.get(customer.tier, 0) + 1
    return counts


def filter_customers(customers: Iterable[CustomerLoyalty], filters: CustomerLoyaltyFilters) -> list[CustomerLoyalty]:
    selected = [c for c in customers if not filters.tier or c.tier == filters.tier]
    return sorted(selected, key=lambda c: getattr(c, filters.sort_by), reverse=True)


# ---------- points program ----------

def points_for_order(program: LoyaltyProgram, order_total: float) -> int:
    if not program.is_active:
        return 0
    return program.points_per_order + int(order_total * program.points_per_currency)


def discount_for_points(program: LoyaltyProgram, points: int) -> float:
    """Currency discount a points balance is worth."""
    if not program.is_active or program.discount_per_points <= 0:
        return 0.0
    return float(points // program.discount_per_points)


def loyalty_stats(users: Iterable[LoyaltyUser]) -> LoyaltyStats:
    stats = LoyaltyStats()
    for user in users:
        stats.members += 1
        stats.total_points += user.total_points
        stats.redeemed_points += user.redeemed_points
        if user.available_points > 0:
            stats.active_members += 1
    return stats


def top_members(users: Iterable[LoyaltyUser], limit: Optional[int] = 5) -> list[LoyaltyUser]:
    ranked = sorted(users, key=lambda u: u.total_points, reverse=True)
    return ranked[:limit] if limit else ranked
