import pytest

from elbuenmenu_admin.data.models import CustomerLoyalty, CustomerLoyaltyFilters, LoyaltyProgram, LoyaltyUser
from elbuenmenu_admin.services.loyalty import (
    discount_for_points,
    filter_customers,
    history_points,
    loyalty_stats,
    points_for_order,
    tier_for,
    tier_stats,
    top_members,
)


@pytest.mark.parametrize(
    "orders,spent,tier,discount",
    [
        (0, 0, "regular", 0.0),
        (5, 0, "bronze", 3.0),
        (0, 25000, "silver", 5.0),
        (15, 1000, "gold", 10.0),
        (1, 50000, "vip", 15.0),
        (4, 14999, "regular", 0.0),
    ],
)
def test_tier_for(orders, spent, tier, discount):
    assert tier_for(orders, spent) == (tier, discount)


def test_history_points():
    assert history_points(3, 1250) == 42


def test_tier_stats_counts_each_customer_once():
    customers = [
        CustomerLoyalty(customer_id="1", tier="gold"),
        CustomerLoyalty(customer_id="1", tier="gold"),
        CustomerLoyalty(customer_id="2", tier="vip"),
        CustomerLoyalty(customer_id="3"),
    ]
    counts = tier_stats(customers)
    assert counts == {"regular": 1, "bronze": 0, "silver": 0, "gold": 1, "vip": 1}
    assert all(isinstance(value, int) for value in counts.values())


def test_tier_stats_empty():
    assert set(tier_stats([]).values()) == {0}


def test_filter_customers_by_tier_and_sort():
    customers = [
        CustomerLoyalty(customer_id="1", tier="gold", total_spent=100, total_orders=9),
        CustomerLoyalty(customer_id="2", tier="gold", total_spent=300, total_orders=1),
        CustomerLoyalty(customer_id="3", tier="vip", total_spent=900, total_orders=2),
    ]
    by_spend = filter_customers(customers, CustomerLoyaltyFilters(tier="gold"))
    assert [c.customer_id for c in by_spend] == ["2", "1"]
    by_orders = filter_customers(customers, CustomerLoyaltyFilters(sort_by="total_orders"))
    assert [c.customer_id for c in by_orders] == ["1", "3", "2"]


def test_points_program():
    program = LoyaltyProgram(points_per_order=10, points_per_currency=0.01, discount_per_points=100)
    assert points_for_order(program, 10000) == 110
    assert discount_for_points(program, 1050) == 10.0
    inactive = program.model_copy(update={"is_active": False})
    assert points_for_order(inactive, 10000) == 0
    assert discount_for_points(inactive, 1050) == 0.0


def test_loyalty_stats_and_top_members():
    users = [
        LoyaltyUser(id="a", total_points=100, redeemed_points=20, available_points=80),
        LoyaltyUser(id="b", total_points=300, redeemed_points=300, available_points=0),
        LoyaltyUser(id="c", total_points=200, available_points=200),
    ]
    stats = loyalty_stats(users)
    assert (stats.members, stats.total_points, stats.redeemed_points, stats.active_members) == (3, 600, 320, 2)
    assert [u.id for u in top_members(users, limit=2)] == ["b", "c"]
    assert len(top_members(users, limit=None)) == 3
