import random
import string
from datetime import date, datetime, timedelta, timezone

import pytest

from elbuenmenu_admin.data.models import Coupon, Expense, InventoryItem, Order, Promotion, RealtimeAnalytics, Review
from elbuenmenu_admin.services.metrics import (
    coupon_stats,
    coupon_status,
    describe_discount,
    filter_reviews,
    generate_code,
    inventory_stats,
    is_low_stock,
    is_out_of_stock,
    promotion_stats,
    realtime_metrics,
    review_stats,
    stock_fill_ratio,
    summarize_expenses,
)

NOW = datetime(2024, 5, 20, 15, 0, tzinfo=timezone.utc)


def test_summarize_expenses_by_category():
    expenses = [
        Expense(date=date(2024, 5, 1), category="proveedores", description="Carne", amount=100),
        Expense(date=date(2024, 5, 2), category="proveedores", description="Pan", amount=50),
        Expense(date=date(2024, 5, 3), category="combustible", description="Nafta", amount=30),
    ]
    summary = summarize_expenses(expenses)
    assert summary.by_category["proveedores"] == 150
    assert summary.by_category["combustible"] == 30
    assert summary.by_category["otros"] == 0
    assert summary.total == 180
    assert summary.count == 3


def test_summarize_no_expenses():
    summary = summarize_expenses([])
    assert summary.total == 0
    assert set(summary.by_category) == {"proveedores", "combustible", "mantenimiento", "herramientas", "imprevistos", "otros"}


@pytest.mark.parametrize(
    "overrides,status",
    [
        ({}, "active"),
        ({"is_active": False}, "inactive"),
        ({"valid_until": NOW - timedelta(days=1)}, "expired"),
        ({"valid_until": NOW - timedelta(days=1), "is_active": True, "usage_limit": 5, "usage_count": 5}, "expired"),
        ({"usage_limit": 5, "usage_count": 5}, "exhausted"),
        ({"usage_limit": 5, "usage_count": 7, "is_active": False}, "exhausted"),
        ({"usage_limit": None, "usage_count": 500}, "active"),
        ({"valid_until": NOW + timedelta(days=1)}, "active"),
    ],
)
def test_coupon_status(overrides, status):
    coupon = Coupon(code="X", discount_value=10, **overrides)
    assert coupon_status(coupon, NOW) == status


def test_coupon_stats():
    coupons = [
        Coupon(code="A", discount_value=10, usage_count=3),
        Coupon(code="B", discount_value=10, valid_until=NOW - timedelta(days=2), usage_count=4),
        Coupon(code="C", discount_value=10, is_active=False),
    ]
    stats = coupon_stats(coupons, NOW)
    assert (stats.active, stats.expired, stats.total_uses) == (1, 1, 7)


def test_generate_code():
    code = generate_code(rng=random.Random(3))
    assert len(code) == 8
    assert set(code) <= set(string.ascii_uppercase + string.digits)


def test_describe_discount():
    assert describe_discount(Coupon(code="A", discount_type="percentage", discount_value=15)) == "15% OFF"
    assert describe_discount(Coupon(code="B", discount_type="fixed", discount_value=1500)) == "$1.500 OFF"


def test_promotion_stats():
    promotions = [
        Promotion(title="a", type="discount"),
        Promotion(title="b", type="combo", is_active=False),
        Promotion(title="c", type="2x1"),
    ]
    stats = promotion_stats(promotions)
    assert (stats.active, stats.discount, stats.combo) == (2, 1, 1)


def test_review_stats_and_filter():
    reviews = [
        Review(id="1", rating=5, response="¡Gracias!"),
        Review(id="2", rating=4),
        Review(id="3", rating=4),
    ]
    stats = review_stats(reviews)
    assert stats.total == 3
    assert stats.average == 4.3
    assert stats.pending == 2
    assert stats.histogram == {5: 1, 4: 2, 3: 0, 2: 0, 1: 0}
    assert [r.id for r in filter_reviews(reviews, "pending")] == ["2", "3"]
    assert [r.id for r in filter_reviews(reviews, "responded")] == ["1"]
    assert review_stats([]).average == 0.0


def test_inventory_levels():
    out = InventoryItem(name="Pan", current_stock=0, min_stock=10, max_stock=50, cost_per_unit=100)
    low = InventoryItem(name="Queso", current_stock=5, min_stock=10, max_stock=50, cost_per_unit=1000)
    ok = InventoryItem(name="Papas", current_stock=60, min_stock=10, max_stock=50, cost_per_unit=10)
    assert is_out_of_stock(out) and not is_low_stock(out)
    assert is_low_stock(low) and not is_out_of_stock(low)
    stats = inventory_stats([out, low, ok])
    assert (stats.total_items, stats.low_stock, stats.out_of_stock) == (3, 1, 1)
    assert stats.total_value == 5600
    assert stock_fill_ratio(ok) == 1.0
    assert stock_fill_ratio(low) == 0.1
    assert stock_fill_ratio(InventoryItem(name="x")) == 0.0


def test_realtime_metrics_counts_queue_and_uses_analytics():
    orders = [Order(id="1", status="pending"), Order(id="2", status="preparing"), Order(id="3", status="ready")]
    metrics = realtime_metrics(orders, RealtimeAnalytics(today_sales=30000, today_orders=4), now=NOW, tz=timezone.utc)
    assert (metrics.pending, metrics.preparing, metrics.ready) == (1, 1, 1)
    assert metrics.today_orders == 4
    assert metrics.average_ticket == 7500


def test_realtime_metrics_counts_todays_orders_when_missing():
    orders = [
        Order(id="1", created_at=NOW - timedelta(hours=2)),
        Order(id="2", created_at=NOW - timedelta(days=1)),
        Order(id="3"),
    ]
    metrics = realtime_metrics(orders, RealtimeAnalytics(today_sales=1000), now=NOW, tz=timezone.utc)
    assert metrics.today_orders == 1
    assert metrics.average_ticket == 1000


def test_realtime_metrics_without_analytics():
    metrics = realtime_metrics([], None, now=NOW)
    assert metrics.today_sales == 0
    assert metrics.average_ticket == 0
