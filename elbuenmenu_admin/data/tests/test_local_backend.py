import json
from datetime import datetime, timedelta, timezone

import pytest

from elbuenmenu_admin.api import ApiResponseError
from elbuenmenu_admin.config import set_config_for_test
from elbuenmenu_admin.data.backends.local_backend import LocalDataAccess, compute_sales_stats
from elbuenmenu_admin.data.models import Coupon, CustomerLoyaltyUpdate, Expense, Order, StoreSettings
from elbuenmenu_admin.data.resources import COUPONS, EXPENSES, TIME_CLOCKS
from elbuenmenu_admin.data.util import get_data_access

NOW = datetime(2024, 5, 20, 15, 30, tzinfo=timezone.utc)


def _write(directory, name, payload):
    (directory / f"{name}.json").write_text(json.dumps(payload), encoding="utf-8")


@pytest.fixture
def data_dir(tmp_path):
    directory = tmp_path / "local"
    directory.mkdir()
    _write(directory, "orders", [
        {"id": "o1", "order_number": "EBM-1", "customer_phone": "111", "total": 30000, "delivery_fee": 2000,
         "status": "delivered", "payment_method": "efectivo", "created_at": "2024-05-19T12:00:00Z",
         "items": [{"product_name": "Pizza", "quantity": 2, "subtotal": 28000}]},
        {"id": "o2", "order_number": "EBM-2", "customer_phone": "111", "total": 10000, "delivery_fee": 0,
         "status": "pending", "payment_method": "mercadopago", "created_at": "2024-05-20T14:10:00Z"},
        {"id": "o3", "order_number": "EBM-3", "customer_phone": "222", "total": 5000, "status": "cancelled",
         "created_at": "2024-05-20T09:00:00Z"},
    ])
    _write(directory, "expenses", [
        {"id": "x1", "date": "2024-05-02", "category": "proveedores", "description": "Pan", "amount": 100},
        {"id": "x2", "date": "2024-04-28", "category": "otros", "description": "Bolsas", "amount": 50},
    ])
    _write(directory, "loyalty_customers", [
        {"customerId": "c1", "customerPhone": "111", "tier": "regular"},
        {"customerId": "c2", "customerPhone": "222", "tier": "silver"},
    ])
    _write(directory, "time_clocks", [])
    return directory


def test_missing_directory_raises(tmp_path):
    with pytest.raises(FileNotFoundError, match="Data directory not found"):
        LocalDataAccess(tmp_path / "nope")


def test_missing_orders_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError, match="orders.json"):
        LocalDataAccess(tmp_path)


def test_get_orders_newest_first_and_filtered(data_dir):
    data = LocalDataAccess(data_dir)
    assert [o.id for o in data.get_orders()] == ["o2", "o3", "o1"]
    assert [o.id for o in data.get_orders(status="pending")] == ["o2"]
    assert len(data.get_orders(limit=1)) == 1


def test_expenses_filtered_by_month(data_dir):
    data = LocalDataAccess(data_dir)
    expenses = data.list_records(EXPENSES, params={"month": "2024-05"})
    assert [e.id for e in expenses] == ["x1"]


def test_create_update_delete_persist_to_disk(data_dir):
    data = LocalDataAccess(data_dir)
    data.create_record(COUPONS, Coupon(code="HOLA", discount_value=10))
    saved = json.loads((data_dir / "coupons.json").read_text(encoding="utf-8"))
    assert saved[0]["code"] == "HOLA"
    coupon_id = saved[0]["id"]

    data.update_record(COUPONS, coupon_id, Coupon(code="CHAU", discount_value=5))
    assert LocalDataAccess(data_dir).list_records(COUPONS)[0].code == "CHAU"

    data.delete_record(COUPONS, coupon_id)
    assert LocalDataAccess(data_dir).list_records(COUPONS) == []


def test_update_missing_record_is_404(data_dir):
    data = LocalDataAccess(data_dir)
    with pytest.raises(ApiResponseError) as excinfo:
        data.update_record(EXPENSES, "missing", Expense(date="2024-05-01", description="x", amount=1))
    assert excinfo.value.status == 404


def test_reject_order_cancels_with_reason(data_dir):
    data = LocalDataAccess(data_dir)
    data.reject_order("o2", "Sin stock")
    row = json.loads((data_dir / "orders.json").read_text(encoding="utf-8"))[1]
    assert row["status"] == "cancelled"
    assert row["rejection_reason"] == "Sin stock"


def test_clock_in_then_out(data_dir):
    data = LocalDataAccess(data_dir)
    data.clock_in("e1")
    clocks = data.list_records(TIME_CLOCKS)
    assert clocks[0].on_shift
    data.clock_out("e1")
    assert not data.list_records(TIME_CLOCKS)[0].on_shift
    with pytest.raises(ApiResponseError):
        data.clock_out("e1")


def test_recalculate_loyalty_ignores_cancelled_orders(data_dir):
    data = LocalDataAccess(data_dir)
    data.recalculate_loyalty()
    customers = {c.customer_id: c for c in data.list_loyalty_customers()}
    assert customers["c1"].total_orders == 2
    assert customers["c1"].total_spent == 40000
    assert customers["c1"].tier == "gold"
    assert customers["c1"].discount_percentage == 10
    assert customers["c2"].total_orders == 0
    assert customers["c2"].tier == "regular"


def test_update_loyalty_customer(data_dir):
    data = LocalDataAccess(data_dir)
    data.update_loyalty_customer("c1", CustomerLoyaltyUpdate(tier="vip", discount_percentage=15, priority=True))
    customer = data.list_loyalty_customers()[0]
    assert customer.tier == "vip"
    assert customer.discount_percentage == 15
    assert customer.priority


def test_store_settings_default_and_saved_per_store(data_dir):
    data = LocalDataAccess(data_dir)
    assert data.get_store_settings("s1").commercial_name == ""
    data.save_store_settings("s1", StoreSettings(commercial_name="El Buen Menú"))
    reloaded = LocalDataAccess(data_dir)
    assert reloaded.get_store_settings("s1").commercial_name == "El Buen Menú"
    assert reloaded.get_store_settings("s2").commercial_name == ""


def test_compute_sales_stats_excludes_cancelled():
    orders = [
        Order(id="1", total=1000, delivery_fee=200, payment_method="efectivo", created_at=NOW - timedelta(hours=1)),
        Order(id="2", total=3000, payment_method="mercadopago", created_at=NOW - timedelta(days=40)),
        Order(id="3", total=9999, status="cancelled", created_at=NOW),
    ]
    stats = compute_sales_stats(orders, NOW)
    assert stats["total"]["revenue"] == 4000
    assert stats["total"]["orders"] == 2
    assert stats["currentWeek"]["orders"] == 1
    assert stats["delivery"] == {"deliveryOrders": 1, "pickupOrders": 1, "deliveryRevenue": 1000, "pickupRevenue": 3000}
    assert len(stats["last30Days"]) == 30
    assert len(stats["last24Hours"]) == 24
    assert sum(h["orders"] for h in stats["last24Hours"]) == 1


def test_get_data_access_factory(data_dir):
    set_config_for_test(data_dir=str(data_dir))
    assert isinstance(get_data_access("local"), LocalDataAccess)
    with pytest.raises(ValueError):
        get_data_access("ftp")
