import random
from datetime import datetime, timedelta, timezone

import pytest

from elbuenmenu_admin.api import ApiConnectionError, InvalidTransitionError, ValidationError
from elbuenmenu_admin.data.models import Order, OrderFilters, Transfer
from elbuenmenu_admin.services.orders import (
    TRANSITIONS,
    OrderService,
    approval_target,
    can_notify_pickup,
    can_transition,
    detect_new_orders,
    filter_orders,
    needs_review,
    order_stats,
    payment_family,
    pickup_ready_message,
    sort_orders,
    split_transfers,
)

NOW = datetime(2024, 5, 20, 15, 0, tzinfo=timezone.utc)


def make_order(**overrides):
    values = {
        "id": "o1",
        "order_number": "EBM-1",
        "customer_name": "Juan Pérez",
        "customer_phone": "1145678901",
        "payment_method": "efectivo",
        "total": 10000,
        "delivery_fee": 1500,
        "status": "pending",
        "items": [{"product_name": "Pizza", "quantity": 1, "subtotal": 8500}],
        "created_at": NOW,
    }
    values.update(overrides)
    return Order.model_validate(values)


def pending_transfer(order_id="o1", status="pending"):
    return Transfer(id=f"t-{order_id}", order_id=order_id, status=status)


# ---------- classification and transitions ----------

@pytest.mark.parametrize("fee,kind", [(0, "pickup"), (None, "pickup"), (1, "delivery"), (2500, "delivery")])
def test_delivery_classification_is_exclusive(fee, kind):
    order = make_order(delivery_fee=fee)
    assert order.fulfillment_type == kind
    assert order.is_delivery != order.is_pickup


def test_terminal_statuses_have_no_transitions():
    assert not TRANSITIONS["delivered"]
    assert not TRANSITIONS["cancelled"]
    assert can_transition("ready", "assigned")
    assert not can_transition("delivered", "pending")
    assert not can_transition("unknown", "ready")


def test_approval_target_by_fulfillment():
    assert approval_target(make_order(delivery_fee=0)) == "preparing"
    assert approval_target(make_order(delivery_fee=2000)) == "ready"


@pytest.mark.parametrize(
    "method,family",
    [
        ("MercadoPago", "mercadopago"),
        ("mercado pago", "mercadopago"),
        ("Transferencia bancaria", "transferencia"),
        ("efectivo", "efectivo"),
        ("cash", "efectivo"),
        ("Pendiente de selección", None),
        ("null", None),
        (None, None),
        ("bitcoin", None),
    ],
)
def test_payment_family(method, family):
    assert payment_family(method) == family


# ---------- pending bucket ----------

def test_cash_pickup_needs_pending_transfer():
    order = make_order(delivery_fee=0, payment_method="efectivo")
    assert needs_review(order, {"o1"})
    assert not needs_review(order, set())


def test_cash_delivery_is_reviewed_without_transfer():
    assert needs_review(make_order(delivery_fee=2000, payment_method="efectivo"), set())


def test_transfer_order_needs_pending_transfer():
    order = make_order(payment_method="transferencia")
    assert not needs_review(order, set())
    assert needs_review(order, {"o1"})


@pytest.mark.parametrize("payment_status,expected", [("approved", True), ("completed", True), ("pending", False), (None, False)])
def test_mercadopago_needs_approved_payment(payment_status, expected):
    order = make_order(payment_method="mercadopago", payment_status=payment_status)
    assert needs_review(order, set()) is expected


@pytest.mark.parametrize(
    "overrides",
    [{"status": "preparing"}, {"customer_phone": None}, {"payment_method": "Pendiente de selección"}],
)
def test_excluded_from_pending(overrides):
    assert not needs_review(make_order(**overrides), {"o1"})


def test_filter_orders_buckets_and_filters():
    orders = [
        make_order(id="a", order_number="A-1", delivery_fee=2000, total=5000, created_at=NOW - timedelta(hours=1)),
        make_order(id="b", order_number="B-2", delivery_fee=0, payment_method="transferencia", total=9000,
                   created_at=NOW - timedelta(days=3)),
        make_order(id="c", order_number="C-3", status="cancelled", created_at=NOW - timedelta(days=10)),
        make_order(id="d", order_number="D-4", status="delivered", customer_name="María", created_at=NOW - timedelta(days=40)),
    ]
    transfers = [pending_transfer("b")]

    def ids(**filters):
        return [o.id for o in filter_orders(orders, transfers, OrderFilters(**filters), now=NOW, tz=timezone.utc)]

    assert ids(bucket="pending") == ["a", "b"]
    assert ids(bucket="cancelled") == ["c"]
    assert ids(bucket="completed") == ["d"]
    assert ids(bucket="all", date_range="week") == ["a", "b"]
    assert ids(bucket="all", date_range="today") == ["a"]
    assert ids(bucket="all", date_range="month") == ["a", "b", "c"]
    assert ids(bucket="all", fulfillment="pickup") == ["b"]
    assert ids(bucket="all", payment_method="transferencia") == ["b"]
    assert ids(bucket="all", search="maría") == ["d"]
    assert ids(bucket="all", search="c-3") == ["c"]
    assert ids(bucket="pending", sort="amount_high") == ["b", "a"]
    assert ids(bucket="all", sort="oldest") == ["d", "c", "b", "a"]


def test_sort_orders_puts_undated_last():
    orders = [make_order(id="x", created_at=None), make_order(id="y"), make_order(id="z", created_at=NOW - timedelta(hours=1))]
    assert [o.id for o in sort_orders(orders, "newest")] == ["y", "z", "x"]
    assert [o.id for o in sort_orders(orders, "oldest")] == ["z", "y", "x"]


def test_order_stats():
    orders = [
        make_order(id="a", delivery_fee=2000),
        make_order(id="b", delivery_fee=0),
        make_order(id="c", status="cancelled"),
        make_order(id="d", status="delivered"),
    ]
    transfers = [pending_transfer("b"), pending_transfer("z", status="approved")]
    stats = order_stats(orders, transfers)
    assert stats.pending == 2
    assert stats.cancelled == 1
    assert stats.completed == 1
    assert stats.pending_delivery == 1
    assert stats.pending_pickup == 1
    assert stats.pending_transfers == 1


# ---------- new order detection ----------

def test_first_poll_reports_nothing():
    assert detect_new_orders(None, [make_order()]).total == 0


def test_detect_new_orders_splits_by_fulfillment():
    orders = [
        make_order(id="old"),
        make_order(id="d1", delivery_fee=2000),
        make_order(id="p1", delivery_fee=0),
        make_order(id="incomplete", customer_phone="123"),
        make_order(id="no-pay", payment_method=None),
        make_order(id="preparing", status="preparing"),
    ]
    found = detect_new_orders({"old"}, orders)
    assert [o.id for o in found.delivery] == ["d1"]
    assert [o.id for o in found.pickup] == ["p1"]
    assert found.total == 2


# ---------- actions ----------

def test_approve_pickup_goes_to_preparing_with_code(fake_data):
    data = fake_data()
    service = OrderService(data, rng=random.Random(1))
    changes = service.approve(make_order(delivery_fee=0))
    assert changes["status"] == "preparing"
    assert len(changes["delivery_code"]) == 4
    assert 1000 <= int(changes["delivery_code"]) <= 9999
    assert data.called("update_order") == [(("o1", changes), {})]


def test_approve_delivery_goes_to_ready(fake_data):
    data = fake_data()
    changes = OrderService(data).approve(make_order(delivery_fee=2000))
    assert changes == {"status": "ready"}


def test_approve_keeps_existing_pickup_code(fake_data):
    changes = OrderService(fake_data()).approve(make_order(delivery_fee=0, delivery_code="4321"))
    assert "delivery_code" not in changes


def test_approve_rejects_orders_past_review(fake_data):
    data = fake_data()
    with pytest.raises(InvalidTransitionError):
        OrderService(data).approve(make_order(status="ready"))
    assert data.calls == []


def test_reject_requires_reason(fake_data):
    data = fake_data()
    service = OrderService(data)
    with pytest.raises(ValidationError) as excinfo:
        service.reject(make_order(), "   ")
    assert excinfo.value.field == "reason"
    service.reject(make_order(), " Sin stock ")
    assert data.called("reject_order") == [(("o1", "Sin stock"), {})]


def test_change_status_checks_transitions(fake_data):
    data = fake_data()
    service = OrderService(data)
    service.change_status(make_order(status="ready"), "assigned")
    with pytest.raises(InvalidTransitionError) as excinfo:
        service.change_status(make_order(status="delivered"), "pending")
    assert excinfo.value.current == "delivered"
    assert len(data.called("update_order")) == 1


class RecordingBot:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    def notify_order(self, phone, order_number, message):
        if self.error:
            raise self.error
        self.sent.append((phone, order_number, message))


def test_notify_pickup_sends_message_then_marks_ready(fake_data):
    data = fake_data()
    bot = RecordingBot()
    order = make_order(delivery_fee=0, status="preparing")
    assert can_notify_pickup(order)
    OrderService(data, bot=bot).notify_pickup(order)
    phone, number, message = bot.sent[0]
    assert (phone, number) == ("1145678901", "EBM-1")
    assert "Av. RIVADAVIA 2911" in message
    assert data.called("update_order") == [(("o1", {"status": "ready"}), {})]


def test_notify_pickup_failure_leaves_status(fake_data):
    data = fake_data()
    bot = RecordingBot(error=ApiConnectionError("down"))
    with pytest.raises(ApiConnectionError):
        OrderService(data, bot=bot).notify_pickup(make_order(delivery_fee=0, status="preparing"))
    assert data.calls == []


def test_notify_pickup_only_for_pickup_orders(fake_data):
    with pytest.raises(InvalidTransitionError):
        OrderService(fake_data(), bot=RecordingBot()).notify_pickup(make_order(delivery_fee=2000, status="preparing"))


def test_pickup_message_includes_order_and_address():
    message = pickup_ready_message(make_order(), address="Calle Falsa 123")
    assert "📦 Pedido: EBM-1" in message
    assert "📍 Calle Falsa 123" in message
    assert "🆔 Código: EBM-1" in message


def test_approve_transfer_releases_order(fake_data):
    data = fake_data()
    OrderService(data).approve_transfer(pending_transfer("o9"), now=NOW)
    assert data.called("update_transfer") == [(("t-o9", {"status": "approved", "verified_at": NOW.isoformat()}), {})]
    assert data.called("update_order") == [(("o9", {"payment_status": "completed", "status": "pending"}), {})]


def test_reject_transfer_does_not_touch_order(fake_data):
    data = fake_data()
    OrderService(data).reject_transfer(pending_transfer("o9"), now=NOW)
    assert data.called("update_transfer")[0][0][1]["status"] == "rejected"
    assert data.called("update_order") == []


def test_split_transfers():
    pending, processed = split_transfers([pending_transfer("a"), pending_transfer("b", status="rejected")])
    assert [t.order_id for t in pending] == ["a"]
    assert [t.order_id for t in processed] == ["b"]


def test_nothing_announced_until_a_poll_saw_orders():
    assert detect_new_orders(set(), [make_order(id="n1")]).total == 0


def test_other_payment_methods_are_announced_and_counted():
    card = make_order(id="card", payment_method="Tarjeta de débito", delivery_fee=2000)
    found = detect_new_orders({"old"}, [card])
    assert [o.id for o in found.delivery] == ["card"]
    stats = order_stats([card, make_order(id="undecided", payment_method="sin definir")], [])
    assert stats.pending_delivery == 1
    assert stats.pending == 0
