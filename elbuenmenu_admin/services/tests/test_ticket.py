import json
from datetime import datetime, timezone

import pytest

from elbuenmenu_admin.config import set_config_for_test
from elbuenmenu_admin.data.models import Order
from elbuenmenu_admin.services.ticket import render_ticket_html, visible_notes


@pytest.fixture
def site_config():
    set_config_for_test(public_site="pedidos.example.com")


def make_order(**overrides):
    values = {
        "id": "o1",
        "order_number": "EBM-77",
        "customer_name": "Ana <b>Gómez</b>",
        "customer_phone": "1145678901",
        "payment_method": "efectivo",
        "total": 12000,
        "delivery_fee": 0,
        "items": [
            {
                "product_name": "Hamburguesa",
                "quantity": 2,
                "subtotal": 12000,
                "selected_options": [{"name": "Cheddar", "price": 500}],
            }
        ],
        "created_at": datetime(2024, 5, 20, 15, 30, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return Order.model_validate(values)


@pytest.mark.parametrize(
    "notes,expected",
    [
        (None, ""),
        ("  sin cebolla  ", "sin cebolla"),
        (json.dumps({"preference_id": "123-abc"}), ""),
        (json.dumps({"mpPreferenceId": "xyz", "timbre": "no anda"}), ""),
        (json.dumps({"timbre": "no anda", "preferenceUrl": "http://mp"}), "timbre: no anda"),
        (json.dumps({"piso": 3, "depto": "B"}), "piso: 3, depto: B"),
    ],
)
def test_visible_notes(notes, expected):
    assert visible_notes(notes) == expected


def test_pickup_ticket_shows_code_and_escapes(site_config):
    html = render_ticket_html(make_order(delivery_code="4821"), tz=timezone.utc)
    assert "🔐 CÓDIGO DE RETIRO" in html
    assert "4821" in html
    assert "Ana &lt;b&gt;Gómez&lt;/b&gt;" in html
    assert "<b>Gómez</b>" not in html
    assert "2x Hamburguesa" in html
    assert "+ Cheddar (+$500)" in html
    assert "Total: $12.000" in html
    assert "Envío:" not in html
    assert "20/05/2024 15:30" in html
    assert "pedidos.example.com" in html


def test_delivery_ticket_has_fee_and_no_code(site_config):
    html = render_ticket_html(
        make_order(delivery_fee=1500, delivery_code="4821", customer_address="Calle 1", payment_status="approved")
    )
    assert "CÓDIGO DE RETIRO" not in html
    assert "Envío:</span><span>$1.500" in html
    assert "Subtotal:</span><span>$10.500" in html
    assert "📍 Calle 1" in html
    assert "✅ Pagado" in html


def test_payment_pending_and_hidden_notes(site_config):
    html = render_ticket_html(make_order(payment_method=None, notes=json.dumps({"preference_id": "p"})))
    assert "Pendiente de selección (Web)" in html
    assert "⏳ Pendiente" in html
    assert "Notas" not in html
