import pytest

from elbuenmenu_admin.api import AdminApiClient, AdminContext, ApiResponseError
from elbuenmenu_admin.data.backends.http_backend import HttpDataAccess, parse_object, parse_records, unwrap_list
from elbuenmenu_admin.data.models import Coupon, CustomerLoyaltyUpdate, LoyaltyProgram, Order, PaymentConfig, SystemStatus
from elbuenmenu_admin.data.resources import COUPONS, EXPENSES, PROMO_CODES, STORE_CATEGORIES


@pytest.fixture
def make_backend(fake_session):
    def make(*responses, store_id="s1"):
        session = fake_session(*responses)
        client = AdminApiClient(AdminContext(token="tok", store_id=store_id), session=session)
        return HttpDataAccess(client), session
    return make


def test_unwrap_list_envelopes():
    assert unwrap_list(None) == []
    assert unwrap_list([1, 2]) == [1, 2]
    assert unwrap_list({"expenses": [1]}, "expenses") == [1]
    assert unwrap_list({"data": [2]}) == [2]
    with pytest.raises(ApiResponseError):
        unwrap_list({"error": "nope"})


def test_parse_records_skips_invalid_rows():
    rows = [{"id": "1", "status": "pending"}, {"id": "2", "status": "teleported"}, {"status": "pending"}]
    orders = parse_records(Order, rows, "test")
    assert [o.id for o in orders] == ["1"]


def test_get_orders_sends_filters_and_store(make_backend, fake_response):
    backend, session = make_backend(fake_response(200, [{"id": 1, "status": "pending", "total": 100}]))
    orders = backend.get_orders(status="pending", limit=50)
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://api.test/api/orders"
    assert call["params"] == {"status": "pending", "limit": 50, "storeId": "s1"}
    assert orders[0].id == "1"


def test_list_records_uses_list_key(make_backend, fake_response):
    backend, session = make_backend(
        fake_response(200, {"expenses": [{"id": 1, "date": "2024-05-01", "description": "Pan", "amount": 10}]})
    )
    expenses = backend.list_records(EXPENSES, params={"month": "2024-05"})
    assert session.calls[0]["params"] == {"month": "2024-05", "storeId": "s1"}
    assert expenses[0].description == "Pan"


def test_unscoped_collection_does_not_send_store(make_backend, fake_response):
    backend, session = make_backend(fake_response(200, []))
    backend.list_records(STORE_CATEGORIES)
    assert session.calls[0]["params"] is None


def test_create_coupon_injects_store_id(make_backend, fake_response):
    backend, session = make_backend(fake_response(201, {"id": "c1"}))
    backend.create_record(COUPONS, Coupon(code="HOLA", discount_value=10))
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["json"]["store_id"] == "s1"
    assert call["json"]["code"] == "HOLA"
    assert "id" not in call["json"]


def test_update_and_delete_use_record_path(make_backend, fake_response):
    backend, session = make_backend(fake_response(200, {}), fake_response(204))
    backend.update_record(COUPONS, "c1", Coupon(code="HOLA", discount_value=10))
    backend.delete_record(COUPONS, "c1")
    assert session.calls[0]["method"] == "PUT"
    assert session.calls[0]["url"].endswith("/coupons/c1")
    assert session.calls[1]["method"] == "DELETE"
    assert session.calls[1]["url"].endswith("/coupons/c1")


def test_reject_order_posts_reason(make_backend, fake_response):
    backend, session = make_backend(fake_response(200, {}))
    backend.reject_order("o1", "Sin stock")
    assert session.calls[0]["url"].endswith("/orders/o1/reject")
    assert session.calls[0]["json"] == {"reason": "Sin stock"}


def test_update_loyalty_customer_sends_camel_case(make_backend, fake_response):
    backend, session = make_backend(fake_response(200, {}))
    backend.update_loyalty_customer("c9", CustomerLoyaltyUpdate(tier="gold", discount_percentage=10, priority=True))
    assert session.calls[0]["json"] == {"tier": "gold", "discountPercentage": 10.0, "priority": True}


def test_save_loyalty_program_adds_store(make_backend, fake_response):
    backend, session = make_backend(fake_response(200, {}))
    backend.save_loyalty_program(LoyaltyProgram(points_per_order=20))
    assert session.calls[0]["json"]["store_id"] == "s1"
    assert session.calls[0]["json"]["points_per_order"] == 20


def test_store_settings_404_falls_back_to_defaults(make_backend, fake_response):
    backend, session = make_backend(fake_response(404, {"error": "not found"}))
    settings = backend.get_store_settings("s1")
    assert settings.store_type == "kiosco"
    assert session.calls[0]["url"].endswith("/store-settings/s1")
    assert session.calls[0]["params"] is None


def test_store_settings_other_errors_propagate(make_backend, fake_response):
    backend, _ = make_backend(fake_response(500, {"error": "boom"}))
    with pytest.raises(ApiResponseError):
        backend.get_store_settings("s1")


def test_advanced_settings_unwraps_settings_key(make_backend, fake_response):
    backend, _ = make_backend(fake_response(200, {"settings": {"appearance": {"theme": "dark"}}}))
    assert backend.get_advanced_settings().appearance.theme == "dark"


def test_save_payment_config_sends_only_credentials(make_backend, fake_response):
    backend, session = make_backend(fake_response(200, {}))
    config = PaymentConfig.model_validate({"mercadoPago": {"accessToken": "tk", "publicKey": "pk"}})
    backend.save_payment_config(config)
    assert session.calls[0]["url"].endswith("/admin/payment-config")
    assert session.calls[0]["json"] == {"mercadoPago": {"accessToken": "tk", "publicKey": "pk"}}


@pytest.mark.parametrize(
    "body,ok",
    [({"id": "pref-1"}, True), ({"preferenceId": "pref-2"}, True), ({}, False)],
)
def test_mercadopago_connection(make_backend, fake_response, body, ok):
    backend, _ = make_backend(fake_response(200, body))
    result = backend.test_mercadopago_connection()
    assert result.ok is ok


def test_system_logs_split_into_lines(make_backend, fake_response):
    backend, session = make_backend(fake_response(200, {"logs": "a\nb\n"}))
    logs = backend.get_system_logs("backend", lines=50)
    assert logs.lines == ["a", "b"]
    assert session.calls[0]["params"] == {"service": "backend", "lines": 50}


@pytest.mark.parametrize(
    "body,expected",
    [
        ({"available": True, "qr": "data:image/png;base64,AAA"}, "data:image/png;base64,AAA"),
        ({"available": True, "qr": "https://example.com/qr.png"}, None),
        ({"available": False, "qr": "data:image/png;base64,AAA"}, None),
        ({}, None),
    ],
)
def test_whatsapp_qr_only_returns_data_urls(make_backend, fake_response, body, expected):
    backend, _ = make_backend(fake_response(200, body))
    assert backend.get_whatsapp_qr() == expected


def test_system_status_parses_services(make_backend, fake_response):
    backend, _ = make_backend(fake_response(200, {"services": {"backend": {"status": "online", "memory": 1048576}}}))
    status = backend.get_system_status()
    assert status.services["backend"].status == "online"
    assert status.services["backend"].restarts == 0


def test_promo_codes_live_under_loyalty(make_backend, fake_response):
    backend, session = make_backend(
        fake_response(200, {"codes": [{"id": 7, "code": "VIP", "type": "bonus_points", "value": 100}]}),
        fake_response(200, {}),
    )
    codes = backend.list_records(PROMO_CODES)
    backend.set_promo_code_active("7", False)
    assert session.calls[0]["url"] == "https://api.test/api/loyalty/promo-codes"
    assert [c.code for c in codes] == ["VIP"]
    assert session.calls[1]["method"] == "PUT"
    assert session.calls[1]["url"] == "https://api.test/api/loyalty/promo-codes/7/active"
    assert session.calls[1]["json"] == {"isActive": False}


def test_respond_review_posts_text(make_backend, fake_response):
    backend, session = make_backend(fake_response(200, {}))
    backend.respond_review("r3", "¡Gracias por tu visita!")
    assert session.calls[0]["method"] == "POST"
    assert session.calls[0]["url"] == "https://api.test/api/reviews/r3/respond"
    assert session.calls[0]["json"] == {"response": "¡Gracias por tu visita!"}


def test_system_logs_accepts_bare_list(make_backend, fake_response):
    backend, _ = make_backend(fake_response(200, ["uno", "dos"]))
    assert backend.get_system_logs("bot").lines == ["uno", "dos"]


def test_store_settings_with_unreadable_hours_use_defaults(make_backend, fake_response):
    backend, _ = make_backend(
        fake_response(200, {"commercialName": "El Buen Menú", "hours": "{not json", "deliveryHours": '{"monday": "x"}'})
    )
    settings = backend.get_store_settings("s1")
    assert settings.commercial_name == "El Buen Menú"
    assert settings.hours["friday"].close == "22:00"
    assert settings.delivery_hours["monday"].open == "09:00"


def test_invalid_object_payload_is_an_api_error():
    with pytest.raises(ApiResponseError):
        parse_object(SystemStatus, {"services": "down"})
