import pytest
import requests

from elbuenmenu_admin.api.auth import AdminContext, get_admin_context
from elbuenmenu_admin.api.client import AdminApiClient, extract_error_message
from elbuenmenu_admin.api.errors import (
    ApiConnectionError,
    ApiResponseError,
    AuthExpiredError,
    UnexpectedHtmlError,
)
from elbuenmenu_admin.config import set_config_for_test


@pytest.fixture
def make_client(fake_session):
    def _make(*responses, token="tok-1", store_id="store-9"):
        session = fake_session(*responses)
        client = AdminApiClient(AdminContext(token=token, store_id=store_id), session=session)
        return client, session
    return _make


def test_attaches_bearer_token_and_store_scope(make_client, fake_response):
    client, session = make_client(fake_response(200, {"ok": True}))
    assert client.get("/coupons") == {"ok": True}

    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://api.test/api/coupons"
    assert call["headers"]["Authorization"] == "Bearer tok-1"
    assert call["params"] == {"storeId": "store-9"}
    assert call["timeout"] == 30.0


def test_unscoped_request_has_no_store_param(make_client, fake_response):
    client, session = make_client(fake_response(200, []))
    client.put("/settings", payload={"a": 1}, scoped=False)
    assert session.calls[0]["params"] is None
    assert session.calls[0]["json"] == {"a": 1}


def test_explicit_store_param_wins(make_client, fake_response):
    client, session = make_client(fake_response(200, []))
    client.get("/coupons", params={"storeId": "other"})
    assert session.calls[0]["params"] == {"storeId": "other"}


def test_empty_body_returns_none(make_client, fake_response):
    client, _ = make_client(fake_response(204, text=""))
    assert client.delete("/coupons/1") is None


def test_html_answer_is_reported(make_client, fake_response):
    client, _ = make_client(fake_response(200, text="<!DOCTYPE html><html></html>"))
    with pytest.raises(UnexpectedHtmlError):
        client.get("/orders")


def test_error_message_includes_details(make_client, fake_response):
    body = {"error": "Datos inválidos", "details": {"message": "code duplicado"}}
    client, _ = make_client(fake_response(400, body))
    with pytest.raises(ApiResponseError) as excinfo:
        client.post("/coupons", payload={})
    assert excinfo.value.status == 400
    assert str(excinfo.value) == "Datos inválidos: code duplicado"


def test_unauthorized_raises_auth_expired(make_client, fake_response):
    client, _ = make_client(fake_response(401, {"error": "Token inválido"}))
    with pytest.raises(AuthExpiredError) as excinfo:
        client.get("/orders")
    assert excinfo.value.message == "Token inválido"


def test_unauthorized_without_token(make_client, fake_response):
    client, _ = make_client(fake_response(401, {"error": "x"}), token=None)
    with pytest.raises(AuthExpiredError) as excinfo:
        client.get("/orders")
    assert excinfo.value.message == "Token no proporcionado"


def test_network_failure_is_wrapped(make_client):
    client, _ = make_client(requests.ConnectionError("refused"))
    with pytest.raises(ApiConnectionError):
        client.get("/orders")


@pytest.mark.parametrize(
    "body, expected",
    [
        ('{"error": "Falla"}', "Falla"),
        ('{"details": ["a"]}', 'HTTP 500: ["a"]'),
        ("plain failure", "plain failure"),
        ("", "HTTP 500"),
    ],
)
def test_extract_error_message(body, expected):
    message, _ = extract_error_message(500, body)
    assert message == expected


def test_admin_context_from_config():
    set_config_for_test(admin_token="cfg-token", admin_store_id="42")
    context = get_admin_context()
    assert context.auth_headers() == {"Authorization": "Bearer cfg-token"}
    assert context.scoped_params() == {"storeId": "42"}
    assert context.cleared().token is None
