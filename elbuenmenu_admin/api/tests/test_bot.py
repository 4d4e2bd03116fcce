import pytest

from elbuenmenu_admin.api.bot import BotNotifier
from elbuenmenu_admin.api.errors import ApiResponseError


def test_notify_order_posts_message_with_api_key(fake_session, fake_response):
    session = fake_session(fake_response(200, {"success": True}))
    BotNotifier(session=session).notify_order("1155550000", "ORD-1", "Listo")

    call = session.calls[0]
    assert call["url"] == "http://bot.test/notify-order"
    assert call["headers"]["X-API-Key"] == "secret"
    assert call["json"] == {"customerPhone": "1155550000", "orderNumber": "ORD-1", "message": "Listo"}


def test_notify_order_failure_raises(fake_session, fake_response):
    session = fake_session(fake_response(503, text="down"))
    with pytest.raises(ApiResponseError):
        BotNotifier(session=session).notify_order("1155550000", "ORD-1", "Listo")
