from __future__ import annotations

from typing import Optional

import requests

from elbuenmenu_admin.config import get_config
from elbuenmenu_admin.logging import get_logger

from .errors import ApiConnectionError, ApiResponseError


class BotNotifier:
    """Sends customer messages through the WhatsApp bot's webhook."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        config = get_config()
        self.base_url = (base_url or config.bot_webhook_url).rstrip("/")
        self.api_key = api_key if api_key is not None else config.bot_api_key
        self.timeout = timeout if timeout is not None else config.request_timeout_seconds
        self.session = session or requests.Session()
        self.logger = get_logger(__name__)

    def notify_order(self, customer_phone: str, order_number: str, message: str) -> None:
        """POST the message to /notify-order.

        Raises:
            ApiConnectionError: The bot could not be reached.
            ApiResponseError: The bot answered with a non-2xx status.
        """
        url = f"{self.base_url}/notify-order"
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-API-Key"] = self.api_key

        try:
            response = self.session.post(
                url,
                json={"customerPhone": customer_phone, "orderNumber": order_number, "message": message},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            self.logger.error(f"WhatsApp bot unreachable at {url}: {exc}")
            raise ApiConnectionError(f"No se pudo contactar al bot de WhatsApp: {exc}") from exc

        if not response.ok:
            self.logger.error(f"WhatsApp bot answered {response.status_code} for order {order_number}")
            raise ApiResponseError(
                f"Error al enviar notificación: HTTP {response.status_code}",
                status=response.status_code,
            )
        self.logger.info(f"Pickup notification sent for order {order_number}")
