from __future__ import annotations

import json
from typing import Any, Optional

import requests

from elbuenmenu_admin.config import get_config
from elbuenmenu_admin.logging import get_logger

from .auth import AdminContext
from .errors import ApiConnectionError, ApiResponseError, AuthExpiredError, UnexpectedHtmlError

_HTML_PREFIXES = ("<!doctype", "<html")


def _looks_like_html(body: str) -> bool:
    return body.lstrip()[:9].lower().startswith(_HTML_PREFIXES)


def extract_error_message(status: int, body: str) -> tuple[str, Any]:
    """Build an operator-facing message from an error response body.

    The backend answers errors as ``{"error": ..., "details": ...}``; details may be
    an object with its own ``message``. Non-JSON bodies are truncated to 200 characters.
    """
    try:
        payload = json.loads(body) if body else None
    except ValueError:
        return (body[:200] or "Error desconocido"), None

    if not isinstance(payload, dict):
        return f"HTTP {status}", payload

    message = payload.get("error") or payload.get("message") or f"HTTP {status}"
    details = payload.get("details")
    if details:
        if isinstance(details, dict) and details.get("message"):
            message = f"{message}: {details['message']}"
        elif isinstance(details, str):
            message = f"{message}: {details}"
        else:
            message = f"{message}: {json.dumps(details, ensure_ascii=False)}"
    return message, details


class AdminApiClient:
    """Single authenticated gateway to the El Buen Menú REST backend.

    Attaches the bearer token and the storeId query parameter, applies the request
    timeout, and maps failures onto the AdminApiError hierarchy.
    """

    def __init__(
        self,
        context: AdminContext,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        config = get_config()
        self.context = context
        self.base_url = (base_url or config.api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.request_timeout_seconds
        self.session = session or requests.Session()
        self.logger = get_logger(__name__)

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        payload: Any = None,
        scoped: bool = True,
    ) -> Any:
        """Send one request and return the decoded JSON body (None when empty).

        Args:
            method: HTTP verb.
            path: Endpoint path relative to the API base URL.
            params: Query parameters.
            payload: JSON body for POST/PUT.
            scoped: Add the context's storeId query parameter.
        Raises:
            AuthExpiredError: The backend answered 401.
            ApiResponseError: Any other non-2xx answer.
            UnexpectedHtmlError: The backend answered an HTML page.
            ApiConnectionError: No response was received.
        """
        url = self.url(path)
        query = self.context.scoped_params(params) if scoped else dict(params or {})
        headers = {"Content-Type": "application/json", **self.context.auth_headers()}

        self.logger.debug(f"{method} {url} params={query}")
        try:
            response = self.session.request(
                method,
                url,
                params=query or None,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            self.logger.error(f"{method} {url} timed out after {self.timeout}s")
            raise ApiConnectionError(f"Tiempo de espera agotado al contactar {url}") from exc
        except requests.RequestException as exc:
            self.logger.error(f"{method} {url} failed: {exc}")
            raise ApiConnectionError(f"No se pudo conectar con el servidor: {exc}") from exc

        return self._handle_response(method, url, response)

    def _handle_response(self, method: str, url: str, response: requests.Response) -> Any:
        body = response.text or ""

        if _looks_like_html(body):
            self.logger.error(f"{method} {url} answered HTML (status {response.status_code})")
            raise UnexpectedHtmlError(
                "El servidor devolvió HTML en lugar de JSON. Verificá que API_URL apunte al backend.",
                status=response.status_code,
            )

        if not response.ok:
            message, details = extract_error_message(response.status_code, body)
            if response.status_code == 401:
                if not self.context.is_authenticated:
                    message = "Token no proporcionado"
                self.logger.warning(f"{method} {url} unauthorized: {message}")
                raise AuthExpiredError(message, status=401, details=details)
            self.logger.error(f"{method} {url} -> {response.status_code}: {message}")
            raise ApiResponseError(message, status=response.status_code, details=details)

        if not body.strip():
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiResponseError(
                f"Respuesta inválida del servidor: {body[:200]}",
                status=response.status_code,
            ) from exc

    def get(self, path: str, params: Optional[dict] = None, scoped: bool = True) -> Any:
        return self.request("GET", path, params=params, scoped=scoped)

    def post(self, path: str, payload: Any = None, params: Optional[dict] = None, scoped: bool = True) -> Any:
        return self.request("POST", path, params=params, payload=payload, scoped=scoped)

    def put(self, path: str, payload: Any = None, params: Optional[dict] = None, scoped: bool = True) -> Any:
        return self.request("PUT", path, params=params, payload=payload, scoped=scoped)

    def delete(self, path: str, params: Optional[dict] = None, scoped: bool = True) -> Any:
        return self.request("DELETE", path, params=params, scoped=scoped)
