from __future__ import annotations

from typing import Any, Optional


class AdminApiError(Exception):
    """Base error for everything the dashboard surfaces to the operator."""

    def __init__(self, message: str, status: Optional[int] = None, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details


class ApiResponseError(AdminApiError):
    """The backend answered with a non-2xx status."""


class AuthExpiredError(ApiResponseError):
    """The backend rejected the admin token (HTTP 401)."""


class UnexpectedHtmlError(AdminApiError):
    """The backend answered HTML instead of JSON, usually a wrong API_URL."""


class ApiConnectionError(AdminApiError):
    """The request never got a response (DNS, refused connection, timeout)."""


class ValidationError(AdminApiError):
    """A form failed client-side validation; no request was sent."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidTransitionError(AdminApiError):
    """An order status change is not allowed from the current status."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"No se puede pasar un pedido de '{current}' a '{target}'")
        self.current = current
        self.target = target
