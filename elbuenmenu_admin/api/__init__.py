from .auth import AdminContext, get_admin_context
from .bot import BotNotifier
from .client import AdminApiClient
from .errors import (
    AdminApiError,
    ApiConnectionError,
    ApiResponseError,
    AuthExpiredError,
    InvalidTransitionError,
    UnexpectedHtmlError,
    ValidationError,
)

__all__ = [
    "AdminContext",
    "get_admin_context",
    "BotNotifier",
    "AdminApiClient",
    # Errors
    "AdminApiError",
    "ApiConnectionError",
    "ApiResponseError",
    "AuthExpiredError",
    "InvalidTransitionError",
    "UnexpectedHtmlError",
    "ValidationError",
]
