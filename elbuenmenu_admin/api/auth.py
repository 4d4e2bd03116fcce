from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from elbuenmenu_admin.config import get_config
from elbuenmenu_admin.logging import get_logger


class AdminContext(BaseModel):
    """Credentials and store scope attached to every backend request."""
    token: Optional[str] = Field(default=None, description="Admin bearer token")
    store_id: Optional[str] = Field(default=None, description="Store the admin is operating on")

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def auth_headers(self) -> dict[str, str]:
        """Return the Authorization header, or nothing when no token is set."""
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def scoped_params(self, params: Optional[dict] = None) -> dict:
        """Merge the storeId query parameter into request params.

        An explicit storeId in params wins over the context's store.
        """
        merged = dict(params or {})
        if self.store_id and "storeId" not in merged:
            merged["storeId"] = self.store_id
        return merged

    def cleared(self) -> "AdminContext":
        """Return a copy without the token, keeping the store scope."""
        return AdminContext(token=None, store_id=self.store_id)


def get_admin_context(token: Optional[str] = None, store_id: Optional[str] = None) -> AdminContext:
    """Build an AdminContext, falling back to ADMIN_TOKEN / ADMIN_STORE_ID from the config."""
    config = get_config()
    logger = get_logger(__name__)
    context = AdminContext(
        token=token or config.admin_token,
        store_id=store_id or config.admin_store_id,
    )
    if not context.is_authenticated:
        logger.warning("No admin token configured; requests will be sent unauthenticated")
    return context
