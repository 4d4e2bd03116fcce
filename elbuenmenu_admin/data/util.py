from __future__ import annotations

from typing import Literal, Optional

from elbuenmenu_admin.api.auth import AdminContext, get_admin_context
from elbuenmenu_admin.api.client import AdminApiClient
from elbuenmenu_admin.config import get_config

from .backends.http_backend import HttpDataAccess
from .backends.local_backend import LocalDataAccess
from .interface import DataAccess


def get_data_access(
    kind: Optional[Literal["http", "local"]] = None,
    context: Optional[AdminContext] = None,
) -> DataAccess:
    config = get_config()
    kind = kind or config.data_backend
    if kind == "http":
        return HttpDataAccess(AdminApiClient(context or get_admin_context()))
    if kind == "local":
        # Reads from configured JSON folder
        return LocalDataAccess(data_dir=config.data_dir)
    raise ValueError(f"Unknown data access kind: {kind}")
