from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Generic, Optional, TypeVar

from elbuenmenu_admin.api.errors import AdminApiError, AuthExpiredError
from elbuenmenu_admin.config import AppConfig, get_config
from elbuenmenu_admin.logging import get_logger

T = TypeVar("T")


@dataclass
class PollingSchedule:
    """Refresh interval per screen, in seconds. Screens not listed don't poll."""
    intervals: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None) -> "PollingSchedule":
        config = config or get_config()
        return cls(
            intervals={
                "orders": config.orders_poll_seconds,
                "transfers": config.orders_poll_seconds,
                "realtime": config.realtime_poll_seconds,
                "sales": config.sales_poll_seconds,
                "system_qr": config.system_qr_poll_seconds,
            }
        )

    def interval(self, screen: str) -> Optional[int]:
        seconds = self.intervals.get(screen)
        return seconds if seconds and seconds > 0 else None


class DataQuery(Generic[T]):
    """A fetch with its last good value, last error and freshness.

    refresh() only calls the fetch when the value is older than the interval
    (or on force). A failed refresh keeps the previous value and records the error;
    an expired session is re-raised so the app can ask for a new token.
    """

    def __init__(
        self,
        fetch: Callable[[], T],
        interval: Optional[float] = None,
        default: Optional[T] = None,
        name: str = "query",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.fetch = fetch
        self.interval = interval
        self.value: Optional[T] = default
        self.error: Optional[AdminApiError] = None
        self.loaded_at: Optional[float] = None
        self.loading = False
        self.name = name
        self.clock = clock
        self.logger = get_logger(__name__)

    @property
    def loaded(self) -> bool:
        return self.loaded_at is not None

    def is_stale(self) -> bool:
        if self.loaded_at is None:
            return True
        if self.interval is None:
            return False
        return self.clock() - self.loaded_at >= self.interval

    def invalidate(self) -> None:
        self.loaded_at = None

    def refresh(self, force: bool = False) -> Optional[T]:
        if not force and not self.is_stale():
            return self.value

        self.loading = True
        try:
            self.value = self.fetch()
            self.error = None
            self.loaded_at = self.clock()
        except AuthExpiredError:
            raise
        except AdminApiError as exc:
            self.error = exc
            self.logger.warning(f"Refreshing {self.name} failed, keeping last value: {exc.message}")
        finally:
            self.loading = False
        return self.value
