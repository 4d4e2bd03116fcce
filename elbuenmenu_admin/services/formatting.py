from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Optional


def format_money(amount: float, decimals: int = 0) -> str:
    """Argentine peso formatting: $12.345 or $12.345,50."""
    text = f"{abs(amount):,.{decimals}f}".replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if amount < 0 else ""
    return f"{sign}${text}"


def format_datetime(value: Optional[datetime], tz: Optional[tzinfo] = None) -> str:
    if value is None:
        return "-"
    if tz is not None:
        value = value.astimezone(tz)
    return value.strftime("%d/%m/%Y %H:%M")


def format_uptime(milliseconds: Optional[float]) -> str:
    """1d 3h, 2h 15m, 5m 10s or 42s."""
    if not milliseconds:
        return "N/A"
    seconds = int(milliseconds // 1000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)
    if days:
        return f"{days}d {hours}h"
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def format_memory(num_bytes: Optional[float]) -> str:
    if not num_bytes:
        return "N/A"
    return f"{num_bytes / 1024 / 1024:.2f} MB"


SERVICE_STATUS_COLORS = {
    "online": "green",
    "stopped": "orange",
    "errored": "red",
}


def service_status_color(status: str) -> str:
    return SERVICE_STATUS_COLORS.get(status, "gray")
