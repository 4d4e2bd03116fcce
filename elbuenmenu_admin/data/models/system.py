from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from .base import ApiModel, Count, Money

ServiceState = Literal["online", "stopped", "errored", "unknown"]


class ServiceStatus(ApiModel):
    """Process manager view of one service."""
    status: ServiceState = Field(default="unknown", description="Process state")
    uptime: Optional[float] = Field(default=None, description="Milliseconds since start")
    restarts: Count = Field(default=0, description="Restart count")
    memory: Money = Field(default=0.0, description="Resident memory in bytes")
    cpu: Money = Field(default=0.0, description="CPU usage percent")


class SystemStatus(ApiModel):
    """Status of the backend and the WhatsApp bot."""
    services: dict[str, ServiceStatus] = Field(default_factory=dict)


class SystemLogs(BaseModel):
    service: str
    lines: list[str] = Field(default_factory=list)
