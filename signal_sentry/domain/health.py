"""헬스 체크 응답 모델."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

DependencyState = Literal["healthy", "degraded", "down"]
ServiceState = Literal["healthy", "degraded", "unhealthy"]


class DependencyHealth(BaseModel):
    """의존 대상(DB, 거래소) 1개의 상태."""

    status: DependencyState
    latency_ms: float | None = None
    message: str | None = None


class HealthStatus(BaseModel):
    service: str
    status: ServiceState
    uptime_seconds: float
    version: str
    dependencies: dict[str, DependencyHealth] = Field(default_factory=dict)
    timestamp: datetime
