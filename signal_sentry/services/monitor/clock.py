"""시계 / 실행 예산 — 테스트에서 가짜 시계로 교체 가능."""

import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """현재 UTC 시각 (aware)."""
        ...

    def monotonic(self) -> float:
        """경과 시간 측정용 단조 시계 (초)."""
        ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(UTC)

    def monotonic(self) -> float:
        return time.monotonic()


@dataclass
class Deadline:
    """배치 실행 예산. 시그널 사이에서만 확인 (진행 중 fetch는 중단하지 않음)."""

    clock: Clock
    budget_seconds: float
    started_at: float

    @classmethod
    def start(cls, clock: Clock, budget_seconds: float) -> "Deadline":
        return cls(clock=clock, budget_seconds=budget_seconds, started_at=clock.monotonic())

    @property
    def elapsed(self) -> float:
        return self.clock.monotonic() - self.started_at

    def expired(self) -> bool:
        return self.elapsed >= self.budget_seconds
