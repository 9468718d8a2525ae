"""시그널 감시 모델 — 시그널, 청산 결과, 배치 요약."""

from datetime import UTC, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .enums import Direction, ExitReason, ResultStatus, SignalStatus
from .types import Price, Symbol


class InvalidSignalError(ValueError):
    """저장소 행을 Signal로 변환할 수 없음 (필수 필드 누락/형식 오류)."""

    def __init__(self, signal_id: str, message: str):
        super().__init__(f"Invalid signal {signal_id}: {message}")
        self.signal_id = signal_id


def as_utc(value: datetime) -> datetime:
    """naive datetime은 UTC로 간주 (DB는 UTC naive 저장)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class Signal(BaseModel):
    """감시 대상 시그널 — 저장소 행의 강타입 표현.

    가격 필드는 ingestion 단계에서 문자열로 저장되므로
    from_row()에서 파싱하며, 누락/0 이하 값은 즉시 실패한다.
    """

    id: str = Field(min_length=1)
    symbol: Symbol
    direction: Direction
    entry_price: Price
    stop_loss: Price
    take_profit: Price
    created_at: datetime
    last_checked_at: Optional[datetime] = None  # watermark, None → created_at부터
    status: SignalStatus = SignalStatus.ACTIVE
    trader_id: Optional[str] = None

    @field_validator("created_at", "last_checked_at")
    @classmethod
    def _normalize_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None

    @field_validator("direction", mode="before")
    @classmethod
    def _lower_direction(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @property
    def since(self) -> datetime:
        """캔들 조회 시작 시각."""
        return self.last_checked_at or self.created_at

    @classmethod
    def from_row(cls, row: Any) -> "Signal":
        """SignalDB 행 → Signal. 실패 시 InvalidSignalError."""
        signal_id = str(getattr(row, "id", "") or "?")
        try:
            return cls.model_validate(
                {
                    "id": row.id,
                    "symbol": row.currency,
                    "direction": row.direction,
                    "entry_price": row.entry_price,
                    "stop_loss": row.stop_loss,
                    "take_profit": row.take_profit,
                    "created_at": row.created_at,
                    "last_checked_at": row.last_checked_at,
                    "status": row.status or SignalStatus.ACTIVE,
                    "trader_id": row.trader_id,
                }
            )
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise InvalidSignalError(signal_id, f"invalid fields: {fields}") from e


class ExitEvent(BaseModel):
    """캔들 스캔 결과 — 첫 트리거 봉."""

    reason: ExitReason
    price: float  # 트리거된 임계가 (봉의 open/close 아님)
    time: datetime  # 트리거 봉의 open_time


class Outcome(BaseModel):
    """청산 성과."""

    roi: float
    pnl: float
    status: SignalStatus


class SignalResult(BaseModel):
    """배치 내 시그널 1건 처리 결과."""

    id: str
    symbol: Optional[str] = None
    status: ResultStatus
    exit_status: Optional[SignalStatus] = None
    exit_reason: Optional[ExitReason] = None
    roi: Optional[float] = None
    last_ts: Optional[datetime] = None
    message: Optional[str] = None


class RunSummary(BaseModel):
    """배치 1회 실행 요약 (저장하지 않음, 호출자에 반환)."""

    seen: int = 0
    processed: int = 0
    skipped: int = 0
    no_data: int = 0
    updated: int = 0
    closed: int = 0
    errored: int = 0
    remaining_active: Optional[int] = None
    stopped_early: bool = False
    duration_seconds: float = 0.0
    results: list[SignalResult] = Field(default_factory=list)

    @property
    def errors(self) -> list[SignalResult]:
        return [r for r in self.results if r.status == ResultStatus.ERROR]

    @property
    def message(self) -> str:
        return f"Processed {self.processed}/{self.seen} signals"

    def record(self, result: SignalResult) -> None:
        """결과 1건 추가 + 카운터 갱신."""
        self.results.append(result)
        self.processed += 1
        if result.status == ResultStatus.SKIPPED_UP_TO_DATE:
            self.skipped += 1
        elif result.status == ResultStatus.NO_DATA:
            self.no_data += 1
        elif result.status == ResultStatus.UPDATED_WATERMARK:
            self.updated += 1
        elif result.status == ResultStatus.CLOSED:
            self.closed += 1
        elif result.status == ResultStatus.ERROR:
            self.errored += 1
