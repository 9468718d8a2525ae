"""열거형 정의 — 시스템 전체에서 사용하는 상수값."""

from enum import StrEnum


class Direction(StrEnum):
    """포지션 방향"""

    LONG = "long"
    SHORT = "short"


class SignalStatus(StrEnum):
    """시그널 상태 (active → closed_* 단방향 전이)"""

    ACTIVE = "active"
    CLOSED_PROFIT = "closed_profit"
    CLOSED_LOSS = "closed_loss"
    CLOSED = "closed"  # 본전 (roi == 0)


class ExitReason(StrEnum):
    """청산 사유"""

    TAKE_PROFIT = "tp"
    STOP_LOSS = "sl"


class ResultStatus(StrEnum):
    """배치 내 시그널 단위 처리 결과"""

    SKIPPED_UP_TO_DATE = "skipped_up_to_date"
    NO_DATA = "no_data"
    UPDATED_WATERMARK = "updated_watermark"
    CLOSED = "closed"
    ERROR = "error"


# 종결 상태 (재오픈 불가)
TERMINAL_STATUSES = frozenset(
    {
        SignalStatus.CLOSED_PROFIT,
        SignalStatus.CLOSED_LOSS,
        SignalStatus.CLOSED,
    }
)
