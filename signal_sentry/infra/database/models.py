"""SQLModel 테이블 정의 — DB 스키마의 Single Source of Truth.

signals 테이블은 webhook ingestion이 생성하고 (가격은 수신한 문자열 그대로),
감시 엔진은 watermark와 종결 필드만 갱신한다.
시각 컬럼은 모두 UTC naive (timezone 없는 DateTime)로 명시한다.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index
from sqlmodel import Field, SQLModel

# ─── Signals ─────────────────────────────────────────────────────


class SignalDB(SQLModel, table=True):
    __tablename__ = "signals"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36)
    trader_id: str | None = Field(default=None, max_length=36)
    currency: str = Field(max_length=30)  # "BTC/USDT"
    direction: str = Field(max_length=10)  # long | short
    entry_price: str = Field(max_length=40)
    stop_loss: str = Field(max_length=40)
    take_profit: str = Field(max_length=40)
    leverage: str | None = Field(default=None, max_length=10)
    signal_type: str | None = Field(default=None, max_length=30)
    signal_time: datetime | None = Field(default=None, sa_type=DateTime)
    status: str = Field(default="active", max_length=20)
    created_at: datetime = Field(default_factory=datetime.utcnow, sa_type=DateTime)
    updated_at: datetime | None = Field(default=None, sa_type=DateTime)
    # 감시 엔진 소유 필드
    last_checked_at: datetime | None = Field(default=None, sa_type=DateTime)
    exit_price: float | None = None
    exit_reason: str | None = Field(default=None, max_length=5)
    realized_pnl: float | None = None
    roi: float | None = None
    closed_at: datetime | None = Field(default=None, sa_type=DateTime)
    duration: int | None = None  # 보유 기간 (초)

    __table_args__ = (
        Index("ix_signals_status_created", "status", "created_at"),
        Index("ix_signals_trader_status", "trader_id", "status"),
    )
