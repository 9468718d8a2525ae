"""Unit 테스트 공용 Fixtures — config 캐시 초기화 + SQLite in-memory DB."""

from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from signal_sentry.domain.config import get_config
from signal_sentry.infra.database.models import SignalDB


@pytest.fixture(autouse=True)
def _clear_config_cache():
    get_config.cache_clear()
    yield
    get_config.cache_clear()


# ---------------------------------------------------------------------------
# SQLite in-memory DB
# ---------------------------------------------------------------------------


@pytest.fixture
def db_engine():
    """SQLite in-memory engine (단일 커넥션 공유)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(db_engine):
    with Session(db_engine) as s:
        yield s


# ---------------------------------------------------------------------------
# Signal Factory
# ---------------------------------------------------------------------------


@pytest.fixture
def add_signal(session):
    """signals 행 추가 팩토리 — 기본값은 유효한 long 시그널 (UTC naive 저장)."""

    def _factory(
        signal_id: str,
        created_at: datetime,
        currency: str = "BTC/USDT",
        direction: str = "long",
        entry_price: str = "100",
        stop_loss: str = "90",
        take_profit: str = "110",
        **kwargs,
    ) -> SignalDB:
        row = SignalDB(
            id=signal_id,
            currency=currency,
            direction=direction,
            entry_price=entry_price,
            stop_loss=stop_loss,
            take_profit=take_profit,
            created_at=created_at,
            **kwargs,
        )
        session.add(row)
        session.commit()
        return row

    return _factory


@pytest.fixture
def base_time() -> datetime:
    """시그널 생성 기준 시각 (UTC naive)."""
    return datetime(2026, 3, 1, 9, 0)
