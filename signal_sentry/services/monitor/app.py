"""Signal Monitor 서비스 — 스케줄러(cron)가 호출하는 배치 엔드포인트.

POST /jobs/monitor-signals  → RunSummary (1회 배치, 시간 예산 내 종료)
GET  /stats/{trader_id}     → 트레이더 성과 지표
GET  /health
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import Depends, HTTPException
from pydantic import BaseModel, Field
from sqlmodel import Session

from signal_sentry.domain.config import get_config
from signal_sentry.domain.signal import RunSummary
from signal_sentry.domain.types import CandleLimit
from signal_sentry.infra.database.repositories import SignalRepository
from signal_sentry.infra.exchange.client import ExchangeClient
from signal_sentry.infra.observability.logging import setup_logging
from signal_sentry.services.base import create_app
from signal_sentry.services.deps import get_db_session, get_exchange_client
from signal_sentry.services.stats.performance import calculate_trader_stats

from .engine import MonitorRunError, SignalMonitor

logger = logging.getLogger(__name__)

SERVICE_NAME = "signal-monitor"


class MonitorRequest(BaseModel):
    budget_seconds: float | None = Field(default=None, gt=0)
    fetch_limit: CandleLimit | None = None


@asynccontextmanager
async def lifespan(app) -> AsyncIterator[None]:
    config = get_config()
    setup_logging(SERVICE_NAME, log_level=config.log_level, json_output=config.log_json)
    yield
    # 재시작 시 닫힌 클라이언트가 재사용되지 않도록 캐시 초기화
    if get_exchange_client.cache_info().currsize:
        get_exchange_client().close()
    get_exchange_client.cache_clear()


app = create_app(SERVICE_NAME, version="1.0.0", lifespan=lifespan, dependencies=["db", "exchange"])


@app.post("/jobs/monitor-signals")
def monitor_signals(
    request: MonitorRequest | None = None,
    session: Session = Depends(get_db_session),
    exchange: ExchangeClient = Depends(get_exchange_client),
) -> RunSummary:
    """active 시그널 SL/TP 감시 배치 1회 실행."""
    request = request or MonitorRequest()
    monitor = SignalMonitor(session, exchange)
    try:
        return monitor.run(budget_seconds=request.budget_seconds, fetch_limit=request.fetch_limit)
    except MonitorRunError as e:
        logger.error("Signal monitor run failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.get("/stats/{trader_id}")
def trader_stats(trader_id: str, session: Session = Depends(get_db_session)) -> dict:
    """트레이더 종결 시그널 성과."""
    signals = SignalRepository.get_closed_signals(session, trader_id)
    return asdict(calculate_trader_stats(signals))
