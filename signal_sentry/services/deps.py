"""FastAPI Depends 기반 DI — 서비스 공통 의존성 팩토리.

Usage:
    from signal_sentry.services.deps import get_db_session, get_exchange_client

    @app.post("/jobs/monitor-signals")
    def monitor(session: Session = Depends(get_db_session)):
        ...
"""

from collections.abc import Generator
from functools import lru_cache

from sqlmodel import Session

from signal_sentry.infra.database.engine import get_engine
from signal_sentry.infra.exchange.client import ExchangeClient


def get_db_session() -> Generator[Session, None, None]:
    """요청 스코프 DB 세션 (FastAPI Depends)."""
    engine = get_engine()
    with Session(engine) as session:
        yield session


@lru_cache
def get_exchange_client() -> ExchangeClient:
    """거래소 HTTP 클라이언트 (싱글턴, circuit breaker 상태 공유)."""
    return ExchangeClient()
