"""FastAPI 앱 팩토리 — /health + 공통 에러 응답.

Usage:
    from signal_sentry.services.base import create_app

    app = create_app("signal-monitor", dependencies=["db", "exchange"])
"""

import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy import text

from signal_sentry.domain.health import DependencyHealth, HealthStatus
from signal_sentry.infra.exchange.client import CandleSourceError

logger = logging.getLogger(__name__)

# 응답 지연이 이 값(ms)을 넘으면 degraded
DEGRADED_LATENCY_MS = 1000.0


# --- Dependency Checks ---


def _ping_db() -> str | None:
    from signal_sentry.infra.database.engine import get_engine

    with get_engine().connect() as conn:
        conn.execute(text("SELECT 1"))
    return None


def _ping_exchange() -> str | None:
    from signal_sentry.services.deps import get_exchange_client

    return None if get_exchange_client().health() else "Exchange API unreachable"


# 이름 → 체크 함수 (실패 사유 문자열 반환, 정상이면 None)
DEPENDENCY_CHECKS: dict[str, Callable[[], str | None]] = {
    "db": _ping_db,
    "exchange": _ping_exchange,
}


def check_dependency(name: str) -> DependencyHealth:
    check = DEPENDENCY_CHECKS.get(name)
    if check is None:
        return DependencyHealth(status="down", message=f"No health check registered for {name!r}")

    start = time.monotonic()
    try:
        failure = check()
    except Exception as e:
        failure = str(e)[:200]
    latency = round((time.monotonic() - start) * 1000, 1)

    if failure:
        logger.warning("Health check failed for %s: %s", name, failure)
        return DependencyHealth(status="down", latency_ms=latency, message=failure)
    return DependencyHealth(status="degraded" if latency > DEGRADED_LATENCY_MS else "healthy", latency_ms=latency)


def overall_status(deps: dict[str, DependencyHealth]) -> str:
    states = {d.status for d in deps.values()}
    if "down" in states:
        return "unhealthy"
    if "degraded" in states:
        return "degraded"
    return "healthy"


# --- App Factory ---


def create_app(
    service_name: str,
    *,
    version: str = "1.0.0",
    lifespan: Callable | None = None,
    dependencies: list[str] | None = None,
) -> FastAPI:
    """공통 헬스체크/에러 핸들러가 등록된 FastAPI 앱.

    Args:
        service_name: 서비스 식별자 (로그, /health 응답)
        version: 서비스 버전
        lifespan: 서비스별 startup/shutdown context manager
        dependencies: /health에서 확인할 의존성 (DEPENDENCY_CHECKS 키)
    """
    dep_names = list(dependencies or [])

    @asynccontextmanager
    async def app_lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.started_at = time.monotonic()
        logger.info("[%s] Starting v%s", service_name, version)
        if lifespan is None:
            yield
        else:
            async with lifespan(app):
                yield
        logger.info("[%s] Shutting down", service_name)

    app = FastAPI(title=f"signal-sentry {service_name}", version=version, lifespan=app_lifespan)
    app.state.started_at = time.monotonic()

    @app.exception_handler(ValidationError)
    async def on_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": exc.errors(), "message": "Validation error"})

    @app.exception_handler(CandleSourceError)
    async def on_candle_source_error(request: Request, exc: CandleSourceError) -> JSONResponse:
        return JSONResponse(
            status_code=502,
            content={"detail": str(exc), "message": f"Exchange error ({exc.status_code or 'transport'})"},
        )

    @app.get("/health")
    def health() -> HealthStatus:
        deps = {name: check_dependency(name) for name in dep_names}
        return HealthStatus(
            service=service_name,
            status=overall_status(deps),
            uptime_seconds=round(time.monotonic() - app.state.started_at, 1),
            version=version,
            dependencies=deps,
            timestamp=datetime.now(UTC),
        )

    return app
