"""Signal Monitor FastAPI 앱 단위 테스트 — TestClient + dependency override."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from signal_sentry.domain.candle import Candle
from signal_sentry.infra.database.repositories import SignalRepository
from signal_sentry.services.deps import get_db_session, get_exchange_client
from signal_sentry.services.monitor.app import app


class StubCandleSource:
    def __init__(self, candles: list[Candle] | None = None):
        self.candles = candles or []

    def fetch_candles(self, symbol, timeframe="1m", since=None, limit=1000):
        return [c for c in self.candles if since is None or c.open_time >= since][:limit]


@pytest.fixture
def source() -> StubCandleSource:
    return StubCandleSource()


@pytest.fixture
def client(session, source):
    def _session_override():
        yield session

    app.dependency_overrides[get_db_session] = _session_override
    app.dependency_overrides[get_exchange_client] = lambda: source
    yield TestClient(app)
    app.dependency_overrides.clear()


def _recent(minutes_ago: int) -> datetime:
    return (datetime.now(UTC) - timedelta(minutes=minutes_ago)).replace(tzinfo=None, second=0, microsecond=0)


class TestMonitorEndpoint:
    def test_runs_batch(self, client, source, add_signal):
        created = _recent(60)
        add_signal("s1", created)
        add_signal("s2", created + timedelta(minutes=1), currency="ETH/USDT")
        source.candles = [
            Candle(open_time=(created + timedelta(minutes=2)).replace(tzinfo=UTC), open=100, high=111, low=99, close=110)
        ]

        resp = client.post("/jobs/monitor-signals", json={"budget_seconds": 30, "fetch_limit": 100})

        assert resp.status_code == 200
        data = resp.json()
        assert data["seen"] == 2
        assert data["closed"] == 2
        assert data["remaining_active"] == 0
        assert data["results"][0]["exit_status"] == "closed_profit"
        assert data["results"][0]["exit_reason"] == "tp"

    def test_empty_body_uses_defaults(self, client):
        resp = client.post("/jobs/monitor-signals")

        assert resp.status_code == 200
        assert resp.json()["seen"] == 0

    @pytest.mark.parametrize("body", [{"budget_seconds": 0}, {"fetch_limit": 1}, {"fetch_limit": 5000}])
    def test_invalid_body(self, client, body):
        resp = client.post("/jobs/monitor-signals", json=body)
        assert resp.status_code == 422

    def test_listing_failure_returns_500(self, client):
        with patch.object(SignalRepository, "list_active", side_effect=RuntimeError("db unavailable")):
            resp = client.post("/jobs/monitor-signals")

        assert resp.status_code == 500
        assert "db unavailable" in resp.json()["detail"]


class TestStatsEndpoint:
    def test_trader_stats(self, client, add_signal):
        base = _recent(120)
        add_signal("a1", base, trader_id="alice", status="closed_profit", roi=0.1, realized_pnl=100.0, closed_at=base)
        add_signal(
            "a2",
            base,
            trader_id="alice",
            status="closed_loss",
            roi=-0.05,
            realized_pnl=-50.0,
            closed_at=base + timedelta(minutes=30),
        )
        add_signal("b1", base, trader_id="bob", status="closed_profit", roi=0.2, realized_pnl=200.0, closed_at=base)

        resp = client.get("/stats/alice")

        assert resp.status_code == 200
        data = resp.json()
        assert data["total_trades"] == 2
        assert data["win_trades"] == 1
        assert data["total_pnl"] == pytest.approx(50.0)
        assert len(data["trend"]) == 2

    def test_unknown_trader(self, client):
        resp = client.get("/stats/nobody")
        assert resp.status_code == 200
        assert resp.json()["total_trades"] == 0


class TestHealth:
    def test_health_reports_dependencies(self, client, db_engine):
        exchange = MagicMock()
        exchange.health.return_value = True

        with (
            patch("signal_sentry.infra.database.engine.get_engine", return_value=db_engine),
            patch("signal_sentry.services.deps.get_exchange_client", return_value=exchange),
        ):
            resp = client.get("/health")

        assert resp.status_code == 200
        data = resp.json()
        assert data["service"] == "signal-monitor"
        assert data["dependencies"]["db"]["status"] in ("healthy", "degraded")
        assert data["dependencies"]["exchange"]["status"] in ("healthy", "degraded")

    def test_exchange_down(self, client, db_engine):
        exchange = MagicMock()
        exchange.health.return_value = False

        with (
            patch("signal_sentry.infra.database.engine.get_engine", return_value=db_engine),
            patch("signal_sentry.services.deps.get_exchange_client", return_value=exchange),
        ):
            data = client.get("/health").json()

        assert data["status"] == "unhealthy"
        assert data["dependencies"]["exchange"]["status"] == "down"


class TestLifespan:
    def test_restart_gets_fresh_exchange_client(self):
        get_exchange_client.cache_clear()
        with patch("signal_sentry.services.monitor.app.setup_logging"):
            first = get_exchange_client()
            with TestClient(app):
                pass
            second = get_exchange_client()
            with TestClient(app):
                pass

        assert second is not first
        assert first._client.is_closed
        assert second._client.is_closed
        assert get_exchange_client.cache_info().currsize == 0

    def test_shutdown_without_client_creates_none(self):
        get_exchange_client.cache_clear()
        with patch("signal_sentry.services.monitor.app.setup_logging"), TestClient(app):
            pass

        assert get_exchange_client.cache_info().currsize == 0
