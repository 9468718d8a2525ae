"""트레이더 성과 지표 단위 테스트."""

from datetime import datetime, timedelta

import pytest

from signal_sentry.infra.database.models import SignalDB
from signal_sentry.services.stats.performance import calculate_trader_stats

T0 = datetime(2026, 3, 1, 9, 0)


def _closed(idx: int, roi: float | None, pnl: float | None, status: str = "closed_profit") -> SignalDB:
    return SignalDB(
        id=f"s{idx}",
        trader_id="alice",
        currency="BTC/USDT",
        direction="long",
        entry_price="100",
        stop_loss="90",
        take_profit="110",
        status=status,
        roi=roi,
        realized_pnl=pnl,
        closed_at=T0 + timedelta(hours=idx),
    )


class TestCalculateTraderStats:
    def test_empty(self):
        stats = calculate_trader_stats([])
        assert stats.total_trades == 0
        assert stats.win_rate_pct == 0.0
        assert stats.trend == []

    def test_metrics(self):
        # 입력 순서와 무관하게 closed_at 순으로 누적
        signals = [
            _closed(3, 0.20, 200.0),
            _closed(1, 0.10, 100.0),
            _closed(2, -0.05, -50.0, status="closed_loss"),
        ]

        stats = calculate_trader_stats(signals)

        assert stats.total_trades == 3
        assert stats.win_trades == 2
        assert stats.loss_trades == 1
        assert stats.win_rate_pct == pytest.approx(66.6667, rel=1e-4)
        assert stats.total_roi_pct == pytest.approx(25.0)
        assert stats.total_pnl == pytest.approx(250.0)
        assert stats.win_loss_ratio == pytest.approx(3.0)
        assert stats.profit_factor == pytest.approx(6.0)
        assert stats.max_drawdown_pct == pytest.approx(5.0)
        assert [p.cumulative_roi_pct for p in stats.trend] == pytest.approx([10.0, 5.0, 25.0])

    def test_break_even_counts_as_trade_only(self):
        stats = calculate_trader_stats([_closed(1, 0.0, 0.0, status="closed")])
        assert stats.total_trades == 1
        assert stats.win_trades == 0
        assert stats.loss_trades == 0

    def test_no_losses_profit_factor(self):
        stats = calculate_trader_stats([_closed(1, 0.1, 100.0), _closed(2, 0.05, 50.0)])
        assert stats.profit_factor == pytest.approx(150.0)
        assert stats.max_drawdown_pct == 0.0

    def test_skips_rows_without_outcome(self):
        stats = calculate_trader_stats([_closed(1, None, None), _closed(2, 0.1, 100.0)])
        assert stats.total_trades == 1
