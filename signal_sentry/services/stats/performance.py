"""트레이더 성과 지표 — 종결 시그널의 실현 ROI/PnL 기반.

누적 ROI(%p) 추이, 최대 낙폭(MDD), 승률, 손익비, Profit Factor.
ROI는 청산 시 기록된 값(비율)을 %로 환산하여 단순 합산한다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from signal_sentry.infra.database.models import SignalDB


@dataclass
class TrendPoint:
    closed_at: datetime
    cumulative_roi_pct: float


@dataclass
class TraderStats:
    """트레이더 성과 요약."""

    total_trades: int = 0
    win_trades: int = 0
    loss_trades: int = 0
    win_rate_pct: float = 0.0
    total_roi_pct: float = 0.0
    total_pnl: float = 0.0
    win_loss_ratio: float = 0.0  # 평균 이익 / 평균 손실
    profit_factor: float = 0.0  # 총 이익 / 총 손실
    max_drawdown_pct: float = 0.0  # 누적 ROI 고점 대비 최대 하락 (%p)
    trend: list[TrendPoint] = field(default_factory=list)


def calculate_trader_stats(signals: list[SignalDB]) -> TraderStats:
    """종결 시그널 목록에서 성과 지표 계산 (roi/pnl 미기록 행은 제외)."""
    realized = [s for s in signals if s.roi is not None and s.realized_pnl is not None and s.closed_at is not None]
    stats = TraderStats()
    if not realized:
        return stats

    realized.sort(key=lambda s: s.closed_at)

    total_win_pnl = 0.0
    total_loss_pnl = 0.0
    cumulative = 0.0
    peak = float("-inf")

    for s in realized:
        roi_pct = s.roi * 100
        stats.total_roi_pct += roi_pct
        stats.total_pnl += s.realized_pnl

        if s.realized_pnl > 0:
            stats.win_trades += 1
            total_win_pnl += s.realized_pnl
        elif s.realized_pnl < 0:
            stats.loss_trades += 1
            total_loss_pnl += abs(s.realized_pnl)

        cumulative += roi_pct
        peak = max(peak, cumulative)
        stats.max_drawdown_pct = max(stats.max_drawdown_pct, peak - cumulative)
        stats.trend.append(TrendPoint(closed_at=s.closed_at, cumulative_roi_pct=cumulative))

    stats.total_trades = len(realized)
    stats.win_rate_pct = stats.win_trades / stats.total_trades * 100

    avg_win = total_win_pnl / stats.win_trades if stats.win_trades else 0.0
    avg_loss = total_loss_pnl / stats.loss_trades if stats.loss_trades else 0.0
    stats.win_loss_ratio = avg_win / avg_loss if avg_loss > 0 else avg_win
    stats.profit_factor = total_win_pnl / total_loss_pnl if total_loss_pnl > 0 else total_win_pnl

    return stats
