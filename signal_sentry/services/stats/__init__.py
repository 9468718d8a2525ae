"""Stats — 종결 시그널 성과 지표."""

from .performance import TraderStats, TrendPoint, calculate_trader_stats

__all__ = ["TraderStats", "TrendPoint", "calculate_trader_stats"]
