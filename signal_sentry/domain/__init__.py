"""signal-sentry 도메인 모델 — 서비스 간 데이터 계약의 Single Source of Truth.

Usage:
    from signal_sentry.domain import Signal, Candle, RunSummary
    from signal_sentry.domain.config import AppConfig
"""

# --- Types ---
from .types import CandleLimit, Price, Symbol

# --- Enums ---
from .enums import TERMINAL_STATUSES, Direction, ExitReason, ResultStatus, SignalStatus

# --- Market Data ---
from .candle import Candle

# --- Signal ---
from .signal import ExitEvent, InvalidSignalError, Outcome, RunSummary, Signal, SignalResult

# --- Health ---
from .health import DependencyHealth, HealthStatus

__all__ = [
    # Types
    "Price",
    "Symbol",
    "CandleLimit",
    # Enums
    "Direction",
    "SignalStatus",
    "ExitReason",
    "ResultStatus",
    "TERMINAL_STATUSES",
    # Market Data
    "Candle",
    # Signal
    "Signal",
    "InvalidSignalError",
    "ExitEvent",
    "Outcome",
    "SignalResult",
    "RunSummary",
    # Health
    "DependencyHealth",
    "HealthStatus",
]
