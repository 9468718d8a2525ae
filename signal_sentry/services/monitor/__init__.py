"""Signal Monitor — SL/TP 청산 감시 배치."""

from .engine import CandleSource, MonitorRunError, SignalMonitor
from .exit_rules import scan_for_exit
from .outcome import calculate_outcome

__all__ = ["CandleSource", "MonitorRunError", "SignalMonitor", "scan_for_exit", "calculate_outcome"]
