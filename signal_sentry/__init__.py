"""signal-sentry — 시그널 SL/TP 청산 감시 배치 엔진."""

__version__ = "1.0.0"
