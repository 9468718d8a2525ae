"""Exchange infrastructure — 캔들 시세 조회."""

from .client import CandleSourceError, ExchangeClient, to_exchange_symbol

__all__ = ["CandleSourceError", "ExchangeClient", "to_exchange_symbol"]
