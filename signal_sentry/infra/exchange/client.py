"""거래소 캔들 HTTP Client — Binance USD-M 선물 klines.

공개 시세 엔드포인트만 사용하므로 API 키 불필요.
심볼은 DB 표기("BTC/USDT")를 거래소 표기("BTCUSDT")로 1:1 변환.

Reference: https://developers.binance.com/docs/derivatives/usds-margined-futures/market-data/rest-api/Kline-Candlestick-Data
"""

import logging
from datetime import datetime

import httpx
import pybreaker

from signal_sentry.domain.candle import Candle
from signal_sentry.domain.config import ExchangeConfig, get_config

logger = logging.getLogger(__name__)

KLINES_PATH = "/fapi/v1/klines"
PING_PATH = "/fapi/v1/ping"
SUPPORTED_TIMEFRAMES = frozenset({"1m", "3m", "5m", "15m", "30m", "1h", "4h", "1d"})


class CandleSourceError(Exception):
    """캔들 조회 실패 (네트워크/타임아웃/잘못된 심볼/서킷 오픈)."""

    def __init__(self, message: str, symbol: str = "", status_code: int | None = None):
        super().__init__(message)
        self.symbol = symbol
        self.status_code = status_code


class _BreakerListener(pybreaker.CircuitBreakerListener):
    def state_change(self, cb, old_state, new_state):
        logger.warning("Exchange circuit breaker state: %s → %s", old_state.name, new_state.name)


def to_exchange_symbol(symbol: str) -> str:
    """DB 심볼 → 거래소 심볼 (예: BTC/USDT → BTCUSDT, ETH/USDT:USDT → ETHUSDT)."""
    base = symbol.split(":", 1)[0]
    return base.replace("/", "").replace("-", "").strip().upper()


class ExchangeClient:
    """Binance 선물 시세 클라이언트.

    Usage:
        client = ExchangeClient()
        candles = client.fetch_candles("BTC/USDT", "1m", since, limit=1000)
    """

    def __init__(
        self,
        config: ExchangeConfig | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ):
        self._config = config or get_config().exchange
        self._client = httpx.Client(
            base_url=self._config.base_url.rstrip("/"),
            timeout=self._config.timeout_seconds,
            proxy=self._config.proxy_url or None,
            transport=transport,
        )
        self._breaker = pybreaker.CircuitBreaker(
            fail_max=self._config.breaker_fail_max,
            reset_timeout=self._config.breaker_reset_timeout,
            exclude=[lambda e: isinstance(e, CandleSourceError) and e.status_code == 400],
            listeners=[_BreakerListener()],
        )

    def fetch_candles(
        self,
        symbol: str,
        timeframe: str = "1m",
        since: datetime | None = None,
        limit: int = 1000,
    ) -> list[Candle]:
        """since(포함)부터 최대 limit개 캔들, open_time 오름차순.

        Raises:
            CandleSourceError: 전송 오류, HTTP 오류, 응답 형식 오류, 서킷 오픈
        """
        if timeframe not in SUPPORTED_TIMEFRAMES:
            raise CandleSourceError(f"Unsupported timeframe: {timeframe}", symbol=symbol)

        params: dict[str, str | int] = {
            "symbol": to_exchange_symbol(symbol),
            "interval": timeframe,
            "limit": limit,
        }
        if since is not None:
            params["startTime"] = int(since.timestamp() * 1000)

        try:
            rows = self._breaker.call(self._get_klines, symbol, params)
        except pybreaker.CircuitBreakerError as e:
            raise CandleSourceError(f"Exchange circuit open: {e}", symbol=symbol) from e

        try:
            candles = [Candle.from_kline(row) for row in rows]
        except (IndexError, TypeError, ValueError) as e:
            raise CandleSourceError(f"Malformed kline payload for {symbol}: {e}", symbol=symbol) from e

        candles.sort(key=lambda c: c.open_time)
        return candles

    def _get_klines(self, symbol: str, params: dict) -> list:
        try:
            resp = self._client.get(KLINES_PATH, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            # 400: 잘못된 심볼 등 요청 오류 (서킷 카운트 제외)
            raise CandleSourceError(
                f"Exchange HTTP {e.response.status_code} for {symbol}: {e.response.text[:200]}",
                symbol=symbol,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise CandleSourceError(f"Exchange request failed for {symbol}: {e}", symbol=symbol) from e

        try:
            data = resp.json()
        except ValueError as e:
            raise CandleSourceError(f"Invalid JSON from exchange for {symbol}", symbol=symbol) from e
        if not isinstance(data, list):
            raise CandleSourceError(f"Unexpected kline response for {symbol}: {str(data)[:200]}", symbol=symbol)
        return data

    def health(self) -> bool:
        """거래소 헬스체크."""
        try:
            resp = self._client.get(PING_PATH)
            return resp.status_code == 200
        except httpx.HTTPError:
            return False

    def close(self) -> None:
        """클라이언트 종료."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
