"""캔들(OHLCV) 모델."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict


class Candle(BaseModel):
    """1개 봉의 OHLCV — 조회 결과 내에서 open_time 오름차순."""

    model_config = ConfigDict(frozen=True)

    open_time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @classmethod
    def from_kline(cls, row: list) -> "Candle":
        """거래소 kline 배열 [open_time_ms, open, high, low, close, volume, ...] 변환."""
        return cls(
            open_time=datetime.fromtimestamp(int(row[0]) / 1000, tz=UTC),
            open=float(row[1]),
            high=float(row[2]),
            low=float(row[3]),
            close=float(row[4]),
            volume=float(row[5]),
        )
