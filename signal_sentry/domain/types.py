"""기본 타입 정의 — 서비스 전체에서 공유하는 Annotated 타입."""

from typing import Annotated

from pydantic import Field

# 캔들 조회 한도 범위 (Binance klines 최대 1500).
# since가 포함 경계라 1이면 매번 watermark 봉만 재조회되어 전진하지 못함
MIN_CANDLE_LIMIT = 2
MAX_CANDLE_LIMIT = 1500

# 가격: 0 초과 실수
Price = Annotated[float, Field(gt=0)]

# 심볼: 거래소 표기 그대로 (예: "BTC/USDT")
Symbol = Annotated[str, Field(min_length=1, max_length=30, examples=["BTC/USDT", "ETH/USDT"])]

CandleLimit = Annotated[int, Field(ge=MIN_CANDLE_LIMIT, le=MAX_CANDLE_LIMIT)]
