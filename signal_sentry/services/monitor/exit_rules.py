"""Exit Rules — 캔들 구간 SL/TP 청산 판정 엔진.

봉 단위 판정 (오래된 봉부터):
  1. Stop Loss   long: low <= SL   / short: high >= SL
  2. Take Profit long: high >= TP  / short: low <= TP

한 봉에서 SL/TP가 모두 닿으면 봉 내부 경로를 알 수 없으므로
항상 SL로 판정한다 (비관적 판정). 첫 트리거 봉에서 스캔 종료,
청산가는 봉 가격이 아닌 임계가, 청산 시각은 봉 open_time.
"""

import logging
from collections.abc import Iterable

from signal_sentry.domain.candle import Candle
from signal_sentry.domain.enums import Direction, ExitReason
from signal_sentry.domain.signal import ExitEvent

logger = logging.getLogger(__name__)


# --- Individual Exit Rules ---


def check_stop_loss(direction: Direction, candle: Candle, stop_loss: float) -> bool:
    """[1] Stop Loss 터치 여부."""
    if direction == Direction.LONG:
        return candle.low <= stop_loss
    return candle.high >= stop_loss


def check_take_profit(direction: Direction, candle: Candle, take_profit: float) -> bool:
    """[2] Take Profit 터치 여부."""
    if direction == Direction.LONG:
        return candle.high >= take_profit
    return candle.low <= take_profit


# --- Scanner ---


def evaluate_candle(
    direction: Direction,
    candle: Candle,
    stop_loss: float,
    take_profit: float,
) -> ExitEvent | None:
    """봉 1개 판정. SL 우선."""
    if check_stop_loss(direction, candle, stop_loss):
        return ExitEvent(reason=ExitReason.STOP_LOSS, price=stop_loss, time=candle.open_time)
    if check_take_profit(direction, candle, take_profit):
        return ExitEvent(reason=ExitReason.TAKE_PROFIT, price=take_profit, time=candle.open_time)
    return None


def scan_for_exit(
    direction: Direction,
    stop_loss: float,
    take_profit: float,
    candles: Iterable[Candle],
) -> ExitEvent | None:
    """시간순 캔들에서 첫 청산 이벤트. 없으면 None."""
    scanned = 0
    for candle in candles:
        scanned += 1
        event = evaluate_candle(direction, candle, stop_loss, take_profit)
        if event is not None:
            logger.debug(
                "[%s] %s hit at %.8g on bar %s (%d bars scanned)",
                direction,
                event.reason,
                event.price,
                event.time.isoformat(),
                scanned,
            )
            return event
    logger.debug("[%s] no exit in %d bars", direction, scanned)
    return None
