"""청산 성과 계산 — ROI / PnL / 손익 분류."""

from signal_sentry.domain.enums import Direction, SignalStatus
from signal_sentry.domain.signal import Outcome

DEFAULT_NOTIONAL = 1000.0  # 1건당 기준 원금 (USDT)


def calculate_roi(entry_price: float, exit_price: float, direction: Direction) -> float:
    """long: (X - E) / E, short: (E - X) / E."""
    if entry_price <= 0:
        raise ValueError(f"entry_price must be positive: {entry_price}")
    if direction == Direction.LONG:
        return (exit_price - entry_price) / entry_price
    return (entry_price - exit_price) / entry_price


def classify(roi: float) -> SignalStatus:
    """ROI 부호로만 분류 (어느 임계가가 트리거됐는지와 무관)."""
    if roi > 0:
        return SignalStatus.CLOSED_PROFIT
    if roi < 0:
        return SignalStatus.CLOSED_LOSS
    return SignalStatus.CLOSED


def calculate_outcome(
    entry_price: float,
    exit_price: float,
    direction: Direction,
    notional: float = DEFAULT_NOTIONAL,
) -> Outcome:
    roi = calculate_roi(entry_price, exit_price, direction)
    return Outcome(roi=roi, pnl=notional * roi, status=classify(roi))
