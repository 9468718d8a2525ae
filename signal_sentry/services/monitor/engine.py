"""Signal Monitor — 시간 예산 기반 SL/TP 청산 배치.

active 시그널을 오래된 순으로 순회하며 watermark 이후 캔들을 조회,
청산 조건(exit_rules)이 충족되면 성과를 기록하고 종결,
아니면 마지막 캔들 시각으로 watermark를 전진시킨다.

Data Flow:
  signals(active, created_at ASC) → fetch_candles(since=watermark)
  → scan_for_exit → [청산] calculate_outcome → close_signal
                  → [미청산] update_watermark(last candle open_time)

시그널 단위 오류는 결과에 기록하고 다음 시그널로 진행 (배치 중단 없음).
예산 확인은 시그널 사이에서만 하며, 진행 중인 fetch는 중단하지 않는다.
"""

import logging
from datetime import datetime
from typing import Protocol

from sqlmodel import Session

from signal_sentry.domain.candle import Candle
from signal_sentry.domain.config import MonitorConfig, get_config
from signal_sentry.domain.enums import ResultStatus
from signal_sentry.domain.signal import ExitEvent, InvalidSignalError, RunSummary, Signal, SignalResult
from signal_sentry.domain.types import MAX_CANDLE_LIMIT, MIN_CANDLE_LIMIT
from signal_sentry.infra.database.models import SignalDB
from signal_sentry.infra.database.repositories import SignalRepository

from .clock import Clock, Deadline, SystemClock
from .exit_rules import scan_for_exit
from .outcome import calculate_outcome

logger = logging.getLogger(__name__)


class CandleSource(Protocol):
    def fetch_candles(
        self,
        symbol: str,
        timeframe: str = "1m",
        since: datetime | None = None,
        limit: int = 1000,
    ) -> list[Candle]: ...


class MonitorRunError(RuntimeError):
    """배치 전체 실패 (잘못된 호출, 시그널 목록 조회 실패)."""


class SignalMonitor:
    """SL/TP 청산 감시 엔진.

    Args:
        session: DB 세션 (시그널 저장소)
        candle_source: 캔들 조회 클라이언트 (ExchangeClient)
        clock: 시계 (기본 SystemClock, 테스트에서 교체)
        config: 감시 설정 (기본 get_config().monitor)
    """

    def __init__(
        self,
        session: Session,
        candle_source: CandleSource,
        *,
        clock: Clock | None = None,
        config: MonitorConfig | None = None,
    ):
        self._session = session
        self._candles = candle_source
        self._clock = clock or SystemClock()
        self._config = config or get_config().monitor

    # --- Public API ---

    def run(self, budget_seconds: float | None = None, fetch_limit: int | None = None) -> RunSummary:
        """배치 1회 실행.

        Raises:
            MonitorRunError: 잘못된 budget/limit, 시그널 목록 조회 실패
        """
        budget = self._config.budget_seconds if budget_seconds is None else budget_seconds
        limit = self._config.fetch_limit if fetch_limit is None else fetch_limit
        if budget <= 0:
            raise MonitorRunError(f"budget_seconds must be positive: {budget}")
        if not MIN_CANDLE_LIMIT <= limit <= MAX_CANDLE_LIMIT:
            raise MonitorRunError(f"fetch_limit must be in {MIN_CANDLE_LIMIT}..{MAX_CANDLE_LIMIT}: {limit}")

        deadline = Deadline.start(self._clock, budget)
        logger.info("Signal monitor started (budget=%.1fs, limit=%d)", budget, limit)

        try:
            rows = SignalRepository.list_active(self._session)
        except Exception as e:
            logger.exception("Failed to list active signals")
            raise MonitorRunError(f"Failed to list active signals: {e}") from e

        summary = RunSummary(seen=len(rows))
        logger.info("Found %d active signals", summary.seen)
        for row in rows:
            if deadline.expired():
                summary.stopped_early = True
                logger.warning(
                    "Time budget exhausted after %.1fs (%d/%d signals). Stopping.",
                    deadline.elapsed,
                    summary.processed,
                    summary.seen,
                )
                break
            summary.record(self.process_signal(row, limit))

        summary.remaining_active = self._count_remaining()
        summary.duration_seconds = round(deadline.elapsed, 3)

        logger.info(
            "Active signals: initial=%d, closed=%d, remaining=%s (updated=%d, skipped=%d, no_data=%d, errors=%d)",
            summary.seen,
            summary.closed,
            summary.remaining_active if summary.remaining_active is not None else "?",
            summary.updated,
            summary.skipped,
            summary.no_data,
            summary.errored,
        )
        logger.info("%s in %.1fs", summary.message, summary.duration_seconds)
        return summary

    def process_signal(self, row: SignalDB, limit: int | None = None) -> SignalResult:
        """시그널 1건: 조회 → 스캔 → 종결 또는 watermark 전진."""
        signal_id = str(row.id)
        try:
            signal = Signal.from_row(row)
        except InvalidSignalError as e:
            logger.error("Skipping malformed signal %s: %s", signal_id, e)
            return SignalResult(id=signal_id, status=ResultStatus.ERROR, message=str(e))

        since = signal.since
        if since >= self._clock.now():
            logger.info("Signal %s (%s) is up to date.", signal.id, signal.symbol)
            return SignalResult(id=signal.id, symbol=signal.symbol, status=ResultStatus.SKIPPED_UP_TO_DATE)

        logger.debug("Processing %s (ID: %s) since %s", signal.symbol, signal.id, since.isoformat())

        try:
            candles = self._candles.fetch_candles(
                signal.symbol,
                self._config.timeframe,
                since,
                limit or self._config.fetch_limit,
            )
        except Exception as e:
            logger.error("Candle fetch failed for signal %s (%s): %s", signal.id, signal.symbol, e)
            return SignalResult(id=signal.id, symbol=signal.symbol, status=ResultStatus.ERROR, message=str(e))

        if not candles:
            logger.info("No new data for %s (signal %s)", signal.symbol, signal.id)
            return SignalResult(id=signal.id, symbol=signal.symbol, status=ResultStatus.NO_DATA)

        try:
            event = scan_for_exit(signal.direction, signal.stop_loss, signal.take_profit, candles)
            if event is not None:
                return self._close(signal, event)
            return self._advance_watermark(signal, candles[-1].open_time)
        except Exception as e:
            self._session.rollback()
            logger.error("Error processing signal %s: %s", signal.id, e)
            return SignalResult(id=signal.id, symbol=signal.symbol, status=ResultStatus.ERROR, message=str(e))

    # --- Persistence ---

    def _close(self, signal: Signal, event: ExitEvent) -> SignalResult:
        outcome = calculate_outcome(signal.entry_price, event.price, signal.direction, self._config.notional)
        duration = max(0, int((event.time - signal.created_at).total_seconds()))

        SignalRepository.close_signal(
            self._session,
            signal.id,
            status=outcome.status,
            exit_price=event.price,
            exit_reason=event.reason,
            realized_pnl=outcome.pnl,
            roi=outcome.roi,
            last_checked_at=event.time,
            closed_at=event.time,
            duration=duration,
        )
        logger.info(
            "Signal %s CLOSED. Status: %s, Reason: %s, ROI: %.2f%%",
            signal.id,
            outcome.status,
            event.reason,
            outcome.roi * 100,
        )
        return SignalResult(
            id=signal.id,
            symbol=signal.symbol,
            status=ResultStatus.CLOSED,
            exit_status=outcome.status,
            exit_reason=event.reason,
            roi=outcome.roi,
            last_ts=event.time,
        )

    def _advance_watermark(self, signal: Signal, last_open_time: datetime) -> SignalResult:
        # watermark는 후퇴하지 않음
        watermark = max(last_open_time, signal.since)
        SignalRepository.update_watermark(
            self._session,
            signal.id,
            watermark,
            expected=signal.last_checked_at,
            compare_and_swap=self._config.compare_and_swap,
        )
        logger.info("Signal %s still active. Updated watermark to %s", signal.id, watermark.isoformat())
        return SignalResult(
            id=signal.id,
            symbol=signal.symbol,
            status=ResultStatus.UPDATED_WATERMARK,
            last_ts=watermark,
        )

    def _count_remaining(self) -> int | None:
        """리포트용 잔여 active 수 (실패해도 배치 결과에는 영향 없음)."""
        try:
            return SignalRepository.count_active(self._session)
        except Exception as e:
            self._session.rollback()
            logger.warning("Failed to count remaining active signals: %s", e)
            return None
