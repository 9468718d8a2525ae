"""공유 DB 쿼리 — 서비스 레이어가 사용하는 Repository 패턴.

모든 쿼리는 SQLModel Session을 받아 순수 함수로 동작.
도메인 모델 변환은 호출자 책임 (Repository는 DB 모델만 반환).

쓰기는 항상 단일 행 조건부 UPDATE (status='active')이므로 종결된 시그널은
어떤 경로로도 다시 갱신되지 않는다.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import desc, func, update
from sqlmodel import Session, col, select

from signal_sentry.domain.enums import TERMINAL_STATUSES, SignalStatus

from .models import SignalDB

logger = logging.getLogger(__name__)


class StaleSignalError(RuntimeError):
    """조건부 UPDATE가 0행 — 이미 종결되었거나 다른 실행이 watermark를 옮김."""

    def __init__(self, signal_id: str, message: str = "signal is no longer in the expected state"):
        super().__init__(f"Signal {signal_id}: {message}")
        self.signal_id = signal_id


def to_db_time(value: datetime | None) -> datetime | None:
    """aware datetime → UTC naive (DB 저장 형식)."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


# ─── Signals ─────────────────────────────────────────────────────


class SignalRepository:
    """시그널 조회 및 감시 상태 갱신."""

    @staticmethod
    def list_active(session: Session) -> list[SignalDB]:
        """active 시그널 전체 — created_at 오름차순 (오래된 시그널 우선)."""
        stmt = (
            select(SignalDB)
            .where(SignalDB.status == SignalStatus.ACTIVE)
            .order_by(col(SignalDB.created_at).asc(), col(SignalDB.id).asc())
        )
        return list(session.exec(stmt).all())

    @staticmethod
    def count_active(session: Session) -> int:
        stmt = select(func.count()).select_from(SignalDB).where(SignalDB.status == SignalStatus.ACTIVE)
        return int(session.exec(stmt).one())

    @staticmethod
    def get_signal(session: Session, signal_id: str) -> SignalDB | None:
        return session.get(SignalDB, signal_id)

    @staticmethod
    def update_watermark(
        session: Session,
        signal_id: str,
        last_checked_at: datetime,
        *,
        expected: datetime | None = None,
        compare_and_swap: bool = False,
    ) -> None:
        """watermark 전진.

        compare_and_swap=True면 현재 last_checked_at이 expected와 같을 때만 갱신
        (expected=None → 아직 한 번도 확인되지 않은 시그널).

        Raises:
            StaleSignalError: 조건에 맞는 행이 없음
        """
        stmt = (
            update(SignalDB)  # type: ignore[call-overload]
            .where(SignalDB.id == signal_id)
            .where(SignalDB.status == SignalStatus.ACTIVE)
        )
        if compare_and_swap:
            if expected is None:
                stmt = stmt.where(col(SignalDB.last_checked_at).is_(None))
            else:
                stmt = stmt.where(SignalDB.last_checked_at == to_db_time(expected))
        stmt = stmt.values(last_checked_at=to_db_time(last_checked_at), updated_at=datetime.utcnow())

        result = session.exec(stmt)
        if result.rowcount == 0:
            session.rollback()
            raise StaleSignalError(signal_id, "watermark update matched no active row")
        session.commit()

    @staticmethod
    def close_signal(
        session: Session,
        signal_id: str,
        *,
        status: SignalStatus,
        exit_price: float,
        exit_reason: str,
        realized_pnl: float,
        roi: float,
        last_checked_at: datetime,
        closed_at: datetime,
        duration: int | None = None,
    ) -> None:
        """종결 필드 일괄 기록 (active → closed_* 단방향).

        Raises:
            StaleSignalError: 이미 종결된 시그널
        """
        stmt = (
            update(SignalDB)  # type: ignore[call-overload]
            .where(SignalDB.id == signal_id)
            .where(SignalDB.status == SignalStatus.ACTIVE)
            .values(
                status=status,
                exit_price=exit_price,
                exit_reason=exit_reason,
                realized_pnl=realized_pnl,
                roi=roi,
                last_checked_at=to_db_time(last_checked_at),
                closed_at=to_db_time(closed_at),
                duration=duration,
                updated_at=datetime.utcnow(),
            )
        )
        result = session.exec(stmt)
        if result.rowcount == 0:
            session.rollback()
            raise StaleSignalError(signal_id, "close matched no active row")
        session.commit()

    @staticmethod
    def get_closed_signals(session: Session, trader_id: str | None = None) -> list[SignalDB]:
        """종결 시그널 (closed_at 최신순). 성과 통계용."""
        closed = [s.value for s in TERMINAL_STATUSES]
        stmt = select(SignalDB).where(col(SignalDB.status).in_(closed))
        if trader_id:
            stmt = stmt.where(SignalDB.trader_id == trader_id)
        stmt = stmt.order_by(desc(SignalDB.closed_at))
        return list(session.exec(stmt).all())
