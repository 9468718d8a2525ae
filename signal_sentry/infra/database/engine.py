"""SQLModel engine factory."""

from functools import lru_cache

from sqlalchemy import event
from sqlmodel import create_engine

from signal_sentry.domain.config import get_config


@lru_cache
def get_engine():
    """프로세스 전역 SQLAlchemy Engine (싱글턴).

    테스트에서는 get_engine.cache_clear() 후 재생성.
    """
    config = get_config()
    if config.db.driver.startswith("sqlite"):
        return create_engine(config.db.url, echo=config.debug)

    engine = create_engine(
        config.db.url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        echo=config.debug,
    )

    if engine.dialect.name == "mysql":
        # MariaDB/MySQL utf8mb4 강제
        @event.listens_for(engine, "connect")
        def _set_charset(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("SET NAMES utf8mb4")
            cursor.close()

    return engine

