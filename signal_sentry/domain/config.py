"""통합 설정 모델 — Pydantic Settings 기반.

모든 설정값은 환경 변수로 주입. 우선순위:
  1. 환경 변수 (docker-compose env, .env)
  2. Pydantic Settings 기본값
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

from .types import CandleLimit


class DatabaseConfig(BaseSettings):
    """데이터베이스 설정."""

    driver: str = "mysql+pymysql"
    host: str = "localhost"
    port: int = 3306
    user: str = "sentry"
    password: str = ""
    name: str = "signal_sentry"

    model_config = {"env_prefix": "DB_"}

    @property
    def url(self) -> str:
        if self.driver.startswith("sqlite"):
            return f"{self.driver}:///{self.name}"
        return f"{self.driver}://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"


class ExchangeConfig(BaseSettings):
    """거래소 시세(캔들) API 설정 — Binance USD-M 선물."""

    base_url: str = "https://fapi.binance.com"
    timeout_seconds: float = 10.0
    proxy_url: str = ""
    # Circuit breaker: 연속 실패 N회 → reset_timeout초 동안 즉시 실패
    breaker_fail_max: int = 5
    breaker_reset_timeout: int = 60

    model_config = {"env_prefix": "EXCHANGE_"}


class MonitorConfig(BaseSettings):
    """SL/TP 감시 배치 설정."""

    budget_seconds: float = 50.0  # 서버리스 실행 한도(60s) 안쪽
    fetch_limit: CandleLimit = 1000
    timeframe: str = "1m"
    notional: float = 1000.0  # PnL 환산 기준 원금 (USDT)
    compare_and_swap: bool = True  # watermark 갱신 시 last_checked_at 조건부 업데이트

    model_config = {"env_prefix": "MONITOR_"}


class AppConfig(BaseSettings):
    """최상위 설정 — 서브 설정 객체를 조합.

    Usage:
        from signal_sentry.domain.config import get_config
        config = get_config()
        print(config.db.url)
        print(config.monitor.budget_seconds)
    """

    env: str = Field(default="production", description="development | staging | production")
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = True

    db: DatabaseConfig = Field(default_factory=DatabaseConfig)
    exchange: ExchangeConfig = Field(default_factory=ExchangeConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)

    model_config = {"env_prefix": "APP_"}


@lru_cache
def get_config() -> AppConfig:
    """싱글턴 설정 인스턴스.

    프로세스 내에서 한 번만 환경 변수를 읽고 캐싱.
    테스트에서는 get_config.cache_clear()로 초기화.
    """
    return AppConfig()
