"""Structured logging — stdlib 로거 출력을 structlog 포매터로 렌더링.

서비스 코드는 표준 logging만 사용한다:

    logger = logging.getLogger(__name__)
    logger.info("Signal %s CLOSED. Status: %s", signal_id, status)

setup_logging()은 프로세스 시작 시 1회 호출 (FastAPI lifespan, CLI main).
"""

import logging
import sys

import structlog

# 요청/쿼리 단위 로그가 배치 로그를 덮지 않도록 WARNING으로 제한
_NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")


def _build_formatter(json_output: bool) -> structlog.stdlib.ProcessorFormatter:
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer(ensure_ascii=False)
        pre_chain.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )


def setup_logging(
    service_name: str = "signal-sentry",
    *,
    log_level: str = "INFO",
    json_output: bool = True,
) -> None:
    """루트 로거에 structlog 포매터 핸들러 1개를 설치.

    재호출 시 기존 핸들러를 교체하므로 중복 출력이 생기지 않는다.

    Args:
        service_name: 모든 로그에 바인딩할 서비스 이름
        log_level: DEBUG | INFO | WARNING | ERROR
        json_output: True면 JSON 한 줄, False면 콘솔용 컬러 출력
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter(json_output))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service_name)
