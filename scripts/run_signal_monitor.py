#!/usr/bin/env python3
"""SL/TP 감시 배치 1회 실행 CLI.

Usage:
    uv run python scripts/run_signal_monitor.py                  # 기본 예산 (MONITOR_BUDGET_SECONDS)
    uv run python scripts/run_signal_monitor.py --budget 20 --limit 500
    uv run python scripts/run_signal_monitor.py -v
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv
from sqlmodel import Session

from signal_sentry.domain.config import get_config
from signal_sentry.infra.database.engine import get_engine
from signal_sentry.infra.exchange.client import ExchangeClient
from signal_sentry.infra.observability.logging import setup_logging
from signal_sentry.services.monitor.engine import MonitorRunError, SignalMonitor


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="시그널 SL/TP 감시 배치 1회 실행")
    parser.add_argument("--budget", type=float, default=None, help="실행 예산 (초)")
    parser.add_argument("--limit", type=int, default=None, help="시그널당 최대 캔들 수")
    parser.add_argument("--verbose", "-v", action="store_true", help="상세 로깅")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    load_dotenv(Path(__file__).resolve().parent.parent / ".env")
    args = parse_args(argv)

    config = get_config()
    setup_logging(
        "signal-monitor-cli",
        log_level="DEBUG" if args.verbose else config.log_level,
        json_output=config.log_json,
    )

    with ExchangeClient() as exchange, Session(get_engine()) as session:
        try:
            summary = SignalMonitor(session, exchange).run(budget_seconds=args.budget, fetch_limit=args.limit)
        except MonitorRunError as e:
            print(f"Signal monitor failed: {e}", file=sys.stderr)
            return 1

    print(summary.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
