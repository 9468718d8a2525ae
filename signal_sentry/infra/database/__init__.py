"""Database infrastructure — SQLModel engine, table models, repositories."""

from .engine import get_engine
from .models import SignalDB
from .repositories import SignalRepository, StaleSignalError

__all__ = [
    "get_engine",
    "SignalDB",
    "SignalRepository",
    "StaleSignalError",
]
