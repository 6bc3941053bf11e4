"""Utilities package."""

from .logger import get_app_logger, setup_logger, init_app_logger
from .clock import SystemClock, ensure_utc
from .keyed_lock import KeyedLock

__all__ = [
    "get_app_logger",
    "setup_logger",
    "init_app_logger",
    "SystemClock",
    "ensure_utc",
    "KeyedLock"
]
