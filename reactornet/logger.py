"""A minimal process-wide logger writing to standard output."""

from __future__ import annotations

import sys
import threading
from enum import IntEnum
from typing import TextIO

from reactornet.timestamp import Timestamp


class LogLevel(IntEnum):
    INFO = 0
    ERROR = 1
    FATAL = 2
    DEBUG = 3


class FatalError(RuntimeError):
    """Raised after a fatal message has been logged."""


_PREFIXES = {
    LogLevel.INFO: "[INFO]",
    LogLevel.ERROR: "[ERROR]",
    LogLevel.FATAL: "[FATAL]",
    LogLevel.DEBUG: "[DEBUG]",
}

_MAX_MESSAGE = 1023


class Logger:
    """Singleton logger; each line carries a level prefix and a timestamp."""

    _instance: Logger | None = None
    _instance_lock = threading.Lock()

    def __init__(self, stream: TextIO | None = None) -> None:
        self.log_level: int = LogLevel.INFO
        self.stream = stream
        self.debug_enabled = False
        self.lock = threading.RLock()

    @classmethod
    def instance(cls) -> Logger:
        """Return the shared logger, creating it on first use."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    def set_log_level(self, level: int) -> None:
        self.log_level = level

    def log(self, msg: str) -> None:
        """Write ``msg`` with the prefix of the current level."""
        prefix = _PREFIXES.get(self.log_level, "")
        out = self.stream if self.stream is not None else sys.stdout
        out.write(f"{prefix}{Timestamp.now().to_string()} : {msg}\n")
        out.flush()


def _emit(level: LogLevel, fmt: str, args: tuple) -> str:
    message = (fmt % args if args else fmt)[:_MAX_MESSAGE]
    logger = Logger.instance()
    with logger.lock:
        logger.set_log_level(level)
        logger.log(message)
    return message


def log_info(fmt: str, *args) -> None:
    _emit(LogLevel.INFO, fmt, args)


def log_error(fmt: str, *args) -> None:
    _emit(LogLevel.ERROR, fmt, args)


def log_fatal(fmt: str, *args) -> None:
    """Log the message and raise :class:`FatalError`."""
    message = _emit(LogLevel.FATAL, fmt, args)
    raise FatalError(message.rstrip("\n"))


def log_debug(fmt: str, *args) -> None:
    """Log only when debug output is enabled on the shared logger."""
    if Logger.instance().debug_enabled:
        _emit(LogLevel.DEBUG, fmt, args)