"""Microsecond-resolution points in time."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True, order=True)
class Timestamp:
    """A point in time measured in microseconds since the Unix epoch."""

    micro_seconds_since_epoch: int = 0

    MICRO_SECONDS_PER_SECOND: ClassVar[int] = 1_000_000

    @classmethod
    def now(cls) -> Timestamp:
        """Return the current wall-clock time."""
        return cls(time.time_ns() // 1000)

    @classmethod
    def invalid(cls) -> Timestamp:
        """Return the zero timestamp, which is not valid."""
        return cls()

    def valid(self) -> bool:
        """True when the timestamp lies after the epoch."""
        return self.micro_seconds_since_epoch > 0

    def to_string(self) -> str:
        """Format as local time: ``YYYY/MM/DD HH:MM:SS.uuuuuu``."""
        seconds, micros = divmod(self.micro_seconds_since_epoch, self.MICRO_SECONDS_PER_SECOND)
        tm = time.localtime(seconds)
        return (
            f"{tm.tm_year:4d}/{tm.tm_mon:02d}/{tm.tm_mday:02d} "
            f"{tm.tm_hour:02d}:{tm.tm_min:02d}:{tm.tm_sec:02d}.{micros:06d}"
        )

    def __str__(self) -> str:
        return self.to_string()


def add_time(timestamp: Timestamp, seconds: float) -> Timestamp:
    """Return ``timestamp`` moved forward by ``seconds``."""
    delta = int(seconds * Timestamp.MICRO_SECONDS_PER_SECOND)
    return Timestamp(timestamp.micro_seconds_since_epoch + delta)