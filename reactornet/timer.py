"""Timers and the handles used to cancel them."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Optional

from reactornet.timestamp import Timestamp, add_time

TimerCallback = Callable[[], None]


class Timer:
    """A callback due at ``expiration``, repeating every ``interval`` seconds if positive."""

    _created = 0
    _created_lock = threading.Lock()

    def __init__(self, callback: TimerCallback, when: Timestamp, interval: float) -> None:
        self.callback = callback
        self.expiration = when
        self.interval = interval
        self.repeat = interval > 0.0
        with Timer._created_lock:
            Timer._created += 1
            self.sequence = Timer._created

    def __repr__(self) -> str:
        return f"Timer(sequence={self.sequence}, expiration={self.expiration!r}, interval={self.interval})"

    def run(self) -> None:
        self.callback()

    def restart(self, now: Timestamp) -> None:
        """Schedule the next expiry from ``now``; one-shot timers become invalid."""
        if self.repeat:
            self.expiration = add_time(now, self.interval)
        else:
            self.expiration = Timestamp.invalid()

    @classmethod
    def num_created(cls) -> int:
        with cls._created_lock:
            return cls._created


@dataclass(frozen=True)
class TimerId:
    """Identifies a scheduled timer for cancellation."""

    timer: Optional[Timer] = None
    sequence: int = 0