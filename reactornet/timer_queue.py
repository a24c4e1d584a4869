"""Timers ordered by expiry, woken through a pollable descriptor."""

from __future__ import annotations

import bisect
import socket
import threading
from typing import Any, Optional

from reactornet.channel import Channel
from reactornet.logger import log_error, log_fatal, log_info
from reactornet.timer import Timer, TimerCallback, TimerId
from reactornet.timestamp import Timestamp

_MIN_DELAY_US = 100


def how_much_time_from_now(when: Timestamp) -> float:
    """Seconds until ``when``, never less than 100 microseconds."""
    micros = when.micro_seconds_since_epoch - Timestamp.now().micro_seconds_since_epoch
    micros = max(micros, _MIN_DELAY_US)
    return micros / Timestamp.MICRO_SECONDS_PER_SECOND


class _TimerFd:
    """A descriptor that becomes readable once an armed deadline passes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: Optional[threading.Timer] = None
        self._reader, self._writer = socket.socketpair()
        self._reader.setblocking(False)
        self._writer.setblocking(False)

    def fileno(self) -> int:
        return self._reader.fileno()

    def arm(self, delay: float) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
            pending = threading.Timer(delay, self._fire)
            pending.daemon = True
            self._pending = pending
            pending.start()

    def _fire(self) -> None:
        try:
            self._writer.send(b"\x01")
        except OSError:
            pass

    def read(self) -> int:
        """Drain pending expirations and return how many there were."""
        count = 0
        while True:
            try:
                chunk = self._reader.recv(4096)
            except (BlockingIOError, InterruptedError):
                return count
            if not chunk:
                return count
            count += len(chunk)

    def close(self) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
        self._reader.close()
        self._writer.close()


class TimerQueue:
    """Holds a loop's timers and runs them when they expire."""

    def __init__(self, loop: Any) -> None:
        self.loop = loop
        self._timerfd = _TimerFd()
        self._channel = Channel(loop, self._timerfd.fileno())
        self._timers: list[tuple[Timestamp, int, Timer]] = []
        self._active: set[TimerId] = set()
        self._calling_expired = False
        self._canceling: set[TimerId] = set()
        self._channel.read_callback = self._handle_read
        self._channel.enable_reading()

    def __enter__(self) -> TimerQueue:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._channel.disable_all()
        self._channel.remove()
        self._timerfd.close()

    def add_timer(self, cb: TimerCallback, when: Timestamp, interval: float) -> TimerId:
        """Schedule ``cb`` at ``when``, repeating every ``interval`` seconds if positive."""
        timer = Timer(cb, when, interval)
        self.loop.run_in_loop(lambda: self._add_timer_in_loop(timer))
        return TimerId(timer, timer.sequence)

    def cancel(self, timer_id: TimerId) -> None:
        self.loop.run_in_loop(lambda: self._cancel_in_loop(timer_id))

    def _assert_in_loop_thread(self, where: str) -> None:
        if not self.loop.is_in_loop_thread():
            log_fatal("%s:%s : the thread is not in loop\n", __name__, where)

    def _check_consistent(self, where: str) -> None:
        if len(self._timers) != len(self._active):
            log_fatal("TimerQueue.%s: timers and active timers differ in number\n", where)

    def _add_timer_in_loop(self, timer: Timer) -> None:
        self._assert_in_loop_thread("add_timer")
        if self._insert(timer):
            self._timerfd.arm(how_much_time_from_now(self._timers[0][0]))

    def _cancel_in_loop(self, timer_id: TimerId) -> None:
        self._assert_in_loop_thread("cancel")
        self._check_consistent("cancel")
        if timer_id in self._active:
            for position, (_, _, timer) in enumerate(self._timers):
                if timer is timer_id.timer:
                    del self._timers[position]
                    break
            self._active.discard(timer_id)
        elif self._calling_expired:
            self._canceling.add(timer_id)

    def _handle_read(self, receive_time: Timestamp) -> None:
        self._assert_in_loop_thread("handle_read")
        now = Timestamp.now()
        howmany = self._timerfd.read()
        log_info("TimerQueue:%s : %d at %s\n", "handle_read", howmany, now.to_string())
        if howmany == 0:
            log_error("%s:%s read no expirations\n", __name__, "handle_read")

        expired = self._get_expired(now)
        self._calling_expired = True
        self._canceling.clear()
        try:
            for timer in expired:
                timer.run()
        finally:
            self._calling_expired = False
        self._reset(expired, now)

    def _get_expired(self, now: Timestamp) -> list[Timer]:
        self._check_consistent("get_expired")
        end = bisect.bisect_left(self._timers, (now,))
        expired = [timer for _, _, timer in self._timers[:end]]
        del self._timers[:end]
        for timer in expired:
            timer_id = TimerId(timer, timer.sequence)
            if timer_id not in self._active:
                log_fatal("TimerQueue.get_expired: an expired timer was not active\n")
            self._active.discard(timer_id)
        self._check_consistent("get_expired")
        return expired

    def _reset(self, expired: list[Timer], now: Timestamp) -> None:
        for timer in expired:
            if timer.repeat and TimerId(timer, timer.sequence) not in self._canceling:
                timer.restart(now)
                self._insert(timer)
        if self._timers:
            next_expire = self._timers[0][0]
            if next_expire.valid():
                self._timerfd.arm(how_much_time_from_now(next_expire))

    def _insert(self, timer: Timer) -> bool:
        """Add ``timer``; return True when it became the earliest."""
        self._assert_in_loop_thread("insert")
        self._check_consistent("insert")
        when = timer.expiration
        earliest_changed = not self._timers or when < self._timers[0][0]
        bisect.insort(self._timers, (when, timer.sequence, timer))
        self._active.add(TimerId(timer, timer.sequence))
        return earliest_changed