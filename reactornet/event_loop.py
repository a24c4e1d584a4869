"""The reactor: one event loop per thread, dispatching I/O, timers and queued work."""

from __future__ import annotations

import os
import threading
from typing import Callable, Optional

from reactornet.channel import Channel
from reactornet.current_thread import tid
from reactornet.logger import log_debug, log_error, log_fatal, log_info
from reactornet.poller import EPollPoller, Poller, new_default_poller
from reactornet.timer import TimerCallback, TimerId
from reactornet.timer_queue import TimerQueue
from reactornet.timestamp import Timestamp, add_time

Functor = Callable[[], None]

POLL_TIME_MS = 10000

_local = threading.local()


def _create_eventfd() -> int:
    try:
        return os.eventfd(0, os.EFD_NONBLOCK | os.EFD_CLOEXEC)
    except OSError as exc:
        log_fatal("%s:%s eventfd error:%d\n", __name__, "_create_eventfd", exc.errno or 0)
        raise


class EventLoop:
    """Runs in the thread that created it; at most one loop per thread."""

    def __init__(self) -> None:
        self._looping = False
        self._quit = False
        self._calling_pending = False
        self._closed = False
        self.thread_id = tid()
        self.poll_return_time = Timestamp()
        self._pending: list[Functor] = []
        self._lock = threading.Lock()
        self._active_channels: list[Channel] = []

        existing = getattr(_local, "loop", None)
        if existing is not None:
            log_fatal(
                "%s:%s Another EventLoop %r exists in this thread %d\n",
                __name__, "__init__", existing, self.thread_id,
            )

        poller: Optional[Poller] = new_default_poller(self)
        if poller is None:
            log_fatal("%s:%s no poller backend available\n", __name__, "__init__")
        self._poller = poller
        self._timer_queue = TimerQueue(self)
        self._wakeup_fd = _create_eventfd()
        self._wakeup_channel = Channel(self, self._wakeup_fd)
        log_debug("%s:%s EventLoop created %r in thread %d\n", __name__, "__init__", self, self.thread_id)
        _local.loop = self

        self._wakeup_channel.read_callback = self._handle_read
        self._wakeup_channel.enable_reading()

    def __enter__(self) -> EventLoop:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<EventLoop thread={self.thread_id} at {id(self):#x}>"

    def close(self) -> None:
        """Release the loop's descriptors and free its thread for a new loop."""
        if self._closed:
            return
        self._closed = True
        self._wakeup_channel.disable_all()
        self._wakeup_channel.remove()
        os.close(self._wakeup_fd)
        self._timer_queue.close()
        if isinstance(self._poller, EPollPoller):
            self._poller.close()
        if getattr(_local, "loop", None) is self:
            _local.loop = None

    def loop(self) -> None:
        """Poll and dispatch until :meth:`quit` is called."""
        self._looping = True
        self._quit = False
        log_info("EventLoop %r start looping.\n", self)
        while not self._quit:
            self._active_channels.clear()
            self.poll_return_time = self._poller.poll(POLL_TIME_MS, self._active_channels)
            for channel in self._active_channels:
                channel.handle_event(self.poll_return_time)
            self._do_pending_functors()
        log_info("EventLoop %r stop looping.\n", self)
        self._looping = False

    def quit(self) -> None:
        self._quit = True
        if not self.is_in_loop_thread():
            self.wakeup()

    def run_in_loop(self, cb: Functor) -> None:
        """Run ``cb`` now if called from the loop's thread, else queue it."""
        if self.is_in_loop_thread():
            cb()
        else:
            self.queue_in_loop(cb)

    def queue_in_loop(self, cb: Functor) -> None:
        """Queue ``cb`` to run in the loop's thread after the next poll."""
        with self._lock:
            self._pending.append(cb)
        if not self.is_in_loop_thread() or self._calling_pending:
            self.wakeup()

    def run_at(self, time: Timestamp, cb: TimerCallback) -> TimerId:
        return self._timer_queue.add_timer(cb, time, 0.0)

    def run_after(self, delay: float, cb: TimerCallback) -> TimerId:
        return self.run_at(add_time(Timestamp.now(), delay), cb)

    def run_every(self, interval: float, cb: TimerCallback) -> TimerId:
        when = add_time(Timestamp.now(), interval)
        return self._timer_queue.add_timer(cb, when, interval)

    def cancel(self, timer_id: TimerId) -> None:
        self._timer_queue.cancel(timer_id)

    def wakeup(self) -> None:
        """Make a blocked poll in the loop's thread return."""
        try:
            os.eventfd_write(self._wakeup_fd, 1)
        except OSError:
            log_error("%s:%s writes 0 bytes instead of 8\n", __name__, "wakeup")

    def update_channel(self, channel: Channel) -> None:
        self._poller.update_channel(channel)

    def remove_channel(self, channel: Channel) -> None:
        self._poller.remove_channel(channel)

    def has_channel(self, channel: Channel) -> bool:
        return self._poller.has_channel(channel)

    def is_in_loop_thread(self) -> bool:
        return self.thread_id == tid()

    def _handle_read(self, receive_time: Timestamp) -> None:
        try:
            os.eventfd_read(self._wakeup_fd)
        except OSError:
            log_error("%s:%s reads 0 bytes instead of 8\n", __name__, "_handle_read")

    def _do_pending_functors(self) -> None:
        self._calling_pending = True
        try:
            with self._lock:
                functors, self._pending = self._pending, []
            for functor in functors:
                functor()
        finally:
            self._calling_pending = False