"""An event loop running in a thread of its own."""

from __future__ import annotations

import threading
from typing import Callable, Optional

from reactornet.event_loop import EventLoop
from reactornet.thread import Thread

ThreadInitCallback = Callable[[EventLoop], None]


class EventLoopThread:
    """Creates an :class:`EventLoop` in a new thread and runs it until closed."""

    def __init__(self, callback: Optional[ThreadInitCallback] = None, name: str = "") -> None:
        self.loop: Optional[EventLoop] = None
        self.exiting = False
        self._callback = callback
        self._cond = threading.Condition()
        self._error: Optional[BaseException] = None
        self.thread = Thread(self._thread_func, name)

    def __enter__(self) -> EventLoopThread:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def start_loop(self) -> EventLoop:
        """Start the thread and return its loop once it exists."""
        self.thread.start()
        with self._cond:
            self._cond.wait_for(lambda: self.loop is not None or self._error is not None)
            if self._error is not None:
                raise RuntimeError("event loop thread failed to start") from self._error
            return self.loop

    def close(self) -> None:
        """Stop the loop, if running, and wait for its thread."""
        self.exiting = True
        with self._cond:
            loop = self.loop
        if loop is not None:
            loop.quit()
        if self.thread.started and not self.thread.joined:
            self.thread.join()

    def _thread_func(self) -> None:
        try:
            loop = EventLoop()
        except BaseException as exc:
            with self._cond:
                self._error = exc
                self._cond.notify_all()
            raise
        try:
            if self._callback is not None:
                self._callback(loop)
            with self._cond:
                self.loop = loop
                self._cond.notify_all()
            loop.loop()
        except BaseException as exc:
            with self._cond:
                self._error = exc
                self._cond.notify_all()
            raise
        finally:
            with self._cond:
                self.loop = None
            loop.close()