"""Named threads that report their native id once running."""

from __future__ import annotations

import threading
from typing import Callable

from reactornet import current_thread

ThreadFunc = Callable[[], None]


class Thread:
    """Runs ``func`` in a new daemon thread; :meth:`start` returns once its id is known."""

    _created = 0
    _created_lock = threading.Lock()

    def __init__(self, func: ThreadFunc, name: str = "") -> None:
        self.started = False
        self.joined = False
        self.tid = 0
        self._func = func
        self._thread: threading.Thread | None = None
        with Thread._created_lock:
            Thread._created += 1
            number = Thread._created
        self.name = name or f"Thread{number}"

    def __repr__(self) -> str:
        return f"Thread(name={self.name!r}, tid={self.tid}, started={self.started})"

    def start(self) -> None:
        """Start the thread and wait until it has recorded its native id."""
        self.started = True
        ready = threading.Semaphore(0)

        def run() -> None:
            self.tid = current_thread.tid()
            ready.release()
            self._func()

        self._thread = threading.Thread(target=run, name=self.name, daemon=True)
        self._thread.start()
        ready.acquire()

    def join(self) -> None:
        if self._thread is None:
            raise RuntimeError("cannot join a thread that was never started")
        self.joined = True
        self._thread.join()

    @classmethod
    def num_created(cls) -> int:
        with cls._created_lock:
            return cls._created