"""A file descriptor's interest set and the callbacks fired for its events."""

from __future__ import annotations

import weakref
from typing import Any, Callable, Optional

from reactornet.logger import log_info
from reactornet.timestamp import Timestamp

# Event bits as defined by the Linux epoll interface.
EPOLLIN = 0x001
EPOLLPRI = 0x002
EPOLLOUT = 0x004
EPOLLERR = 0x008
EPOLLHUP = 0x010

NONE_EVENT = 0
READ_EVENT = EPOLLIN | EPOLLPRI
WRITE_EVENT = EPOLLOUT

EventCallback = Callable[[], None]
ReadEventCallback = Callable[[Timestamp], None]


class Channel:
    """Binds a descriptor to the loop that watches it and to its event handlers.

    ``events`` is the interest set, ``revents`` what the poller saw, and
    ``index`` the poller's bookkeeping state for this channel.
    """

    def __init__(self, loop: Any, fd: int) -> None:
        self.loop = loop
        self.fd = fd
        self.events = NONE_EVENT
        self.revents = 0
        self.index = -1
        self.read_callback: Optional[ReadEventCallback] = None
        self.write_callback: Optional[EventCallback] = None
        self.close_callback: Optional[EventCallback] = None
        self.error_callback: Optional[EventCallback] = None
        self._tie: Optional[weakref.ref] = None

    def __repr__(self) -> str:
        return f"Channel(fd={self.fd}, events={self.events}, index={self.index})"

    def tie(self, obj: object) -> None:
        """Skip event handling once ``obj`` has been garbage collected."""
        self._tie = weakref.ref(obj)

    def handle_event(self, receive_time: Timestamp) -> None:
        """Dispatch ``revents`` to the registered callbacks."""
        if self._tie is not None:
            guard = self._tie()
            if guard is None:
                return
            self._handle_event_with_guard(receive_time)
            del guard
        else:
            self._handle_event_with_guard(receive_time)

    def _handle_event_with_guard(self, receive_time: Timestamp) -> None:
        revents = self.revents
        log_info("channel handleEvent revents:%d\n", revents)
        if (revents & EPOLLHUP) and not (revents & EPOLLIN):
            if self.close_callback:
                self.close_callback()
        if revents & EPOLLERR:
            if self.error_callback:
                self.error_callback()
        if revents & (EPOLLIN | EPOLLPRI):
            if self.read_callback:
                self.read_callback(receive_time)
        if revents & EPOLLOUT:
            if self.write_callback:
                self.write_callback()

    def enable_reading(self) -> None:
        self.events |= READ_EVENT
        self._update()

    def disable_reading(self) -> None:
        self.events &= ~READ_EVENT
        self._update()

    def enable_writing(self) -> None:
        self.events |= WRITE_EVENT
        self._update()

    def disable_writing(self) -> None:
        self.events &= ~WRITE_EVENT
        self._update()

    def disable_all(self) -> None:
        self.events = NONE_EVENT
        self._update()

    def is_none_event(self) -> bool:
        return self.events == NONE_EVENT

    def is_writing(self) -> bool:
        return bool(self.events & WRITE_EVENT)

    def is_reading(self) -> bool:
        return bool(self.events & READ_EVENT)

    def remove(self) -> None:
        """Detach this channel from its loop's poller."""
        self.loop.remove_channel(self)

    def _update(self) -> None:
        self.loop.update_channel(self)