"""I/O multiplexing: the poller interface and its epoll implementation."""

from __future__ import annotations

import errno
import os
import select
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from reactornet.logger import log_debug, log_error, log_fatal, log_info
from reactornet.timestamp import Timestamp

if TYPE_CHECKING:
    from reactornet.channel import Channel

INDEX_NEW = -1
INDEX_ADDED = 1
INDEX_DELETED = 2

USE_POLL_ENV = "REACTORNET_USE_POLL"


class Poller(ABC):
    """Watches channels' descriptors for the loop that owns it."""

    def __init__(self, loop: Any) -> None:
        self.owner_loop = loop
        self.channels: dict[int, Channel] = {}

    @abstractmethod
    def poll(self, timeout_ms: int, active_channels: list) -> Timestamp:
        """Wait for events, append ready channels, return the wake-up time."""

    @abstractmethod
    def update_channel(self, channel: Channel) -> None:
        """Register or modify ``channel``'s interest set."""

    @abstractmethod
    def remove_channel(self, channel: Channel) -> None:
        """Forget ``channel`` entirely."""

    def has_channel(self, channel: Channel) -> bool:
        return self.channels.get(channel.fd) is channel


class _Op(Enum):
    ADD = "add"
    MOD = "mod"
    DEL = "del"


class EPollPoller(Poller):
    """Level-triggered epoll poller."""

    INIT_EVENT_LIST_SIZE = 16

    def __init__(self, loop: Any) -> None:
        super().__init__(loop)
        try:
            self._epoll = select.epoll()
        except OSError as exc:
            log_fatal("%s:%s epoll_create error:%d \n", __name__, "__init__", exc.errno or 0)
        self._max_events = self.INIT_EVENT_LIST_SIZE

    def __enter__(self) -> EPollPoller:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self._epoll.close()

    def poll(self, timeout_ms: int, active_channels: list) -> Timestamp:
        log_info("func=%s => fd total count:%d\n", "poll", len(self.channels))
        timeout = -1 if timeout_ms < 0 else timeout_ms / 1000
        try:
            ready = self._epoll.poll(timeout, self._max_events)
        except OSError as exc:
            now = Timestamp.now()
            if exc.errno != errno.EINTR:
                log_error("%s:%s error: %d", __name__, "poll", exc.errno or 0)
            return now
        now = Timestamp.now()
        if ready:
            log_info("%d events happened\n", len(ready))
            self._fill_active_channels(ready, active_channels)
            if len(ready) == self._max_events:
                self._max_events *= 2
        else:
            log_debug("%s:%s timeout!\n", __name__, "poll")
        return now

    def _fill_active_channels(self, ready: list, active_channels: list) -> None:
        for fd, mask in ready:
            channel = self.channels.get(fd)
            if channel is None:
                continue
            channel.revents = mask
            active_channels.append(channel)

    def update_channel(self, channel: Channel) -> None:
        index = channel.index
        log_info(
            "func=%s => fd=%d events=%d index=%d\n",
            "update_channel", channel.fd, channel.events, index,
        )
        if index in (INDEX_NEW, INDEX_DELETED):
            if index == INDEX_NEW:
                self.channels[channel.fd] = channel
            elif self.channels.get(channel.fd) is not channel:
                log_fatal("%s:%s channel fd=%d is not registered\n", __name__, "update_channel", channel.fd)
            channel.index = INDEX_ADDED
            self._update(_Op.ADD, channel)
        elif channel.is_none_event():
            self._update(_Op.DEL, channel)
            channel.index = INDEX_DELETED
        else:
            self._update(_Op.MOD, channel)

    def remove_channel(self, channel: Channel) -> None:
        self.channels.pop(channel.fd, None)
        log_info("func=%s => fd=%d\n", "remove_channel", channel.fd)
        if channel.index == INDEX_ADDED:
            self._update(_Op.DEL, channel)
        channel.index = INDEX_NEW

    def _update(self, operation: _Op, channel: Channel) -> None:
        fd = channel.fd
        try:
            if operation is _Op.ADD:
                self._epoll.register(fd, channel.events)
            elif operation is _Op.MOD:
                self._epoll.modify(fd, channel.events)
            else:
                self._epoll.unregister(fd)
        except OSError as exc:
            code = exc.errno or 0
            if operation is _Op.DEL:
                log_error("%s:%s epoll_ctl del error:%d\n", __name__, "_update", code)
            else:
                log_fatal("%s:%s epoll_ctl add/mod error:%d\n", __name__, "_update", code)


def new_default_poller(loop: Any) -> Optional[Poller]:
    """Return an epoll poller, or None when the poll backend is requested."""
    if USE_POLL_ENV in os.environ:
        return None
    return EPollPoller(loop)