"""Growable byte buffer with a cheap prepend area, used for socket I/O."""

from __future__ import annotations

import os


class Buffer:
    """A byte buffer split into prependable, readable and writable regions.

    ``| prependable | readable | writable |``
    """

    CHEAP_PREPEND = 8
    INITIAL_SIZE = 1024
    _EXTRA_SIZE = 65536

    def __init__(self, initial_size: int = INITIAL_SIZE) -> None:
        self._data = bytearray(self.CHEAP_PREPEND + initial_size)
        self._reader = self.CHEAP_PREPEND
        self._writer = self.CHEAP_PREPEND

    def __len__(self) -> int:
        return self.readable_bytes()

    def readable_bytes(self) -> int:
        return self._writer - self._reader

    def writable_bytes(self) -> int:
        return len(self._data) - self._writer

    def prependable_bytes(self) -> int:
        return self._reader

    def peek(self) -> bytes:
        """Return a copy of the readable data without consuming it."""
        return bytes(self._data[self._reader:self._writer])

    def retrieve(self, length: int) -> None:
        """Consume ``length`` readable bytes; consuming all resets the buffer."""
        if length < 0:
            raise ValueError("length must not be negative")
        if length < self.readable_bytes():
            self._reader += length
        else:
            self.retrieve_all()

    def retrieve_all(self) -> None:
        self._reader = self.CHEAP_PREPEND
        self._writer = self.CHEAP_PREPEND

    def retrieve_all_as_string(self) -> bytes:
        """Remove and return all readable bytes."""
        return self.retrieve_as_string(self.readable_bytes())

    def retrieve_as_string(self, length: int) -> bytes:
        """Remove and return the first ``length`` readable bytes."""
        result = bytes(self._data[self._reader:self._reader + length])
        self.retrieve(length)
        return result

    def ensure_writable_bytes(self, length: int) -> None:
        if self.writable_bytes() < length:
            self._make_space(length)

    def append(self, data: bytes | bytearray | memoryview | str) -> None:
        """Copy ``data`` into the writable region, growing it if needed."""
        chunk = data.encode() if isinstance(data, str) else bytes(data)
        size = len(chunk)
        self.ensure_writable_bytes(size)
        self._data[self._writer:self._writer + size] = chunk
        self._writer += size

    def _make_space(self, length: int) -> None:
        if self.writable_bytes() + self.prependable_bytes() < length + self.CHEAP_PREPEND:
            self._data.extend(bytes(self._writer + length - len(self._data)))
        else:
            readable = self.readable_bytes()
            start = self.CHEAP_PREPEND
            self._data[start:start + readable] = self._data[self._reader:self._writer]
            self._reader = start
            self._writer = start + readable

    def read_fd(self, fd: int) -> int:
        """Read from ``fd`` into the buffer and return the number of bytes read.

        Data that does not fit the writable region goes through a 64 KiB
        spill area and is appended afterwards. Raises :class:`OSError`.
        """
        extra = bytearray(self._EXTRA_SIZE)
        writable = self.writable_bytes()
        with memoryview(self._data) as view, view[self._writer:] as window:
            buffers = [window, extra] if writable < len(extra) else [window]
            n = os.readv(fd, buffers)
        if n <= writable:
            self._writer += n
        else:
            self._writer = len(self._data)
            self.append(extra[:n - writable])
        return n

    def write_fd(self, fd: int) -> int:
        """Write the readable data to ``fd`` without consuming it. Raises :class:`OSError`."""
        return os.write(fd, self.peek())