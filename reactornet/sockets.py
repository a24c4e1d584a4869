"""Thin owner of a listening or connected TCP socket."""

from __future__ import annotations

import socket

from reactornet.inet_address import InetAddress
from reactornet.logger import log_error, log_fatal

_LISTEN_BACKLOG = 1024


class Socket:
    """Owns a socket object and closes it when done."""

    def __init__(self, sock: socket.socket) -> None:
        self.sock = sock

    def __enter__(self) -> Socket:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def fd(self) -> int:
        return self.sock.fileno()

    def bind_address(self, localaddr: InetAddress) -> None:
        """Bind to ``localaddr``; failure is fatal."""
        try:
            self.sock.bind(localaddr.sockaddr())
        except OSError:
            log_fatal("%s:%s bind sockfd:%d fail\n", __name__, "bind_address", self.fd())

    def listen(self) -> None:
        """Start listening; failure is fatal."""
        try:
            self.sock.listen(_LISTEN_BACKLOG)
        except OSError:
            log_fatal("%s:%s listen sockfd:%d fail\n", __name__, "listen", self.fd())

    def accept(self) -> tuple[socket.socket, InetAddress]:
        """Accept a connection, returned non-blocking with its peer address.

        Raises :class:`OSError` when nothing can be accepted.
        """
        conn, addr = self.sock.accept()
        conn.setblocking(False)
        return conn, InetAddress.from_sockaddr(addr)

    def shutdown_write(self) -> None:
        try:
            self.sock.shutdown(socket.SHUT_WR)
        except OSError:
            log_error("%s:%s shutdownWrite error.\n", __name__, "shutdown_write")

    def set_tcp_no_delay(self, on: bool) -> None:
        self.sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1 if on else 0)

    def set_reuse_addr(self, on: bool) -> None:
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1 if on else 0)

    def set_reuse_port(self, on: bool) -> None:
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1 if on else 0)

    def set_keep_alive(self, on: bool) -> None:
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1 if on else 0)

    def close(self) -> None:
        self.sock.close()