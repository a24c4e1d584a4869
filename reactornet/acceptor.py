"""Accepts new TCP connections on a listening socket inside an event loop."""

from __future__ import annotations

import errno
import socket
from typing import Callable, Optional

from reactornet.channel import Channel
from reactornet.event_loop import EventLoop
from reactornet.inet_address import InetAddress
from reactornet.logger import log_error, log_fatal
from reactornet.sockets import Socket
from reactornet.timestamp import Timestamp

NewConnectionCallback = Callable[[socket.socket, InetAddress], None]


def create_nonblocking() -> socket.socket:
    """Create a non-blocking, close-on-exec IPv4 TCP socket; failure is fatal."""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
    except OSError as exc:
        log_fatal("%s:%s listen socket create err:%d\n", __name__, "create_nonblocking", exc.errno or 0)
        raise
    sock.setblocking(False)
    return sock


class Acceptor:
    """Listens on an address and hands each accepted connection to a callback.

    Without a callback, accepted connections are closed at once.
    """

    def __init__(self, loop: EventLoop, listen_addr: InetAddress, reuseport: bool) -> None:
        self.loop = loop
        self.listening = False
        self.new_connection_callback: Optional[NewConnectionCallback] = None
        self.accept_socket = Socket(create_nonblocking())
        try:
            self.accept_socket.set_reuse_addr(reuseport)
            self.accept_socket.set_reuse_port(reuseport)
            self.accept_socket.bind_address(listen_addr)
        except BaseException:
            self.accept_socket.close()
            raise
        self.accept_channel = Channel(loop, self.accept_socket.fd())
        self.accept_channel.read_callback = self._handle_read

    def __enter__(self) -> Acceptor:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def listen(self) -> None:
        self.listening = True
        self.accept_socket.listen()
        self.accept_channel.enable_reading()

    def close(self) -> None:
        """Stop watching the listening socket and close it."""
        self.accept_channel.disable_all()
        self.accept_channel.remove()
        self.accept_socket.close()

    def _handle_read(self, receive_time: Timestamp) -> None:
        try:
            conn, peer = self.accept_socket.accept()
        except OSError as exc:
            log_error("%s:%s accept err:%d\n", __name__, "_handle_read", exc.errno or 0)
            if exc.errno == errno.EMFILE:
                log_error("%s:%s sockfd reached limit\n", __name__, "_handle_read")
            return
        if self.new_connection_callback is not None:
            self.new_connection_callback(conn, peer)
        else:
            conn.close()