"""IPv4 socket address value."""

from __future__ import annotations

import socket

_INADDR_NONE = "255.255.255.255"


def _normalize_ip(ip: str) -> str:
    try:
        return socket.inet_ntoa(socket.inet_aton(ip))
    except (OSError, ValueError):
        return _INADDR_NONE


class InetAddress:
    """An IPv4 address and port; unparsable addresses become 255.255.255.255."""

    __slots__ = ("_ip", "_port")

    def __init__(self, port: int = 8080, ip: str = "127.0.0.1") -> None:
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        self._port = port
        self._ip = _normalize_ip(ip)

    @classmethod
    def from_sockaddr(cls, addr: tuple) -> InetAddress:
        """Build from a ``(host, port)`` pair as returned by the socket module."""
        host, port = addr[0], addr[1]
        return cls(port, host)

    def to_ip(self) -> str:
        return self._ip

    def to_ip_port(self) -> str:
        return f"{self._ip}:{self._port}"

    def to_port(self) -> int:
        return self._port

    def sockaddr(self) -> tuple[str, int]:
        """Return the ``(host, port)`` pair accepted by the socket module."""
        return (self._ip, self._port)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InetAddress):
            return NotImplemented
        return self.sockaddr() == other.sockaddr()

    def __hash__(self) -> int:
        return hash(self.sockaddr())

    def __repr__(self) -> str:
        return f"InetAddress({self._port!r}, {self._ip!r})"