"""IPv4 socket addresses."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Sequence, Tuple


@dataclass(frozen=True)
class InetAddress:
    """An IPv4 address and TCP port; defaults to 0.0.0.0:0."""

    ip: str = "0.0.0.0"
    port: int = 0

    def __post_init__(self) -> None:
        normalized = str(ipaddress.IPv4Address(self.ip))
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ValueError(f"port must be an integer, got {self.port!r}")
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port out of range: {self.port}")
        object.__setattr__(self, "ip", normalized)

    @classmethod
    def from_sockaddr(cls, sockaddr: Sequence) -> "InetAddress":
        """Build from a ``(host, port)`` pair as returned by the socket module."""
        return cls(sockaddr[0], sockaddr[1])

    def as_tuple(self) -> Tuple[str, int]:
        """Return the ``(host, port)`` pair the socket module expects."""
        return (self.ip, self.port)

    def __str__(self) -> str:
        return f"{self.ip}:{self.port}"