"""A TCP socket wrapper whose failures raise SocketError."""

from __future__ import annotations

import errno
import os
import select
import socket
from typing import Optional, Tuple, Union

from .address import InetAddress

_IN_PROGRESS = {errno.EINPROGRESS, errno.EALREADY, errno.EWOULDBLOCK, errno.EINTR}


class SocketError(OSError):
    """A socket operation failed."""


def _failure(message: str, exc: OSError) -> SocketError:
    detail = exc.strerror or str(exc)
    return SocketError(exc.errno, f"{message}: {detail}")


class Socket:
    """An IPv4 TCP socket.

    Built with no argument it opens a new socket; it can also take over an
    existing ``socket.socket`` or a file descriptor.
    """

    def __init__(self, sock: Union[socket.socket, int, None] = None) -> None:
        if sock is None:
            try:
                self.raw = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            except OSError as exc:
                raise _failure("socket create error", exc) from exc
        elif isinstance(sock, socket.socket):
            self.raw = sock
        else:
            if sock < 0:
                raise SocketError(errno.EBADF, "socket create error: bad file descriptor")
            try:
                self.raw = socket.socket(fileno=sock)
            except OSError as exc:
                raise _failure("socket create error", exc) from exc

    def bind(self, address: InetAddress) -> None:
        """Bind to ``address``."""
        try:
            self.raw.bind(address.as_tuple())
        except OSError as exc:
            raise _failure("socket bind error", exc) from exc

    def listen(self) -> None:
        """Start listening with the system's largest backlog."""
        try:
            self.raw.listen(socket.SOMAXCONN)
        except OSError as exc:
            raise _failure("socket listen error", exc) from exc

    def accept(self) -> Tuple["Socket", InetAddress]:
        """Wait for a client and return its socket and address.

        On a non-blocking socket this keeps waiting until a client arrives.
        """
        while True:
            try:
                conn, peer = self.raw.accept()
            except (BlockingIOError, InterruptedError):
                select.select([self.raw], [], [])
                continue
            except OSError as exc:
                raise _failure("socket accept error", exc) from exc
            return Socket(conn), InetAddress.from_sockaddr(peer)

    def connect(self, address: InetAddress) -> None:
        """Connect to ``address``, waiting for completion even when non-blocking."""
        target = address.as_tuple()
        if self.raw.getblocking():
            try:
                self.raw.connect(target)
            except OSError as exc:
                raise _failure("socket connect error", exc) from exc
            return
        code = self.raw.connect_ex(target)
        while code in _IN_PROGRESS:
            select.select([], [self.raw], [])
            code = self.raw.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        if code not in (0, errno.EISCONN):
            raise SocketError(code, f"socket connect error: {os.strerror(code)}")

    def set_nonblocking(self) -> None:
        """Switch the socket to non-blocking mode."""
        self.raw.setblocking(False)

    @property
    def local_address(self) -> InetAddress:
        """The address the socket is bound to."""
        return InetAddress.from_sockaddr(self.raw.getsockname())

    def fileno(self) -> int:
        """The file descriptor, or -1 once closed."""
        return self.raw.fileno()

    @property
    def closed(self) -> bool:
        return self.raw.fileno() == -1

    def close(self) -> None:
        """Close the socket; closing twice is harmless."""
        self.raw.close()

    def __enter__(self) -> "Socket":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Socket(fd={self.fileno()})"


def _unused(_: Optional[object] = None) -> None:  # pragma: no cover
    return None