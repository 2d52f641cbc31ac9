"""One client connection that echoes back whatever it receives."""

from __future__ import annotations

import threading
from typing import Callable, Optional

from .buffer import Buffer
from .channel import Channel
from .eventloop import EventLoop
from .sockets import Socket

READ_CHUNK = 1024


class Connection:
    """Reads everything the client has sent and writes it straight back.

    The socket must be non-blocking; the channel is edge-triggered, so each
    read event drains the socket completely. When the client goes away,
    ``delete_connection_callback`` is called with the descriptor.
    """

    def __init__(self, loop: EventLoop, sock: Socket, use_thread_pool: bool = True) -> None:
        self.loop = loop
        self.sock = sock
        self.fd = sock.fileno()
        self.read_buffer = Buffer()
        self.delete_connection_callback: Optional[Callable[[int], None]] = None
        self._lock = threading.Lock()
        self.channel = Channel(loop, sock, use_thread_pool)
        self.channel.read_callback = self.echo
        self.channel.enable_read()
        self.channel.use_edge_triggered()

    def _disconnected(self) -> None:
        if self.delete_connection_callback is None:
            self.close()
        else:
            self.delete_connection_callback(self.fd)

    def echo(self) -> None:
        """Drain the socket and send the collected message back."""
        with self._lock:
            while True:
                try:
                    data = self.sock.raw.recv(READ_CHUNK)
                except InterruptedError:
                    print("continue reading")
                    continue
                except BlockingIOError:
                    print(f"message from client fd {self.fd}: {self.read_buffer}")
                    self.send()
                    self.read_buffer.clear()
                    return
                except OSError:
                    print("Connection reset by peer")
                    break
                if not data:
                    print(f"EOF, client fd {self.fd} disconnected")
                    break
                self.read_buffer.append(data)
        self._disconnected()

    def send(self) -> int:
        """Write the buffered message; return how many bytes went out."""
        data = bytes(self.read_buffer)
        sent = 0
        while sent < len(data):
            try:
                sent += self.sock.raw.send(data[sent:])
            except InterruptedError:
                continue
            except (BlockingIOError, OSError):
                break
        return sent

    def close(self) -> None:
        """Unregister and close the client socket."""
        self.channel.close()
        self.sock.close()

    def __repr__(self) -> str:
        return f"Connection(fd={self.fd})"