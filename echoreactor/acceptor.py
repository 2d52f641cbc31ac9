"""Listening socket that hands each accepted client to a callback."""

from __future__ import annotations

from typing import Callable, Optional

from .address import InetAddress
from .channel import Channel
from .eventloop import EventLoop
from .sockets import Socket

DEFAULT_ADDRESS = InetAddress("127.0.0.1", 1234)


class Acceptor:
    """Listens on ``address`` and accepts clients when the loop reports it readable.

    Accepted sockets are made non-blocking and passed to
    ``new_connection_callback``. The accept itself always runs on the loop
    thread, never on a thread pool.
    """

    def __init__(self, loop: EventLoop, address: InetAddress = DEFAULT_ADDRESS) -> None:
        self.loop = loop
        self.new_connection_callback: Optional[Callable[[Socket], None]] = None
        self.sock = Socket()
        try:
            self.sock.bind(address)
            self.sock.listen()
        except Exception:
            self.sock.close()
            raise
        self.channel = Channel(loop, self.sock, use_thread_pool=False)
        self.channel.read_callback = self.accept_connection
        self.channel.enable_read()

    @property
    def address(self) -> InetAddress:
        """The address actually listened on."""
        return self.sock.local_address

    def accept_connection(self) -> Socket:
        """Accept one client and hand it on; return its socket.

        Without a callback to take it, the client socket is closed.
        """
        client, peer = self.sock.accept()
        print(f"new client fd {client.fileno()}! IP: {peer.ip} Port: {peer.port}")
        client.set_nonblocking()
        if self.new_connection_callback is None:
            client.close()
        else:
            self.new_connection_callback(client)
        return client

    def close(self) -> None:
        """Stop listening and release the socket."""
        self.channel.close()
        self.sock.close()