"""Reactor-pattern TCP echo server with a thread pool, client and benchmark."""

__version__ = "0.1.0"

__all__ = [
    "acceptor",
    "address",
    "bench",
    "buffer",
    "channel",
    "client",
    "connection",
    "eventloop",
    "poller",
    "server",
    "sockets",
    "threadpool",
]