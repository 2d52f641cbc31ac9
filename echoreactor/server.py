"""Echo server built from an acceptor and per-client connections."""

from __future__ import annotations

import argparse
import os
import threading
from typing import Dict, List, Optional, Sequence

from .acceptor import DEFAULT_ADDRESS, Acceptor
from .address import InetAddress
from .connection import Connection
from .eventloop import EventLoop
from .sockets import Socket
from .threadpool import ThreadPool


class Server:
    """Accepts clients on ``loop`` and echoes their messages.

    With ``sub_reactors`` at 0 every connection lives on the main loop and
    its callbacks go to that loop's thread pool, if it has one. With a
    positive count the server starts that many sub-loops on their own
    threads and spreads connections over them by descriptor.
    """

    def __init__(
        self,
        loop: EventLoop,
        address: InetAddress = DEFAULT_ADDRESS,
        sub_reactors: int = 0,
    ) -> None:
        if sub_reactors < 0:
            raise ValueError(f"sub_reactors must not be negative, got {sub_reactors}")
        self.loop = loop
        self.connections: Dict[int, Connection] = {}
        self._lock = threading.Lock()
        self.acceptor = Acceptor(loop, address)
        self.acceptor.new_connection_callback = self.new_connection
        self.sub_reactors: List[EventLoop] = [EventLoop() for _ in range(sub_reactors)]
        self._pool: Optional[ThreadPool] = None
        if self.sub_reactors:
            self._pool = ThreadPool(sub_reactors)
            for sub in self.sub_reactors:
                self._pool.add(sub.loop)

    @property
    def address(self) -> InetAddress:
        """The address the server listens on."""
        return self.acceptor.address

    def new_connection(self, sock: Socket) -> Optional[Connection]:
        """Take over an accepted client socket."""
        fd = sock.fileno()
        if fd == -1:
            return None
        if self.sub_reactors:
            conn = Connection(
                self.sub_reactors[fd % len(self.sub_reactors)], sock, use_thread_pool=False
            )
        else:
            conn = Connection(
                self.loop, sock, use_thread_pool=self.loop.thread_pool is not None
            )
        conn.delete_connection_callback = self.delete_connection
        with self._lock:
            self.connections[fd] = conn
        return conn

    def delete_connection(self, fd: int) -> None:
        """Forget and close the connection on ``fd``, if there is one."""
        if fd == -1:
            return
        with self._lock:
            conn = self.connections.pop(fd, None)
        if conn is not None:
            conn.close()

    def serve_forever(self) -> None:
        """Run the main loop until it is stopped."""
        self.loop.loop()

    def close(self) -> None:
        """Stop accepting, drop every connection and stop the sub-loops."""
        self.acceptor.close()
        with self._lock:
            connections = list(self.connections.values())
            self.connections.clear()
        for conn in connections:
            conn.close()
        for sub in self.sub_reactors:
            sub.stop()
        if self._pool is not None:
            self._pool.shutdown()
            self._pool = None
        for sub in self.sub_reactors:
            sub.close()


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the echo server.")
    parser.add_argument("--host", default=DEFAULT_ADDRESS.ip, help="address to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_ADDRESS.port, help="port to listen on")
    parser.add_argument(
        "--sub-reactors",
        type=int,
        default=os.cpu_count() or 1,
        help="number of sub-loops; 0 runs clients on the main loop with a worker pool",
    )
    parser.add_argument(
        "--workers", type=int, default=10, help="worker threads when --sub-reactors is 0"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Start the server and run until interrupted."""
    args = _parser().parse_args(argv)
    pool = ThreadPool(args.workers) if args.sub_reactors == 0 else None
    loop = EventLoop(pool)
    try:
        server = Server(loop, InetAddress(args.host, args.port), args.sub_reactors)
    except Exception:
        loop.close()
        raise
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.close()
        loop.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())