"""Interactive client: sends each line it reads and prints the echo."""

from __future__ import annotations

import argparse
import sys
from typing import IO, Optional, Sequence

from .acceptor import DEFAULT_ADDRESS
from .address import InetAddress
from .buffer import Buffer
from .sockets import Socket, SocketError

READ_CHUNK = 1024


def run_client(
    address: InetAddress, stdin: Optional[IO] = None, stdout: Optional[IO] = None
) -> int:
    """Send lines from ``stdin`` to the server at ``address`` and print each echo.

    Stops at end of input, when the server disconnects or when writing
    fails. Returns the number of messages whose echo was received in full.
    """
    stdin = sys.stdin if stdin is None else stdin
    stdout = sys.stdout if stdout is None else stdout
    send_buffer = Buffer()
    read_buffer = Buffer()
    exchanged = 0
    with Socket() as sock:
        sock.connect(address)
        while send_buffer.readline(stdin):
            message = bytes(send_buffer)
            try:
                sock.raw.sendall(message)
            except OSError:
                print("socket already disconnected, can't write any more!", file=stdout)
                break
            already_read = 0
            while already_read < len(message):
                try:
                    data = sock.raw.recv(READ_CHUNK)
                except InterruptedError:
                    continue
                except OSError:
                    data = b""
                if not data:
                    print("server disconnected!", file=stdout)
                    return exchanged
                read_buffer.append(data)
                already_read += len(data)
            print(f"message from server: {read_buffer}", file=stdout)
            read_buffer.clear()
            exchanged += 1
    return exchanged


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send lines to the echo server.")
    parser.add_argument("--host", default=DEFAULT_ADDRESS.ip, help="server address")
    parser.add_argument("--port", type=int, default=DEFAULT_ADDRESS.port, help="server port")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the interactive client on standard input and output."""
    args = _parser().parse_args(argv)
    try:
        run_client(InetAddress(args.host, args.port), sys.stdin, sys.stdout)
    except SocketError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())