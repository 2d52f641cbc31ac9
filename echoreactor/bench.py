"""Load generator: many concurrent clients exchanging fixed messages."""

from __future__ import annotations

import argparse
import sys
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from .acceptor import DEFAULT_ADDRESS
from .address import InetAddress
from .buffer import Buffer
from .sockets import Socket
from .threadpool import ThreadPool

MESSAGE = "I'm client!"
READ_CHUNK = 1024
READ_TIMEOUT = 5.0


@dataclass(frozen=True)
class BenchmarkResult:
    """Totals from one benchmark run."""

    clients: int
    msgs: int
    messages_sent: int
    elapsed: float

    def qps(self) -> float:
        """Echoed messages per second over the whole run."""
        if self.elapsed <= 0:
            return 0.0
        return self.messages_sent / self.elapsed

    def summary(self) -> str:
        """The performance report as printed at the end of a run."""
        return (
            "\n======= Performance Summary =======\n"
            f"Total clients       : {self.clients}\n"
            f"Messages per client : {self.msgs}\n"
            f"Total messages sent : {self.messages_sent}\n"
            f"Total time taken    : {self.elapsed:g} seconds\n"
            f"QPS (requests/sec)  : {self.qps():g}\n"
            "===================================\n"
        )


class _Tally:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.value = 0

    def increment(self) -> None:
        with self._lock:
            self.value += 1


def _read_echo(sock: Socket, expected: int) -> Optional[bool]:
    """Read ``expected`` bytes; True on success, False on timeout, None when gone."""
    received = Buffer()
    already_read = 0
    deadline = time.monotonic() + READ_TIMEOUT
    while already_read < expected:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            print("read timeout", file=sys.stderr)
            return False
        sock.raw.settimeout(remaining)
        try:
            data = sock.raw.recv(READ_CHUNK)
        except InterruptedError:
            continue
        except TimeoutError:
            print("read timeout", file=sys.stderr)
            return False
        except OSError as exc:
            print(f"read failed: {exc}", file=sys.stderr)
            return None
        if not data:
            print("server disconnected!", file=sys.stderr)
            return None
        received.append(data)
        already_read += len(data)
    return True


def one_client(
    address: InetAddress,
    msgs: int,
    wait: float = 0,
    counter: Optional[Callable[[], Any]] = None,
) -> int:
    """Connect, wait ``wait`` seconds, then send ``msgs`` messages one at a time.

    ``counter`` is called once for every message echoed back in full.
    Returns the number of such messages.
    """
    send_buffer = Buffer()
    send_buffer.set(MESSAGE)
    payload = bytes(send_buffer)
    succeeded = 0
    with Socket() as sock:
        sock.connect(address)
        time.sleep(wait)
        start = time.monotonic()
        for _ in range(msgs):
            try:
                sock.raw.sendall(payload)
            except OSError as exc:
                print(f"write failed: {exc}", file=sys.stderr)
                break
            outcome = _read_echo(sock, len(payload))
            if outcome is None:
                return succeeded
            if outcome:
                succeeded += 1
                if counter is not None:
                    counter()
            else:
                break
        elapsed = time.monotonic() - start
        print(f"One client finished in {elapsed:g} seconds.")
    return succeeded


def run_benchmark(
    address: InetAddress, clients: int = 100, msgs: int = 100, wait: float = 0
) -> BenchmarkResult:
    """Run ``clients`` concurrent clients and total their results."""
    tally = _Tally()
    start = time.monotonic()
    pool = ThreadPool(clients)
    futures = [pool.add(one_client, address, msgs, wait, tally.increment) for _ in range(clients)]
    pool.shutdown()
    elapsed = time.monotonic() - start
    for future in futures:
        error = future.exception()
        if error is not None:
            raise error
    return BenchmarkResult(clients, msgs, tally.value, elapsed)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Benchmark the echo server.")
    parser.add_argument("-t", dest="threads", type=int, default=100, help="number of clients")
    parser.add_argument("-m", dest="msgs", type=int, default=100, help="messages per client")
    parser.add_argument("-w", dest="wait", type=int, default=0, help="seconds to wait before sending")
    parser.add_argument("--host", default=DEFAULT_ADDRESS.ip, help="server address")
    parser.add_argument("--port", type=int, default=DEFAULT_ADDRESS.port, help="server port")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the benchmark and print its summary."""
    args = _parser().parse_args(argv)
    result = run_benchmark(InetAddress(args.host, args.port), args.threads, args.msgs, args.wait)
    print(result.summary(), end="")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())