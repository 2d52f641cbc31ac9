# echoreactor

A small TCP echo server built on the reactor pattern, together with an
interactive client and a load benchmark. It is made of:

- a poller that watches file descriptors (epoll where the system has it,
  the standard `selectors` module elsewhere) and an event loop that
  dispatches ready channels,
- an acceptor that takes new clients on a listening socket,
- connections that read everything a client has sent (non-blocking,
  edge-triggered) and write it straight back,
- a fixed-size worker thread pool, used either to run read handlers or to
  run one sub-loop per worker.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Commands

All three commands default to `127.0.0.1` port `1234`; `--host` and
`--port` change that.

Start the echo server:

```
echoreactor-server
```

By default it starts one sub-loop per CPU, each on its own thread, and
spreads clients over them. `--sub-reactors N` sets the number of sub-loops;
with `--sub-reactors 0` every client stays on the main loop and its reads
are handled by a pool of `--workers` threads (default 10). Stop it with
Ctrl-C.

Talk to it interactively. Each line read from standard input is sent to the
server and the echo is printed as `message from server: ...`. The client
stops at end of input or when the server disconnects:

```
echoreactor-client
```

Load-test it. Every simulated client opens its own connection and sends the
message `I'm client!` repeatedly, waiting for each echo before sending the
next; a client gives up after waiting 5 seconds for an echo. Options: `-t`
number of clients (default 100), `-m` messages per client (default 100),
`-w` seconds each client waits after connecting before it starts (default 0):

```
echoreactor-bench -t 50 -m 200
```

Each client prints how long it took, and at the end a summary gives the
number of clients, messages per client, messages echoed in full, the total
time and the resulting requests per second.

## Library use

The thread pool accepts any callable with its arguments and returns a
`concurrent.futures.Future` for its result; leaving the `with` block waits
for every queued task to finish:

```python
from echoreactor.threadpool import ThreadPool

with ThreadPool(4) as pool:
    future = pool.add(pow, 2, 10)
print(future.result())  # 1024
```

Adding a task to a pool that has been shut down raises `RuntimeError`.

`Buffer` collects bytes, keeping each appended chunk only up to its first
NUL byte:

```python
from echoreactor.buffer import Buffer

buf = Buffer()
buf.append(b"hello")
buf.append(b" world\0ignored")
print(bytes(buf), len(buf))  # b'hello world' 11
```

A server can be run in-process as well:

```python
from echoreactor.address import InetAddress
from echoreactor.eventloop import EventLoop
from echoreactor.server import Server

loop = EventLoop()
server = Server(loop, InetAddress("127.0.0.1", 0), sub_reactors=2)
print(server.address)  # the port actually bound
# server.serve_forever() runs until loop.stop() is called;
# server.close() and loop.close() release everything.
```

`echoreactor.client.run_client` and `echoreactor.bench.run_benchmark`
(returning a `BenchmarkResult` with `qps()` and `summary()`) are the
functions behind the client and benchmark commands.

The other pieces live in `echoreactor.address` (`InetAddress`),
`echoreactor.sockets` (`Socket`), `echoreactor.poller` (`Poller`, `Event`),
`echoreactor.channel` (`Channel`), `echoreactor.eventloop` (`EventLoop`),
`echoreactor.acceptor` (`Acceptor`) and `echoreactor.connection`
(`Connection`). Socket failures are raised as
`echoreactor.sockets.SocketError`, a subclass of `OSError`.

## Limits

The server only echoes: it has no message framing, no application
protocol, no TLS and IPv4 only. A read event collects whatever the client
has sent so far and writes it all back as one reply.