import socket
import threading

import pytest

from echoreactor.channel import Channel
from echoreactor.eventloop import EventLoop
from echoreactor.threadpool import ThreadPool


@pytest.fixture
def loop():
    lp = EventLoop()
    yield lp
    lp.close()


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    a.setblocking(False)
    yield a, b
    a.close()
    b.close()


def _reader(loop, sock, got, use_thread_pool=False):
    ch = Channel(loop, sock, use_thread_pool=use_thread_pool)
    ch.read_callback = lambda: got.append(sock.recv(64))
    ch.enable_read()
    return ch


def test_run_once_dispatches_readable_channel(loop, pair):
    a, b = pair
    got = []
    ch = _reader(loop, a, got)
    b.send(b"ping")
    assert loop.run_once(1.0) == [ch]
    assert got == [b"ping"]


def test_run_once_idle_returns_empty(loop, pair):
    a, _ = pair
    got = []
    _reader(loop, a, got)
    assert loop.run_once(0.05) == []
    assert got == []


def test_deleted_channel_is_not_dispatched(loop, pair):
    a, b = pair
    got = []
    ch = _reader(loop, a, got)
    loop.delete_channel(ch)
    b.send(b"ping")
    assert loop.run_once(0.1) == []
    assert got == []
    assert ch.in_epoll is False


def test_stop_wakes_running_loop(loop):
    thread = threading.Thread(target=loop.loop)
    thread.start()
    loop.stop()
    thread.join(2.0)
    assert not thread.is_alive()


def test_stop_before_loop_returns_immediately(loop):
    loop.stop()
    thread = threading.Thread(target=loop.loop)
    thread.start()
    thread.join(2.0)
    assert not thread.is_alive()


def test_running_loop_handles_events(loop, pair):
    a, b = pair
    done = threading.Event()
    got = []

    def on_read():
        got.append(a.recv(64))
        done.set()

    ch = Channel(loop, a, use_thread_pool=False)
    ch.read_callback = on_read
    ch.enable_read()
    thread = threading.Thread(target=loop.loop)
    thread.start()
    b.send(b"hello")
    assert done.wait(2.0)
    loop.stop()
    thread.join(2.0)
    assert got == [b"hello"]
    assert not thread.is_alive()


def test_add_task_without_pool_runs_inline(loop):
    calls = []
    result = loop.add_task(lambda: calls.append(threading.current_thread()))
    assert result is None
    assert calls == [threading.current_thread()]


def test_add_task_with_pool_returns_future():
    lp = EventLoop(ThreadPool(2))
    try:
        future = lp.add_task(lambda: threading.current_thread().name)
        assert future.result(timeout=2.0).startswith("threadpool-")
    finally:
        lp.close()


def test_pooled_channel_callback_runs_on_worker(pair):
    a, b = pair
    lp = EventLoop(ThreadPool(2))
    done = threading.Event()
    names = []

    def on_read():
        names.append(threading.current_thread().name)
        a.recv(64)
        done.set()

    try:
        ch = Channel(lp, a, use_thread_pool=True)
        ch.read_callback = on_read
        ch.enable_read()
        b.send(b"x")
        assert lp.run_once(1.0) == [ch]
        assert done.wait(2.0)
        assert names[0].startswith("threadpool-")
    finally:
        lp.close()


def test_close_shuts_pool_down():
    pool = ThreadPool(1)
    lp = EventLoop(pool)
    lp.close()
    assert pool.stopped is True
    with pytest.raises(RuntimeError):
        pool.add(print)


def test_close_twice_is_harmless():
    lp = EventLoop()
    lp.close()
    lp.close()
    assert lp.thread_pool is None