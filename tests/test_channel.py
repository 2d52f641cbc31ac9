import os
import socket

import pytest

from echoreactor.channel import Channel
from echoreactor.poller import Event


class RecordingLoop:
    def __init__(self):
        self.updated = []
        self.deleted = []
        self.tasks = []

    def update_channel(self, channel):
        self.updated.append((channel, channel.events))
        channel.in_epoll = True

    def delete_channel(self, channel):
        self.deleted.append(channel)
        channel.in_epoll = False

    def add_task(self, func):
        self.tasks.append(func)


@pytest.fixture
def loop():
    return RecordingLoop()


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    yield a, b
    a.close()
    b.close()


def test_new_channel_watches_nothing(loop, pair):
    a, _ = pair
    ch = Channel(loop, a)
    assert ch.fd == a.fileno()
    assert ch.events == Event.NONE
    assert ch.in_epoll is False
    assert ch.use_thread_pool is True


def test_enable_read_updates_loop(loop, pair):
    a, _ = pair
    ch = Channel(loop, a)
    ch.enable_read()
    assert ch.events == Event.IN | Event.PRI
    assert loop.updated == [(ch, Event.IN | Event.PRI)]


def test_edge_triggered_keeps_read_flags(loop, pair):
    a, _ = pair
    ch = Channel(loop, a)
    ch.enable_read()
    ch.use_edge_triggered()
    assert ch.events == Event.IN | Event.PRI | Event.ET
    assert len(loop.updated) == 2


def test_read_runs_inline_without_pool(loop, pair):
    a, _ = pair
    calls = []
    ch = Channel(loop, a, use_thread_pool=False)
    ch.read_callback = lambda: calls.append("read")
    ch.ready = Event.IN
    ch.handle_event()
    assert calls == ["read"]
    assert loop.tasks == []


def test_read_is_queued_with_pool(loop, pair):
    a, _ = pair
    calls = []
    ch = Channel(loop, a, use_thread_pool=True)
    callback = lambda: calls.append("read")  # noqa: E731
    ch.read_callback = callback
    ch.ready = Event.PRI
    ch.handle_event()
    assert loop.tasks == [callback]
    assert calls == []


def test_write_ready_runs_write_callback(loop, pair):
    a, _ = pair
    calls = []
    ch = Channel(loop, a, use_thread_pool=False)
    ch.read_callback = lambda: calls.append("read")
    ch.write_callback = lambda: calls.append("write")
    ch.ready = Event.OUT
    ch.handle_event()
    assert calls == ["write"]


def test_no_ready_flags_does_nothing(loop, pair):
    a, _ = pair
    calls = []
    ch = Channel(loop, a, use_thread_pool=False)
    ch.read_callback = lambda: calls.append("read")
    ch.handle_event()
    assert calls == []


def test_close_raw_descriptor(loop):
    a, b = socket.socketpair()
    fd = a.detach()
    ch = Channel(loop, fd)
    ch.close()
    b.close()
    assert ch.fd == -1
    with pytest.raises(OSError):
        os.fstat(fd)


def test_close_owned_socket_and_unregister(loop, pair):
    a, _ = pair
    ch = Channel(loop, a)
    ch.enable_read()
    ch.close()
    assert loop.deleted == [ch]
    assert a.fileno() == -1
    assert ch.in_epoll is False


def test_close_twice_is_harmless(loop, pair):
    a, _ = pair
    ch = Channel(loop, a)
    ch.close()
    ch.close()
    assert ch.fd == -1
    assert loop.deleted == []