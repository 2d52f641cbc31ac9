import errno
import socket

import pytest

from echoreactor.acceptor import Acceptor
from echoreactor.address import InetAddress
from echoreactor.eventloop import EventLoop
from echoreactor.sockets import SocketError

LOCAL = InetAddress("127.0.0.1", 0)


@pytest.fixture
def loop():
    event_loop = EventLoop()
    yield event_loop
    event_loop.close()


def test_binds_to_ephemeral_port(loop):
    acceptor = Acceptor(loop, LOCAL)
    try:
        assert acceptor.address.ip == "127.0.0.1"
        assert acceptor.address.port > 0
    finally:
        acceptor.close()


def test_loop_accepts_and_hands_nonblocking_socket(loop):
    acceptor = Acceptor(loop, LOCAL)
    accepted = []
    acceptor.new_connection_callback = accepted.append
    client = socket.create_connection(acceptor.address.as_tuple(), timeout=5)
    try:
        loop.run_once(timeout=5)
        assert len(accepted) == 1
        assert accepted[0].raw.getblocking() is False
        assert accepted[0].raw.getpeername()[1] == client.getsockname()[1]
    finally:
        for sock in accepted:
            sock.close()
        client.close()
        acceptor.close()


def test_accept_without_callback_closes_client(loop):
    acceptor = Acceptor(loop, LOCAL)
    client = socket.create_connection(acceptor.address.as_tuple(), timeout=5)
    try:
        returned = acceptor.accept_connection()
        assert returned.closed is True
    finally:
        client.close()
        acceptor.close()


def test_bind_to_used_port_raises(loop):
    first = Acceptor(loop, LOCAL)
    try:
        with pytest.raises(SocketError) as info:
            Acceptor(loop, first.address)
        assert info.value.errno == errno.EADDRINUSE
    finally:
        first.close()


def test_close_releases_socket(loop):
    acceptor = Acceptor(loop, LOCAL)
    acceptor.close()
    assert acceptor.sock.fileno() == -1
    assert acceptor.channel.fd == -1