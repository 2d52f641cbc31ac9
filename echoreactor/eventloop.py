"""A reactor loop that polls channels and dispatches their events."""

from __future__ import annotations

import socket
import threading
from concurrent.futures import Future
from typing import Any, Callable, List, Optional

from .channel import Channel
from .poller import Poller
from .threadpool import ThreadPool


class EventLoop:
    """Polls registered channels and runs their callbacks.

    With a thread pool, channels that ask for it have their callbacks run
    on the pool; the loop owns the pool and shuts it down on ``close()``.
    Without one, tasks run on the calling thread.
    """

    def __init__(self, thread_pool: Optional[ThreadPool] = None) -> None:
        self._poller = Poller()
        self._pool = thread_pool
        self._quit = threading.Event()
        self._closed = False
        self._waker, self._wake_sender = socket.socketpair()
        self._waker.setblocking(False)
        self._wake_sender.setblocking(False)
        self._wake_channel = Channel(self, self._waker, use_thread_pool=False)
        self._wake_channel.read_callback = self._drain_wakeups
        self._wake_channel.enable_read()

    @property
    def thread_pool(self) -> Optional[ThreadPool]:
        """The pool callbacks are handed to, if any."""
        return self._pool

    def _drain_wakeups(self) -> None:
        while True:
            try:
                if not self._waker.recv(4096):
                    return
            except (BlockingIOError, InterruptedError):
                return
            except OSError:
                return

    def loop(self) -> None:
        """Poll and dispatch until ``stop()`` is called."""
        while not self._quit.is_set():
            self.run_once()

    def run_once(self, timeout: Optional[float] = None) -> List[Channel]:
        """Poll once, dispatch ready channels and return them."""
        active = self._poller.poll(timeout)
        for channel in active:
            channel.handle_event()
        return [channel for channel in active if channel is not self._wake_channel]

    def stop(self) -> None:
        """Ask the loop to finish, waking it if it is waiting."""
        self._quit.set()
        try:
            self._wake_sender.send(b"\0")
        except OSError:
            pass

    def update_channel(self, channel: Channel) -> None:
        """Register or modify a channel."""
        self._poller.update_channel(channel)

    def delete_channel(self, channel: Channel) -> None:
        """Stop watching a channel."""
        self._poller.delete_channel(channel)

    def add_task(self, func: Callable[[], Any]) -> Optional[Future]:
        """Run ``func`` on the pool and return its future, or run it now."""
        if self._pool is not None:
            return self._pool.add(func)
        func()
        return None

    def close(self) -> None:
        """Stop the loop, shut the pool down and release resources."""
        if self._closed:
            return
        self._closed = True
        self.stop()
        if self._pool is not None:
            self._pool.shutdown()
        self._wake_channel.close()
        self._wake_sender.close()
        self._poller.close()