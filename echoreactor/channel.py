"""A file descriptor registered with an event loop, with its callbacks."""

from __future__ import annotations

import os
from typing import Any, Callable, Optional, Protocol, Union

from .poller import Event

_READABLE = Event.IN | Event.PRI


class _Loop(Protocol):
    def update_channel(self, channel: "Channel") -> None: ...

    def delete_channel(self, channel: "Channel") -> None: ...

    def add_task(self, func: Callable[[], Any]) -> Any: ...


class _Closable(Protocol):
    def fileno(self) -> int: ...

    def close(self) -> None: ...


class Channel:
    """Binds a descriptor to a loop and dispatches its ready events.

    ``fd`` is a raw descriptor or an object with ``fileno()`` and
    ``close()``; the channel owns it and closes it in ``close()``. With
    ``use_thread_pool`` set, callbacks are handed to the loop's task
    runner instead of being called on the loop thread.
    """

    def __init__(
        self, loop: _Loop, fd: Union[int, _Closable], use_thread_pool: bool = True
    ) -> None:
        self.loop = loop
        if isinstance(fd, int):
            self._owner: Optional[_Closable] = None
            self.fd = fd
        else:
            self._owner = fd
            self.fd = fd.fileno()
        self.events = Event.NONE
        self.ready = Event.NONE
        self.in_epoll = False
        self.use_thread_pool = use_thread_pool
        self.read_callback: Optional[Callable[[], Any]] = None
        self.write_callback: Optional[Callable[[], Any]] = None

    def _dispatch(self, callback: Optional[Callable[[], Any]]) -> None:
        if callback is None:
            return
        if self.use_thread_pool:
            self.loop.add_task(callback)
        else:
            callback()

    def handle_event(self) -> None:
        """Run the callbacks matching the ready flags."""
        if self.ready & _READABLE:
            self._dispatch(self.read_callback)
        if self.ready & Event.OUT:
            self._dispatch(self.write_callback)

    def enable_read(self) -> None:
        """Watch for readable and urgent data."""
        self.events |= _READABLE
        self.loop.update_channel(self)

    def use_edge_triggered(self) -> None:
        """Switch to edge-triggered notification."""
        self.events |= Event.ET
        self.loop.update_channel(self)

    def close(self) -> None:
        """Unregister from the loop and close the descriptor."""
        if self.fd == -1:
            return
        if self.in_epoll:
            try:
                self.loop.delete_channel(self)
            except (OSError, ValueError):
                self.in_epoll = False
        if self._owner is not None:
            self._owner.close()
        else:
            os.close(self.fd)
        self.fd = -1

    def __repr__(self) -> str:
        return f"Channel(fd={self.fd}, events={self.events!r})"