"""Readiness polling for channels, backed by epoll where the system has it."""

from __future__ import annotations

import errno
import os
import select
import selectors
import threading
from enum import IntFlag
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from .channel import Channel

MAX_EVENTS = 1000


class Event(IntFlag):
    """Readiness and trigger flags, with the values epoll gives them."""

    NONE = 0
    IN = 0x001
    PRI = 0x002
    OUT = 0x004
    ERR = 0x008
    HUP = 0x010
    RDHUP = 0x2000
    ET = 0x80000000


def _selector_mask(events: int) -> int:
    mask = 0
    if events & (Event.IN | Event.PRI):
        mask |= selectors.EVENT_READ
    if events & Event.OUT:
        mask |= selectors.EVENT_WRITE
    return mask


def _events_from_selector(mask: int) -> Event:
    events = Event.NONE
    if mask & selectors.EVENT_READ:
        events |= Event.IN
    if mask & selectors.EVENT_WRITE:
        events |= Event.OUT
    return events


def _error(code: int) -> OSError:
    return OSError(code, os.strerror(code))


class Poller:
    """Watches channels' file descriptors and reports which are ready.

    A channel is anything with ``fd``, ``events``, ``ready`` and
    ``in_epoll`` attributes. Registration is safe from any thread.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._channels: Dict[int, "Channel"] = {}
        self._epoll: Optional[select.epoll] = None
        self._selector: Optional[selectors.BaseSelector] = None
        if hasattr(select, "epoll"):
            self._epoll = select.epoll()
        else:
            self._selector = selectors.DefaultSelector()

    def _add(self, fd: int, events: int) -> None:
        if self._epoll is not None:
            self._epoll.register(fd, events)
            return
        if fd in self._channels:
            raise _error(errno.EEXIST)
        mask = _selector_mask(events)
        if mask:
            self._selector.register(fd, mask)

    def _modify(self, fd: int, events: int) -> None:
        if self._epoll is not None:
            self._epoll.modify(fd, events)
            return
        if fd not in self._channels:
            raise _error(errno.ENOENT)
        mask = _selector_mask(events)
        registered = fd in self._selector.get_map()
        if registered and mask:
            self._selector.modify(fd, mask)
        elif registered:
            self._selector.unregister(fd)
        elif mask:
            self._selector.register(fd, mask)

    def _remove(self, fd: int) -> None:
        if self._epoll is not None:
            self._epoll.unregister(fd)
            return
        if fd not in self._channels:
            raise _error(errno.ENOENT)
        if fd in self._selector.get_map():
            self._selector.unregister(fd)

    def update_channel(self, channel: "Channel") -> None:
        """Add the channel, or change the events watched for it."""
        fd = channel.fd
        events = int(channel.events)
        with self._lock:
            if not channel.in_epoll:
                try:
                    self._add(fd, events)
                except (OSError, ValueError) as exc:
                    raise self._wrap("epoll add error", exc) from exc
                channel.in_epoll = True
            else:
                try:
                    self._modify(fd, events)
                except (OSError, ValueError) as exc:
                    raise self._wrap("epoll modify error", exc) from exc
            self._channels[fd] = channel

    def delete_channel(self, channel: "Channel") -> None:
        """Stop watching the channel."""
        fd = channel.fd
        with self._lock:
            try:
                self._remove(fd)
            except (OSError, ValueError) as exc:
                raise self._wrap("epoll delete error", exc) from exc
            self._channels.pop(fd, None)
            channel.in_epoll = False

    def poll(self, timeout: Optional[float] = None) -> List["Channel"]:
        """Wait up to ``timeout`` seconds (None: forever) and return ready channels.

        Each returned channel has its ``ready`` flags set.
        """
        try:
            if self._epoll is not None:
                raw: List[Tuple[int, int]] = self._epoll.poll(
                    -1 if timeout is None else timeout, MAX_EVENTS
                )
            else:
                raw = [
                    (key.fd, int(_events_from_selector(mask)))
                    for key, mask in self._selector.select(timeout)
                ]
        except (OSError, ValueError) as exc:
            raise self._wrap("epoll wait error", exc) from exc
        active: List["Channel"] = []
        with self._lock:
            for fd, events in raw:
                channel = self._channels.get(fd)
                if channel is None:
                    continue
                channel.ready = Event(events)
                active.append(channel)
        return active

    def close(self) -> None:
        """Release the underlying polling object."""
        with self._lock:
            self._channels.clear()
            if self._epoll is not None:
                self._epoll.close()
            else:
                self._selector.close()

    @staticmethod
    def _wrap(message: str, exc: Exception) -> OSError:
        if isinstance(exc, OSError):
            return OSError(exc.errno, f"{message}: {exc.strerror or exc}")
        return OSError(errno.EBADF, f"{message}: {exc}")