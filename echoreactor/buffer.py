"""A growable byte buffer used to collect message data."""

from __future__ import annotations

from typing import IO, Union

_Data = Union[bytes, bytearray, memoryview, str]


def _as_bytes(data: _Data) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def _until_nul(data: bytes) -> bytes:
    end = data.find(b"\0")
    return data if end == -1 else data[:end]


class Buffer:
    """Bytes accumulated from reads; appended data stops at a NUL byte."""

    def __init__(self) -> None:
        self._data = bytearray()

    def append(self, data: _Data) -> None:
        """Append ``data`` up to, not including, its first NUL byte."""
        self._data += _until_nul(_as_bytes(data))

    def clear(self) -> None:
        """Drop all content."""
        self._data.clear()

    def set(self, data: _Data) -> None:
        """Replace the content with ``data`` up to its first NUL byte."""
        self._data = bytearray(_until_nul(_as_bytes(data)))

    def readline(self, stream: IO) -> bool:
        """Replace the content with the next line of ``stream``.

        The trailing newline is dropped. Returns False, leaving the buffer
        empty, when the stream is at end of file.
        """
        self._data.clear()
        line = stream.readline()
        if not line:
            return False
        raw = _as_bytes(line)
        if raw.endswith(b"\n"):
            raw = raw[:-1]
        self._data += raw
        return True

    def __len__(self) -> int:
        return len(self._data)

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def __str__(self) -> str:
        return self._data.decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        return f"Buffer({bytes(self._data)!r})"