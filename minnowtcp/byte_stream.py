"""A bounded in-memory byte stream with a writing end and a reading end."""

from __future__ import annotations

from collections import deque


class ByteStream:
    """A pipe of bytes that holds at most ``capacity`` bytes at a time."""

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._capacity = capacity
        self._chunks: deque[bytes] = deque()
        self._offset = 0
        self._buffered = 0
        self._pushed = 0
        self._popped = 0
        self._closed = False
        self._error = False

    @property
    def capacity(self) -> int:
        return self._capacity

    # Writing end

    def push(self, data: bytes) -> None:
        """Append as much of ``data`` as the available capacity allows."""
        allowed = min(len(data), self.available_capacity)
        if not allowed:
            return
        self._chunks.append(bytes(data[:allowed]))
        self._buffered += allowed
        self._pushed += allowed

    def close(self) -> None:
        """Signal that nothing more will be written."""
        self._closed = True

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def available_capacity(self) -> int:
        return self._capacity - self._buffered

    @property
    def bytes_pushed(self) -> int:
        return self._pushed

    # Reading end

    def peek(self) -> bytes:
        """Return the next buffered bytes without removing them (empty if none)."""
        if not self._chunks:
            return b""
        front = self._chunks[0]
        return front[self._offset :] if self._offset else front

    def pop(self, length: int) -> None:
        """Remove up to ``length`` bytes from the front of the buffer."""
        if length < 0:
            raise ValueError("length must not be negative")
        length = min(length, self._buffered)
        remaining = length
        while remaining:
            left = len(self._chunks[0]) - self._offset
            if remaining >= left:
                self._chunks.popleft()
                self._offset = 0
                remaining -= left
            else:
                self._offset += remaining
                remaining = 0
        self._buffered -= length
        self._popped += length

    @property
    def is_finished(self) -> bool:
        return self._closed and not self._buffered

    @property
    def bytes_buffered(self) -> int:
        return self._buffered

    @property
    def bytes_popped(self) -> int:
        return self._popped

    # Error state

    def set_error(self) -> None:
        """Mark the stream as having suffered an error."""
        self._error = True

    @property
    def has_error(self) -> bool:
        return self._error


def read(stream: ByteStream, length: int) -> bytes:
    """Peek and pop up to ``length`` bytes from ``stream`` and return them."""
    parts: list[bytes] = []
    got = 0
    while stream.bytes_buffered and got < length:
        view = stream.peek()
        if not view:
            raise RuntimeError("peek() returned no bytes while data is buffered")
        view = view[: length - got]
        parts.append(view)
        got += len(view)
        stream.pop(len(view))
    return b"".join(parts)