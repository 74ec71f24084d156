"""Reassembly of indexed, possibly overlapping substrings into a byte stream."""

from __future__ import annotations

from minnowtcp.byte_stream import ByteStream


class Reassembler:
    """Writes substrings into ``output`` in order, holding early ones until gaps fill."""

    def __init__(self, output: ByteStream) -> None:
        self._output = output
        self._pending: dict[int, bytes] = {}
        self._last_index = 0
        self._assembled = 0

    @property
    def output(self) -> ByteStream:
        """The stream the reassembled bytes are written to."""
        return self._output

    def insert(self, first_index: int, data: bytes, is_last_substring: bool = False) -> None:
        """Insert ``data`` starting at stream index ``first_index``."""
        out = self._output
        if out.is_closed:
            return
        if not data:
            if is_last_substring:
                out.close()
            return

        end = first_index + len(data)
        if is_last_substring:
            self._last_index = end

        pushed = out.bytes_pushed
        if end <= pushed:
            return

        if first_index < pushed:
            out.push(data[pushed - first_index :])
            self._assembled = out.bytes_pushed
            if is_last_substring:
                if end == out.bytes_pushed:
                    self._pending.clear()
                    out.close()
            else:
                self._push_stored(end)
            return

        available = out.available_capacity
        if not available:
            return

        if first_index == pushed:
            out.push(data)
            self._assembled = out.bytes_pushed
            self._push_stored(first_index)
            return

        if first_index >= pushed + available:
            return

        stored = self._pending.get(first_index)
        if stored is not None and len(stored) >= len(data):
            return

        if end - pushed <= available:
            self._pending[first_index] = bytes(data)
        else:
            self._pending[first_index] = bytes(data[: pushed + available - first_index])

    @property
    def bytes_pending(self) -> int:
        """Number of distinct bytes held back waiting for earlier bytes."""
        total = 0
        mark = self._assembled
        for start, chunk in sorted(self._pending.items()):
            end = start + len(chunk)
            if start >= mark:
                total += len(chunk)
                mark = end
            else:
                if end > mark:
                    total += end - mark
                mark = max(mark, end)
        return total

    def _push_stored(self, index: int) -> None:
        out = self._output
        if index > out.bytes_pushed:
            return
        prev = self._assembled
        for start, chunk in sorted(self._pending.items()):
            if start > out.bytes_pushed:
                break
            end = start + len(chunk)
            if start >= prev:
                prev += len(chunk)
                out.push(chunk)
            else:
                if end > prev:
                    out.push(chunk[prev - start :])
                prev = max(prev, end)
        self._assembled = out.bytes_pushed
        if out.bytes_pushed == self._last_index:
            self._pending.clear()
            out.close()
            return
        self._pending = {
            start: chunk
            for start, chunk in self._pending.items()
            if start + len(chunk) > self._assembled
        }