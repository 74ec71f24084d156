"""The receiving half of a TCP endpoint."""

from __future__ import annotations

from minnowtcp.byte_stream import ByteStream
from minnowtcp.messages import MAX_WINDOW_SIZE, TCPReceiverMessage, TCPSenderMessage
from minnowtcp.reassembler import Reassembler
from minnowtcp.wrapping_integers import Wrap32

_MASK64 = (1 << 64) - 1


class TCPReceiver:
    """Inserts arriving segments into a reassembler and reports ackno and window."""

    def __init__(self, reassembler: Reassembler) -> None:
        self._reassembler = reassembler
        self._isn: Wrap32 | None = None

    @property
    def reassembler(self) -> Reassembler:
        return self._reassembler

    @property
    def stream(self) -> ByteStream:
        """The inbound byte stream the reassembled data ends up in."""
        return self._reassembler.output

    def receive(self, message: TCPSenderMessage) -> None:
        """Process a segment from the peer's sender."""
        if message.rst:
            self.stream.set_error()
            return
        if message.syn:
            self._isn = message.seqno
        if self._isn is None:
            return
        absolute = message.seqno.unwrap(self._isn, self.stream.bytes_pushed)
        # The SYN occupies absolute sequence number 0; stream indices start after it.
        index = (absolute - (0 if message.syn else 1)) & _MASK64
        self._reassembler.insert(index, message.payload, message.fin)

    def send(self) -> TCPReceiverMessage:
        """Build the acknowledgement for the peer's sender."""
        stream = self.stream
        ackno = None
        if self._isn is not None:
            ackno = self._isn + (1 + stream.bytes_pushed + int(stream.is_closed))
        return TCPReceiverMessage(
            ackno=ackno,
            window_size=min(stream.available_capacity, MAX_WINDOW_SIZE),
            rst=stream.has_error,
        )