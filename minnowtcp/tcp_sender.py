"""The sending half of a TCP endpoint."""

from __future__ import annotations

from collections import deque
from typing import Callable

from minnowtcp.byte_stream import ByteStream, read
from minnowtcp.messages import TCPReceiverMessage, TCPSenderMessage
from minnowtcp.wrapping_integers import Wrap32

MAX_PAYLOAD_SIZE = 1000

TransmitFunction = Callable[[TCPSenderMessage], None]


class TCPSender:
    """Turns an outbound byte stream into segments and retransmits unacknowledged ones."""

    def __init__(
        self,
        stream: ByteStream,
        isn: Wrap32,
        initial_rto_ms: int,
        max_payload_size: int = MAX_PAYLOAD_SIZE,
    ) -> None:
        self._input = stream
        self._isn = isn
        self._initial_rto = initial_rto_ms
        self._max_payload = max_payload_size
        self._window = 0
        self._in_flight = 0
        self._next_seqno = 0
        self._acked_seqno = 0
        self._outstanding: deque[TCPSenderMessage] = deque()
        self._rto = initial_rto_ms
        self._retransmissions = 0
        self._timer_running = False
        self._elapsed = 0
        self._syn_sent = False
        self._fin_sent = False

    @property
    def stream(self) -> ByteStream:
        """The outbound byte stream the sender reads from."""
        return self._input

    @property
    def sequence_numbers_in_flight(self) -> int:
        return self._in_flight

    @property
    def consecutive_retransmissions(self) -> int:
        return self._retransmissions

    def make_empty_message(self) -> TCPSenderMessage:
        """A segment that occupies no sequence numbers, at the next sequence number."""
        return TCPSenderMessage(seqno=Wrap32.wrap(self._next_seqno, self._isn))

    def _send(self, msg: TCPSenderMessage, transmit: TransmitFunction) -> None:
        self._outstanding.append(msg)
        self._next_seqno += msg.sequence_length()
        self._in_flight += msg.sequence_length()
        transmit(msg)
        if not self._timer_running:
            self._timer_running = True
            self._elapsed = 0

    def push(self, transmit: TransmitFunction) -> None:
        """Send as much of the outbound stream as the receiver's window allows."""
        if self._fin_sent:
            return
        stream = self._input
        if not self._syn_sent:
            msg = TCPSenderMessage(
                seqno=Wrap32.wrap(0, self._isn),
                syn=True,
                fin=stream.is_finished,
                rst=stream.has_error,
            )
            self._send(msg, transmit)
            self._syn_sent = True
            self._fin_sent = msg.fin
            return

        # A zero window is probed as if it were one byte wide.
        window = self._window or 1
        limit = self._acked_seqno + window

        if stream.is_finished and self._next_seqno < limit:
            self._send(TCPSenderMessage(seqno=Wrap32.wrap(self._next_seqno, self._isn), fin=True), transmit)
            self._fin_sent = True
            return

        while stream.bytes_buffered and self._next_seqno < limit:
            payload = read(stream, min(self._max_payload, limit - self._next_seqno))
            fin = stream.is_finished and len(payload) < window
            msg = TCPSenderMessage(
                seqno=Wrap32.wrap(self._next_seqno, self._isn),
                payload=payload,
                fin=fin,
            )
            self._send(msg, transmit)
            if fin:
                self._fin_sent = True

    def receive(self, msg: TCPReceiverMessage) -> None:
        """Process an acknowledgement and window update from the peer's receiver."""
        if msg.ackno is None:
            return
        ackno = msg.ackno.unwrap(self._isn, self._next_seqno)
        if ackno > self._next_seqno:
            return
        if ackno >= self._acked_seqno:
            self._acked_seqno = ackno
            self._window = msg.window_size

        while self._outstanding:
            front = self._outstanding[0]
            if ackno < front.seqno.unwrap(self._isn, self._next_seqno) + front.sequence_length():
                return
            self._in_flight -= front.sequence_length()
            self._outstanding.popleft()
            self._rto = self._initial_rto
            self._retransmissions = 0
            self._elapsed = 0

        if self._fin_sent:
            self._in_flight = 0
        self._timer_running = False

    def tick(self, ms_since_last_tick: int, transmit: TransmitFunction) -> None:
        """Advance the retransmission timer and resend the oldest segment on expiry."""
        if not self._timer_running:
            return
        self._elapsed += ms_since_last_tick
        if self._elapsed >= self._rto and self._outstanding:
            oldest = self._outstanding[0]
            transmit(oldest)
            if self._window > 0 or oldest.syn:
                self._retransmissions += 1
                self._rto *= 2
            self._elapsed = 0
            self._timer_running = True