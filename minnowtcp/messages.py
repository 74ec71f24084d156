"""Messages exchanged between a TCP sender and the peer's TCP receiver."""

from __future__ import annotations

from dataclasses import dataclass, field

from minnowtcp.wrapping_integers import Wrap32

MAX_WINDOW_SIZE = 0xFFFF


@dataclass(frozen=True)
class TCPSenderMessage:
    """A segment from a sender: sequence number, flags and payload."""

    seqno: Wrap32 = field(default_factory=Wrap32)
    syn: bool = False
    payload: bytes = b""
    fin: bool = False
    rst: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", bytes(self.payload))

    def sequence_length(self) -> int:
        """Number of sequence numbers the segment occupies (SYN, payload, FIN)."""
        return self.syn + len(self.payload) + self.fin


@dataclass(frozen=True)
class TCPReceiverMessage:
    """A receiver's reply: acknowledgement number, window size and reset flag."""

    ackno: Wrap32 | None = None
    window_size: int = 0
    rst: bool = False

    def __post_init__(self) -> None:
        if self.window_size not in range(MAX_WINDOW_SIZE + 1):
            raise ValueError(f"window_size must be between 0 and {MAX_WINDOW_SIZE}")