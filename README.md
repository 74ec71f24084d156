# minnowtcp

The building blocks of a TCP endpoint in pure Python. Each piece can be used
and tested on its own:

- `minnowtcp.wrapping_integers`: `Wrap32`, a 32-bit sequence number that
  wraps at 2**32. `Wrap32.wrap(n, zero_point)` turns an absolute index into a
  wire value, and `unwrap(zero_point, checkpoint)` returns the absolute index
  nearest `checkpoint` that wraps to it. `Wrap32` values can be compared
  with `==` and advanced with `+`.
- `minnowtcp.byte_stream`: `ByteStream(capacity)`, a bounded in-memory pipe
  of bytes. The writing side has `push`, `close`, `is_closed`,
  `available_capacity` and `bytes_pushed`. The reading side has `peek`,
  `pop`, `is_finished`, `bytes_buffered` and `bytes_popped`. `set_error` and
  `has_error` mark a failed stream. `push` keeps only as many bytes as fit.
  The `read(stream, length)` function peeks and pops up to `length` bytes and
  returns them.
- `minnowtcp.reassembler`: `Reassembler(output)` takes indexed, possibly
  overlapping and out-of-order substrings through
  `insert(first_index, data, is_last_substring)`. It writes them to its output
  `ByteStream` in order, holds early bytes until the gaps fill, drops bytes
  that lie beyond the stream's capacity, and closes the stream after the last
  byte. `bytes_pending` counts the bytes it is holding back.
- `minnowtcp.messages`: `TCPSenderMessage` (seqno, syn, payload, fin, rst,
  with `sequence_length()`) and `TCPReceiverMessage` (ackno, window_size,
  rst). The window size must be between 0 and 65535.
- `minnowtcp.tcp_receiver`: `TCPReceiver(reassembler)`. `receive(message)`
  places the payload at the right stream index, and a segment with RST marks
  the stream as failed. `send()` returns the acknowledgement number, the
  window size (capped at 65535) and the RST flag.
- `minnowtcp.tcp_sender`: `TCPSender(stream, isn, initial_rto_ms)`. `push(transmit)`
  sends SYN, data and FIN within the peer's window. Payloads are at most
  `MAX_PAYLOAD_SIZE` (1000) bytes, and a zero window is treated as one byte.
  `receive(msg)` handles acknowledgements and window updates.
  `tick(ms, transmit)` resends the oldest unacknowledged segment when the
  timer expires, and doubles the timeout unless the window is zero.
  `sequence_numbers_in_flight`, `consecutive_retransmissions` and
  `make_empty_message()` report the sender's state.
- `minnowtcp.stream_copy`: `bidirectional_stream_copy(sock, peer_name, stdin, stdout)`
  copies between a connected socket and a pair of file descriptors until
  both directions have finished. It uses `ByteStream` buffers of 1 MiB.

## Installation

```
pip install .
```

No third-party runtime dependencies are needed.

## Sequence numbers

```python
from minnowtcp.wrapping_integers import Wrap32

assert Wrap32.wrap(3 * 2**32 + 17, Wrap32(15)) == Wrap32(32)

zero = Wrap32(19)
seqno = Wrap32.wrap(2**32 + 1, zero)
assert seqno.unwrap(zero, 2**32) == 2**32 + 1
```

## Reassembly

```python
from minnowtcp.byte_stream import ByteStream, read
from minnowtcp.reassembler import Reassembler

r = Reassembler(ByteStream(1000))
r.insert(1, b"b", False)
assert r.bytes_pending == 1
r.insert(0, b"a", True)
assert read(r.output, 10) == b"ab"
assert r.output.is_finished
```

## Commands

`minnowtcp-webget` fetches a page over HTTP/1.1. It prints the request it
sends, followed by the raw response:

```
minnowtcp-webget example.com /index.html
```

`minnowtcp-tcp-native` copies standard input and output across one TCP
connection. Without `-l` it connects to the given host and port. With `-l`
it accepts exactly one connection on that address:

```
minnowtcp-tcp-native example.com 9090
minnowtcp-tcp-native -l 127.0.0.1 9090
```

Both commands print a usage message and exit with status 1 when the
arguments are wrong.

## What it does not do

The sender and receiver are not joined into a full connection, and they
exchange no real segments on a network. There is no segment encoding, no
network interface and no router. Both commands use the operating system's
TCP through Python's `socket` module, not `TCPSender` and `TCPReceiver`.

## Running the tests

```
pip install .[test]
pytest
```