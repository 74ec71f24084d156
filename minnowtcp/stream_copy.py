"""Copy between a connected socket and a pair of local file descriptors."""

from __future__ import annotations

import os
import select
import socket
import sys
from dataclasses import dataclass
from typing import Any, Callable

from minnowtcp.byte_stream import ByteStream

BUFFER_SIZE = 1 << 20


@dataclass
class _Rule:
    name: str
    fd: int
    writing: bool
    callback: Callable[[], None]
    interest: Callable[[], bool]
    on_error: Callable[[], None]
    active: bool = True


def _fd_of(obj: Any) -> int:
    if isinstance(obj, int):
        return obj
    flush = getattr(obj, "flush", None)
    if flush is not None:
        flush()
    return obj.fileno()


def _debug(message: str) -> None:
    print(f"DEBUG: {message}", file=sys.stderr, flush=True)


def bidirectional_stream_copy(
    sock: socket.socket,
    peer_name: str,
    stdin: Any = None,
    stdout: Any = None,
) -> None:
    """Copy ``stdin`` to ``sock`` and ``sock`` to ``stdout`` until both directions finish.

    ``stdin`` and ``stdout`` may be file descriptors or objects with ``fileno()``;
    they default to the process's standard input and output.
    """
    if stdin is None:
        stdin = sys.stdin
    if stdout is None:
        stdout = sys.stdout
    in_fd = _fd_of(stdin)
    out_fd = _fd_of(stdout)
    sock_fd = sock.fileno()

    outbound = ByteStream(BUFFER_SIZE)
    inbound = ByteStream(BUFFER_SIZE)
    outbound_shutdown = False
    inbound_shutdown = False

    sock.setblocking(False)
    os.set_blocking(in_fd, False)
    os.set_blocking(out_fd, False)

    def fail(message: str) -> Callable[[], None]:
        def handler() -> None:
            _debug(message)
            outbound.set_error()
            inbound.set_error()

        return handler

    def close_output() -> None:
        if isinstance(stdout, int):
            os.close(out_fd)
        else:
            stdout.close()

    def read_stdin() -> None:
        data = os.read(in_fd, outbound.available_capacity)
        if data:
            outbound.push(data)
        else:
            outbound.close()

    def write_socket() -> None:
        nonlocal outbound_shutdown
        if outbound.bytes_buffered:
            outbound.pop(sock.send(outbound.peek()))
        if outbound.is_finished:
            sock.shutdown(socket.SHUT_WR)
            outbound_shutdown = True
            _debug(f"Outbound stream to {peer_name} finished.")

    def read_socket() -> None:
        data = sock.recv(inbound.available_capacity)
        if data:
            inbound.push(data)
        else:
            inbound.close()

    def write_stdout() -> None:
        nonlocal inbound_shutdown
        if inbound.bytes_buffered:
            inbound.pop(os.write(out_fd, inbound.peek()))
        if inbound.is_finished:
            close_output()
            inbound_shutdown = True
            ending = " uncleanly." if inbound.has_error else "."
            _debug(f"Inbound stream from {peer_name} finished{ending}")

    rules = [
        _Rule(
            "read from stdin into outbound byte stream",
            in_fd,
            False,
            read_stdin,
            lambda: not outbound.has_error
            and not inbound.has_error
            and outbound.available_capacity > 0
            and not outbound.is_closed,
            fail("Outbound stream had error from source."),
        ),
        _Rule(
            "read from outbound byte stream into socket",
            sock_fd,
            True,
            write_socket,
            lambda: bool(outbound.bytes_buffered)
            or (outbound.is_finished and not outbound_shutdown),
            fail("Outbound stream had error from destination."),
        ),
        _Rule(
            "read from socket into inbound byte stream",
            sock_fd,
            False,
            read_socket,
            lambda: not inbound.has_error
            and not outbound.has_error
            and inbound.available_capacity > 0
            and not inbound.is_closed,
            fail("Inbound stream had error from source."),
        ),
        _Rule(
            "read from inbound byte stream into stdout",
            out_fd,
            True,
            write_stdout,
            lambda: bool(inbound.bytes_buffered)
            or (inbound.is_finished and not inbound_shutdown),
            fail("Inbound stream had error from destination."),
        ),
    ]

    while True:
        wanted = [rule for rule in rules if rule.active and rule.interest()]
        if not wanted:
            return
        readers = {rule.fd for rule in wanted if not rule.writing}
        writers = {rule.fd for rule in wanted if rule.writing}
        try:
            readable, writable, _ = select.select(readers, writers, [])
        except InterruptedError:
            continue
        for rule in wanted:
            ready = writable if rule.writing else readable
            if rule.fd not in ready or not rule.active or not rule.interest():
                continue
            try:
                rule.callback()
            except (BlockingIOError, InterruptedError):
                pass
            except OSError:
                rule.active = False
                rule.on_error()