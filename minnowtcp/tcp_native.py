"""A netcat-like tool: connect to or accept one TCP connection and copy stdio over it."""

from __future__ import annotations

import socket
import sys
from dataclasses import dataclass

from minnowtcp.stream_copy import bidirectional_stream_copy

USAGE = (
    "Usage: tcp_native [-l] <host> <port>\n\n"
    "  -l specifies listen mode; <host>:<port> is the listening address."
)


class UsageError(ValueError):
    """The command line does not name a host and port."""


@dataclass(frozen=True)
class Options:
    """Parsed command line: listen or connect, and the address to use."""

    listen: bool
    host: str
    port: str


def parse_args(argv: list[str]) -> Options:
    """Parse ``[-l] <host> <port>``; raise :class:`UsageError` if it does not fit."""
    args = list(argv)
    if len(args) < 2:
        raise UsageError(USAGE)
    if args[0] == "-l":
        if len(args) < 3:
            raise UsageError(USAGE)
        return Options(listen=True, host=args[1], port=args[2])
    return Options(listen=False, host=args[0], port=args[1])


def _resolve(host: str, port: str):
    family, type_, proto, _, sockaddr = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)[0]
    return family, type_, proto, sockaddr


def _format_address(sockaddr) -> str:
    host, port = sockaddr[0], sockaddr[1]
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def _debug(message: str, end: str = "\n") -> None:
    print(f"DEBUG: {message}", end=end, file=sys.stderr, flush=True)


def _accept_one(options: Options) -> socket.socket:
    family, type_, proto, sockaddr = _resolve(options.host, options.port)
    with socket.socket(family, type_, proto) as listener:
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        listener.bind(sockaddr)
        listener.listen()
        _debug("Listening for incoming connection...")
        connection, peer = listener.accept()
    _debug(f"New connection from {_format_address(peer)}.")
    return connection


def _connect(options: Options) -> socket.socket:
    family, type_, proto, sockaddr = _resolve(options.host, options.port)
    sock = socket.socket(family, type_, proto)
    try:
        _debug(f"Connecting to {_format_address(sockaddr)}... ", end="")
        sock.connect(sockaddr)
    except BaseException:
        sock.close()
        raise
    _debug(f"Successfully connected to {_format_address(sock.getpeername())}.")
    return sock


def main(argv: list[str] | None = None) -> int:
    """Command entry point."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        options = parse_args(argv)
    except UsageError:
        print(USAGE, file=sys.stderr)
        return 1
    try:
        opener = _accept_one if options.listen else _connect
        with opener(options) as sock:
            bidirectional_stream_copy(sock, _format_address(sock.getpeername()))
    except Exception as exc:  # noqa: BLE001 - report any failure and exit non-zero
        print(f"Exception: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())