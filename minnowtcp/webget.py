"""Fetch a URL over HTTP/1.1 and print the request and the raw response."""

from __future__ import annotations

import socket
import sys

HTTP_PORT = 80
_CHUNK_SIZE = 65536


def build_request(host: str, path: str) -> bytes:
    """Return the HTTP/1.1 GET request for ``path`` on ``host``."""
    return (
        f"GET {path} HTTP/1.1\r\n"
        f"Host: {host}\r\n"
        "Connection: close\r\n"
        "\r\n"
    ).encode()


def _emit(data: bytes) -> None:
    sys.stdout.flush()
    binary = getattr(sys.stdout, "buffer", None)
    if binary is not None:
        binary.write(data)
        binary.flush()
    else:
        sys.stdout.write(data.decode("latin-1"))
        sys.stdout.flush()


def get_url(host: str, path: str) -> None:
    """Send a GET request for ``path`` to ``host`` and copy the reply to stdout."""
    request = build_request(host, path)
    with socket.create_connection((host, HTTP_PORT)) as client:
        _emit(request)
        client.sendall(request)
        while chunk := client.recv(_CHUNK_SIZE):
            _emit(chunk)


def main(argv: list[str] | None = None) -> int:
    """Command entry point: ``webget HOST PATH``."""
    if argv is None:
        argv = sys.argv[1:]
    if len(argv) != 2:
        print("Usage: webget HOST PATH", file=sys.stderr)
        print("\tExample: webget stanford.edu /class/cs144", file=sys.stderr)
        return 1
    host, path = argv
    try:
        get_url(host, path)
    except Exception as exc:  # noqa: BLE001 - report any failure and exit non-zero
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())