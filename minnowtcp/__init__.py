"""Wrapping sequence numbers, byte streams, reassembly, a TCP sender and receiver, and stdio-over-socket tools."""

__version__ = "0.1.0"