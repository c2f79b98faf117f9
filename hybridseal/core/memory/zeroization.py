"""
Memory Zeroization Utilities
============================

Explicit wiping of session key buffers.

Security Properties:
- Explicit zeroization (no GC reliance)
- Exception-safe cleanup

WARNING:
- Python's memory model doesn't guarantee secure erasure; primitives
  may hold their own copies. This is a best-effort mitigation.
"""

from __future__ import annotations

import ctypes
from contextlib import contextmanager
from typing import Iterator


def secure_zero(data: bytearray | memoryview) -> None:
    """
    Securely zero a mutable byte buffer.

    Uses ctypes.memset for bytearrays and element-wise writes for
    memoryviews.

    Args:
        data: Mutable byte buffer to zero

    Raises:
        TypeError: If the buffer is immutable (e.g. bytes)
    """
    if isinstance(data, bytes):
        raise TypeError("Cannot zeroize immutable bytes; use a bytearray")
    if len(data) == 0:
        return

    if isinstance(data, memoryview):
        for i in range(len(data)):
            data[i] = 0
        return

    addr = ctypes.addressof((ctypes.c_char * len(data)).from_buffer(data))
    ctypes.memset(addr, 0, len(data))


@contextmanager
def ZeroizeContext(*buffers: bytearray) -> Iterator[None]:
    """
    Context manager that zeroizes buffers on exit.

    Always zeroizes, whether exit is normal or exceptional.

    Usage:
        session_key = bytearray(secrets.token_bytes(32))

        with ZeroizeContext(session_key):
            encrypt(data, session_key)
        # session_key is now zeroed
    """
    try:
        yield
    finally:
        for buf in buffers:
            secure_zero(buf)
