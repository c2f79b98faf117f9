"""
Integrity Binder
================

Keyed integrity tag binding a packet's ciphertext and nonce to its
session key.

    IntegrityTag = HMAC-SHA256(key=SessionKey, msg=CipherText || Nonce)

The tag never covers the plaintext or the wrapped session key.
"""

from __future__ import annotations

import hashlib
import hmac

from hybridseal.security.constants import INTEGRITY_TAG_SIZE


def compute_integrity_tag(ciphertext: bytes, nonce: bytes, key: bytes | bytearray) -> bytes:
    """
    Compute the keyed integrity tag over ``ciphertext || nonce``.

    Pure and deterministic: identical inputs give identical tags.

    Args:
        ciphertext: AEAD ciphertext (without tag)
        nonce: Nonce used for the AEAD layer
        key: Session key

    Returns:
        32-byte HMAC-SHA256 digest
    """
    mac = hmac.new(key, digestmod=hashlib.sha256)
    mac.update(ciphertext)
    mac.update(nonce)
    return mac.digest()


def tags_equal(
    expected: bytes,
    candidate: bytes,
    size: int = INTEGRITY_TAG_SIZE,
) -> bool:
    """
    Fixed-time, fixed-length tag comparison.

    Both values are fitted into ``size``-byte buffers and compared in
    constant time. A length mismatch is folded into the result instead of
    returning early, so the comparison always scans ``size`` bytes.

    Args:
        expected: Locally recomputed tag
        candidate: Tag taken from the packet
        size: Expected tag length

    Returns:
        True only if both values are exactly ``size`` bytes and equal
    """
    lengths_ok = (len(expected) == size) & (len(candidate) == size)
    digests_ok = hmac.compare_digest(_fit(expected, size), _fit(candidate, size))
    return bool(digests_ok & lengths_ok)


def _fit(value: bytes, size: int) -> bytes:
    """Truncate or zero-pad ``value`` to exactly ``size`` bytes."""
    return bytes(value[:size]).ljust(size, b"\x00")
