"""Tests for the integrity binder and fixed-time tag comparison."""

from __future__ import annotations

import hashlib
import hmac

from hybridseal.core.crypto import compute_integrity_tag, tags_equal


class TestComputeIntegrityTag:

    def test_hmac_over_ciphertext_then_nonce(self) -> None:
        key = b"k" * 32
        expected = hmac.new(key, b"ciphertext" + b"nonce-bytes!", hashlib.sha256).digest()

        assert compute_integrity_tag(b"ciphertext", b"nonce-bytes!", key) == expected

    def test_deterministic(self) -> None:
        key = bytes(range(32))

        assert compute_integrity_tag(b"a", b"b", key) == compute_integrity_tag(b"a", b"b", key)

    def test_bound_to_key(self) -> None:
        assert compute_integrity_tag(b"a", b"b", b"1" * 32) != compute_integrity_tag(b"a", b"b", b"2" * 32)

    def test_bound_to_nonce(self) -> None:
        key = b"k" * 32

        assert compute_integrity_tag(b"a", b"n1", key) != compute_integrity_tag(b"a", b"n2", key)

    def test_size(self) -> None:
        assert len(compute_integrity_tag(b"", b"", bytearray(32))) == 32


class TestTagsEqual:

    def test_equal(self) -> None:
        tag = bytes(range(32))

        assert tags_equal(tag, bytes(tag))

    def test_single_byte_difference(self) -> None:
        tag = bytes(range(32))

        assert not tags_equal(tag, tag[:-1] + b"\xff")

    def test_length_mismatch(self) -> None:
        tag = bytes(range(32))

        assert not tags_equal(tag, tag[:31])
        assert not tags_equal(tag, tag + b"\x00")

    def test_zero_padding_is_not_equality(self) -> None:
        tag = bytes(31) + b"\x00"

        assert not tags_equal(tag, bytes(31))

    def test_custom_size(self) -> None:
        assert tags_equal(b"abcd", b"abcd", size=4)
        assert not tags_equal(b"abcd", b"abcd", size=8)
