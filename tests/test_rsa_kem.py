"""Tests for RSA-OAEP session key encapsulation."""

from __future__ import annotations

import secrets

import pytest

from hybridseal.core.crypto import EncapsulationError, RsaKEM


@pytest.fixture
def kem() -> RsaKEM:
    return RsaKEM()


class TestWrap:

    def test_wrapped_size_is_modulus_size(self, kem, recipient) -> None:
        assert len(kem.wrap(secrets.token_bytes(32), recipient)) == 256

    def test_randomized(self, kem, recipient) -> None:
        key = secrets.token_bytes(32)

        assert kem.wrap(key, recipient) != kem.wrap(key, recipient)

    def test_max_wrap_size(self, kem, recipient) -> None:
        assert kem.max_wrap_size(recipient) == 190
        kem.wrap(b"\x00" * 190, recipient)

    def test_oversized_input(self, kem, recipient) -> None:
        with pytest.raises(EncapsulationError):
            kem.wrap(b"\x00" * 191, recipient)

    def test_invalid_key(self, kem) -> None:
        with pytest.raises(EncapsulationError):
            kem.wrap(secrets.token_bytes(32), "not a key")  # type: ignore[arg-type]


class TestUnwrap:

    def test_round_trip(self, kem, recipient) -> None:
        key = secrets.token_bytes(32)

        assert kem.unwrap(kem.wrap(key, recipient.public_key), recipient.private_key) == key

    def test_failures_are_uniform(self, kem, recipient, stranger) -> None:
        wrapped = kem.wrap(secrets.token_bytes(32), recipient)
        corrupted = bytes([wrapped[0] ^ 0x01]) + wrapped[1:]

        messages = set()
        for bad_input, key in [
            (corrupted, recipient),
            (wrapped, stranger),
            (wrapped[:100], recipient),
            (b"", recipient),
            (wrapped, recipient.public_only()),
        ]:
            with pytest.raises(EncapsulationError) as excinfo:
                kem.unwrap(bad_input, key)
            messages.add(str(excinfo.value))
            assert excinfo.value.__cause__ is None

        assert messages == {"Session key decapsulation failed"}

    def test_wrong_length_session_key(self, kem, recipient) -> None:
        wrapped = kem.wrap(secrets.token_bytes(16), recipient)

        with pytest.raises(EncapsulationError, match="decapsulation failed"):
            kem.unwrap(wrapped, recipient)
