"""
AES-256-GCM Authenticated Encryption
====================================

Seal/open adapter implementing the authenticated cipher contract of the
packet protocol.

Security Properties:
    - 256-bit key (128-bit security level)
    - 96-bit nonce (NIST recommended)
    - 128-bit authentication tag, kept separate from the ciphertext
    - Authenticated Additional Data (AAD) support

NIST SP 800-38D Compliance:
    - GCM mode with 96-bit IV
    - Unique nonce for each encryption under same key

WARNING:
    - Never reuse (key, nonce) pairs
    - Always verify tag before using plaintext
"""

from __future__ import annotations

import secrets
from typing import Optional, Protocol, Tuple, runtime_checkable

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from hybridseal.core.crypto.exceptions import AuthenticationError, CipherError
from hybridseal.security.constants import NONCE_SIZE, SESSION_KEY_SIZE, TAG_SIZE


@runtime_checkable
class AuthenticatedCipher(Protocol):
    """Contract for the AEAD primitive used by the hybrid engine."""

    def seal(
        self,
        plaintext: bytes,
        key: bytes,
        nonce: bytes,
        aad: Optional[bytes] = None,
    ) -> Tuple[bytes, bytes]:
        """Encrypt; returns (ciphertext, tag)."""
        ...

    def open(
        self,
        ciphertext: bytes,
        key: bytes,
        nonce: bytes,
        tag: bytes,
        aad: Optional[bytes] = None,
    ) -> bytes:
        """Verify the tag and decrypt; raises AuthenticationError on mismatch."""
        ...


class AesGcmCipher:
    """
    AES-256-GCM Authenticated Encryption with Associated Data (AEAD).

    Unlike the ``cryptography`` AESGCM API, ``seal`` returns the ciphertext
    and the authentication tag as two values, and ``open`` takes them back
    separately. Ciphertext length always equals plaintext length.

    Usage:
        cipher = AesGcmCipher()
        key = cipher.generate_key()
        nonce = cipher.generate_nonce()

        ciphertext, tag = cipher.seal(plaintext, key, nonce)
        plaintext = cipher.open(ciphertext, key, nonce, tag)
    """

    __slots__ = ()

    @staticmethod
    def generate_key() -> bytes:
        """
        Generate a cryptographically secure random AES-256 key.

        Returns:
            32 bytes from the OS CSPRNG
        """
        return secrets.token_bytes(SESSION_KEY_SIZE)

    @staticmethod
    def generate_nonce() -> bytes:
        """
        Generate a cryptographically secure random nonce.

        Returns:
            12 bytes of cryptographic random data

        Security:
            96-bit nonces with random generation have negligible collision
            probability for up to 2^32 encryptions under same key.
        """
        return secrets.token_bytes(NONCE_SIZE)

    def seal(
        self,
        plaintext: bytes,
        key: bytes,
        nonce: bytes,
        aad: Optional[bytes] = None,
    ) -> Tuple[bytes, bytes]:
        """
        Encrypt plaintext using AES-256-GCM.

        Args:
            plaintext: Data to encrypt (can be empty)
            key: 32-byte key
            nonce: 12-byte nonce, never reused under the same key
            aad: Additional Authenticated Data (authenticated but not encrypted)

        Returns:
            Tuple of (ciphertext, tag)

        Raises:
            CipherError: If key/nonce sizes are wrong or the primitive
                rejects the plaintext (e.g. beyond GCM's length limit)
        """
        self._check_key_and_nonce(key, nonce)

        try:
            sealed = AESGCM(bytes(key)).encrypt(nonce, plaintext, aad)
        except (OverflowError, ValueError, TypeError) as exc:
            raise CipherError() from exc

        return sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]

    def open(
        self,
        ciphertext: bytes,
        key: bytes,
        nonce: bytes,
        tag: bytes,
        aad: Optional[bytes] = None,
    ) -> bytes:
        """
        Decrypt ciphertext using AES-256-GCM with integrity verification.

        Args:
            ciphertext: Encrypted data (without tag)
            key: The 32-byte encryption key
            nonce: The nonce used during encryption
            tag: The 16-byte authentication tag
            aad: Additional Authenticated Data (must match encryption AAD)

        Returns:
            Decrypted plaintext bytes

        Raises:
            CipherError: If parameters are invalid
            AuthenticationError: If the tag does not verify

        Security Notes:
            - Integrity is verified BEFORE any plaintext is returned
        """
        self._check_key_and_nonce(key, nonce)
        if len(tag) != TAG_SIZE:
            raise AuthenticationError()

        try:
            return AESGCM(bytes(key)).decrypt(nonce, bytes(ciphertext) + bytes(tag), aad)
        except InvalidTag as exc:
            raise AuthenticationError() from exc
        except (OverflowError, ValueError, TypeError) as exc:
            raise CipherError() from exc

    @staticmethod
    def _check_key_and_nonce(key: bytes, nonce: bytes) -> None:
        if len(key) != SESSION_KEY_SIZE:
            raise CipherError(f"Key must be exactly {SESSION_KEY_SIZE} bytes")
        if len(nonce) != NONCE_SIZE:
            raise CipherError(f"Nonce must be exactly {NONCE_SIZE} bytes")
