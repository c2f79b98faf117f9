"""
RSA Key-Pair Lifecycle
======================

Owned key-pair handles plus generation, export and import.

Key handles are explicit values: any number of them can coexist in a
process, and none is bound to an engine instance. Handles are immutable;
importing always produces a new handle.

Export Formats:
    - Public key: DER SubjectPublicKeyInfo (default) or DER PKCS#1
      RSAPublicKey
    - Private key: password-encrypted PKCS#8 only (PBES2 with
      PBKDF2-HMAC-SHA256, caller-chosen iteration count, random salt,
      AES-256-CBC)

There is deliberately no plaintext private-key export.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from Crypto.PublicKey import RSA as PycryptodomeRSA
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from hybridseal.core.config import HybridSealConfig
from hybridseal.core.crypto.exceptions import KeyImportError
from hybridseal.security.constants import (
    DEFAULT_RSA_KEY_SIZE,
    MIN_RSA_KEY_SIZE,
    PRIVATE_KEY_PROTECTION,
    RSA_PUBLIC_EXPONENT,
)

logger = logging.getLogger(__name__)

PUBLIC_FORMAT_SPKI = "spki"
PUBLIC_FORMAT_PKCS1 = "pkcs1"

_PUBLIC_FORMATS = {
    PUBLIC_FORMAT_SPKI: serialization.PublicFormat.SubjectPublicKeyInfo,
    PUBLIC_FORMAT_PKCS1: serialization.PublicFormat.PKCS1,
}


@dataclass(frozen=True, slots=True)
class RsaKeyPair:
    """
    Immutable RSA key-pair handle.

    Attributes:
        public_key: Used for wrapping and verification (can be shared)
        private_key: Used for unwrapping and signing; None for a
            public-only handle held by senders and verifiers
    """

    public_key: RSAPublicKey
    private_key: Optional[RSAPrivateKey] = None

    @classmethod
    def from_private_key(cls, private_key: RSAPrivateKey) -> "RsaKeyPair":
        """Build a full handle from a private key."""
        return cls(public_key=private_key.public_key(), private_key=private_key)

    @property
    def key_size(self) -> int:
        """Modulus size in bits."""
        return self.public_key.key_size

    @property
    def has_private_key(self) -> bool:
        return self.private_key is not None

    def public_only(self) -> "RsaKeyPair":
        """Return a handle carrying only the public half."""
        return RsaKeyPair(public_key=self.public_key)

    def require_private_key(self) -> RSAPrivateKey:
        """
        Get the private half.

        Raises:
            KeyImportError: If this is a public-only handle
        """
        if self.private_key is None:
            raise KeyImportError("Key pair has no private key")
        return self.private_key

    def __repr__(self) -> str:
        """Safe representation without exposing key material."""
        kind = "private" if self.has_private_key else "public-only"
        return f"RsaKeyPair(bits={self.key_size}, {kind})"


KeyLike = Union[RsaKeyPair, RSAPublicKey, RSAPrivateKey]


def generate_keypair(key_size: int = DEFAULT_RSA_KEY_SIZE) -> RsaKeyPair:
    """
    Generate a fresh RSA key pair.

    Args:
        key_size: Modulus size in bits (at least 2048)

    Returns:
        RsaKeyPair with both halves

    Security:
        - Private half must stay in memory or be exported password-protected
        - Public half can be freely distributed
    """
    if key_size < MIN_RSA_KEY_SIZE:
        raise ValueError(f"RSA key size must be at least {MIN_RSA_KEY_SIZE} bits")

    private_key = rsa.generate_private_key(
        public_exponent=RSA_PUBLIC_EXPONENT,
        key_size=key_size,
    )
    logger.debug("Generated RSA-%d key pair", key_size)
    return RsaKeyPair.from_private_key(private_key)


def export_public_key(key: KeyLike, fmt: str = PUBLIC_FORMAT_SPKI) -> bytes:
    """
    Export the public half as DER.

    Args:
        key: Key pair handle or RSA key object
        fmt: "spki" (SubjectPublicKeyInfo) or "pkcs1" (RSAPublicKey)

    Returns:
        DER bytes, exactly as long as the encoding
    """
    if fmt not in _PUBLIC_FORMATS:
        raise ValueError(f"Unsupported public key format: {fmt}")

    return as_public_key(key).public_bytes(
        encoding=serialization.Encoding.DER,
        format=_PUBLIC_FORMATS[fmt],
    )


def import_public_key(data: bytes) -> RsaKeyPair:
    """
    Import a DER-encoded RSA public key (SubjectPublicKeyInfo or PKCS#1).

    Returns:
        Public-only RsaKeyPair

    Raises:
        KeyImportError: If the data is malformed or not an RSA key
    """
    try:
        key = serialization.load_der_public_key(bytes(data))
    except (ValueError, TypeError) as exc:
        logger.debug("Public key import rejected: %s", type(exc).__name__)
        raise KeyImportError("Malformed public key") from exc

    if not isinstance(key, RSAPublicKey):
        raise KeyImportError("Public key is not an RSA key")

    return RsaKeyPair(public_key=key)


def export_private_key(
    keypair: RsaKeyPair,
    password: str,
    iterations: Optional[int] = None,
) -> bytes:
    """
    Export the private half as a password-encrypted PKCS#8 DER container.

    The container uses PBES2 (PBKDF2-HMAC-SHA256 with ``iterations`` rounds
    and a random salt, AES-256-CBC). The returned buffer is produced by the
    encoder and is exactly as long as the encoding.

    Args:
        keypair: Handle holding a private key
        password: Non-empty password
        iterations: PBKDF2 iteration count (at least 1); defaults to
            crypto.private_key_export_iterations of the process-wide config

    Returns:
        Encrypted PKCS#8 DER bytes

    Raises:
        KeyImportError: If the handle has no private key, the password is
            empty, or the iteration count is invalid
    """
    private_key = keypair.require_private_key()
    if not password:
        raise KeyImportError("Private key export requires a password")
    if iterations is None:
        iterations = HybridSealConfig.get_instance().crypto.private_key_export_iterations
    if iterations < 1:
        raise KeyImportError("Iteration count must be positive")

    numbers = private_key.private_numbers()
    public_numbers = numbers.public_numbers
    exportable = PycryptodomeRSA.construct(
        (public_numbers.n, public_numbers.e, numbers.d, numbers.p, numbers.q)
    )

    encoded = exportable.export_key(
        format="DER",
        passphrase=password.encode("utf-8"),
        pkcs=8,
        protection=PRIVATE_KEY_PROTECTION,
        prot_params={"iteration_count": iterations},
    )
    logger.debug("Exported encrypted private key (%d bytes)", len(encoded))
    return encoded


def import_private_key(data: bytes, password: str) -> RsaKeyPair:
    """
    Import a password-encrypted PKCS#8 private key (DER or PEM).

    Args:
        data: Encrypted PKCS#8 container
        password: Password used at export time

    Returns:
        New RsaKeyPair with both halves

    Raises:
        KeyImportError: Wrong password, malformed or unencrypted data, or a
            non-RSA key. The cause is not distinguished in the error.
    """
    if not password:
        raise KeyImportError("Private key import requires a password")

    data = bytes(data)
    loader = (
        serialization.load_pem_private_key
        if data.lstrip().startswith(b"-----BEGIN")
        else serialization.load_der_private_key
    )

    try:
        key = loader(data, password=password.encode("utf-8"))
    except (ValueError, TypeError) as exc:
        logger.debug("Private key import rejected: %s", type(exc).__name__)
        raise KeyImportError() from exc

    if not isinstance(key, RSAPrivateKey):
        raise KeyImportError("Private key is not an RSA key")

    return RsaKeyPair.from_private_key(key)


def as_public_key(key: KeyLike) -> RSAPublicKey:
    """Resolve a handle or key object to its RSA public key."""
    if isinstance(key, RsaKeyPair):
        return key.public_key
    if isinstance(key, RSAPrivateKey):
        return key.public_key()
    if isinstance(key, RSAPublicKey):
        return key
    raise TypeError(f"Expected an RSA key, got {type(key).__name__}")


def as_private_key(key: KeyLike) -> RSAPrivateKey:
    """Resolve a handle or key object to its RSA private key."""
    if isinstance(key, RsaKeyPair):
        return key.require_private_key()
    if isinstance(key, RSAPrivateKey):
        return key
    raise TypeError(f"Expected an RSA private key, got {type(key).__name__}")
