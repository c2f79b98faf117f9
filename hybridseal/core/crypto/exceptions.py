"""
Cryptographic Error Taxonomy
============================

Every failure in the packet protocol maps to exactly one error kind.

Security Properties:
    - Messages are fixed and generic (no library error text leaks out)
    - Underlying causes are chained for local debugging only
    - Kinds are distinguishable for observability, while untrusted callers
      only ever see OPAQUE_FAILURE_MESSAGE (see DecryptOutcome)
"""

from __future__ import annotations

from enum import Enum
from typing import Final, Optional

OPAQUE_FAILURE_MESSAGE: Final[str] = "Decryption failed"


class ErrorKind(Enum):
    """Failure categories of the hybrid packet protocol."""

    CIPHER = "CIPHER"
    ENCAPSULATION = "ENCAPSULATION"
    INTEGRITY = "INTEGRITY"
    SIGNATURE = "SIGNATURE"
    AUTHENTICATION = "AUTHENTICATION"
    KEY_IMPORT = "KEY_IMPORT"
    PACKET_FORMAT = "PACKET_FORMAT"


class HybridCryptoError(Exception):
    """
    Base class for all hybrid packet failures.

    Subclasses set ``kind`` and a default message. A custom message may be
    given, but it must never contain key material or library error text.
    """

    kind: ErrorKind = ErrorKind.CIPHER
    default_message: str = "Cryptographic operation failed"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class CipherError(HybridCryptoError):
    """The AEAD primitive rejected its inputs (key/nonce size, oversized data)."""

    kind = ErrorKind.CIPHER
    default_message = "Symmetric encryption failed"


class EncapsulationError(HybridCryptoError):
    """
    Session key wrap or unwrap failed.

    Unwrap failures always carry the same message, whatever the cause
    (padding, length, wrong key), to avoid a padding oracle.
    """

    kind = ErrorKind.ENCAPSULATION
    default_message = "Session key decapsulation failed"


class IntegrityError(HybridCryptoError):
    """Recomputed integrity tag does not match the packet."""

    kind = ErrorKind.INTEGRITY
    default_message = "Integrity tag mismatch"


class SignatureError(HybridCryptoError):
    """Signing failed or the signature does not verify."""

    kind = ErrorKind.SIGNATURE
    default_message = "Signature verification failed"


class AuthenticationError(HybridCryptoError):
    """The AEAD authentication tag did not verify."""

    kind = ErrorKind.AUTHENTICATION
    default_message = "Authentication tag mismatch"


class KeyImportError(HybridCryptoError):
    """Malformed key material, wrong password, or unsupported key export."""

    kind = ErrorKind.KEY_IMPORT
    default_message = "Key import failed"


class PacketFormatError(HybridCryptoError, ValueError):
    """Serialized packet is malformed, truncated, or of an unknown version."""

    kind = ErrorKind.PACKET_FORMAT
    default_message = "Malformed encrypted packet"
