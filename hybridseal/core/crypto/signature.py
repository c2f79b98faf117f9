"""
RSA-PSS Signatures
==================

Sign/verify adapter implementing the signature contract of the packet
protocol. The packet signs its integrity tag, which proves the tag was
produced by the holder of the signing key.

Parameters:
    RSA-PSS, SHA-256, MGF1-SHA256, maximum salt length.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from hybridseal.core.crypto.exceptions import KeyImportError, SignatureError
from hybridseal.core.crypto.rsa_keys import KeyLike, as_private_key, as_public_key

logger = logging.getLogger(__name__)


@runtime_checkable
class SignatureAuthenticator(Protocol):
    """Contract for the signature primitive used by the hybrid engine."""

    def sign(self, message: bytes, private_key: KeyLike) -> bytes:
        ...

    def verify(self, signature: bytes, message: bytes, public_key: KeyLike) -> bool:
        ...


def _pss() -> padding.PSS:
    return padding.PSS(
        mgf=padding.MGF1(hashes.SHA256()),
        salt_length=padding.PSS.MAX_LENGTH,
    )


class RsaSigner:
    """
    RSA-PSS-SHA256 signer/verifier.

    Usage:
        signer = RsaSigner()
        signature = signer.sign(message, sender.private_key)
        ok = signer.verify(signature, message, sender.public_key)
    """

    __slots__ = ()

    def sign(self, message: bytes, private_key: KeyLike) -> bytes:
        """
        Sign a message.

        Raises:
            SignatureError: If the signing key is missing or invalid
        """
        try:
            rsa_private = as_private_key(private_key)
            return rsa_private.sign(bytes(message), _pss(), hashes.SHA256())
        except (KeyImportError, TypeError, ValueError) as exc:
            raise SignatureError("Signing failed") from exc

    def verify(self, signature: bytes, message: bytes, public_key: KeyLike) -> bool:
        """
        Verify a signature.

        Returns:
            True if the signature is valid for this message and key,
            False otherwise (including malformed signatures and keys)
        """
        try:
            rsa_public = as_public_key(public_key)
            rsa_public.verify(bytes(signature), bytes(message), _pss(), hashes.SHA256())
        except InvalidSignature:
            return False
        except (TypeError, ValueError) as exc:
            logger.debug("Signature verification rejected input: %s", type(exc).__name__)
            return False
        return True
