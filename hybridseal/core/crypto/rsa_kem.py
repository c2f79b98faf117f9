"""
RSA-OAEP Key Encapsulation
==========================

Wraps and unwraps the ephemeral session key under an RSA key pair.

Padding:
    OAEP with SHA-256 and MGF1-SHA256, no label. For RSA-2048 the wrapped
    key is 256 bytes and at most 190 bytes can be wrapped.

Security Properties:
    - Unwrap failures are uniform: padding errors, length errors, wrong
      keys and wrong-size session keys all raise the same
      EncapsulationError with the same message
    - The underlying cause is logged at DEBUG level only
"""

from __future__ import annotations

import logging
from typing import Final

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from hybridseal.core.crypto.exceptions import EncapsulationError
from hybridseal.core.crypto.rsa_keys import KeyLike, as_private_key, as_public_key
from hybridseal.security.constants import SESSION_KEY_SIZE

logger = logging.getLogger(__name__)

_OAEP_HASH_SIZE: Final[int] = hashes.SHA256.digest_size


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


class RsaKEM:
    """
    RSA-OAEP session key encapsulation.

    Usage:
        kem = RsaKEM()

        # Sender
        wrapped = kem.wrap(session_key, recipient.public_key)

        # Recipient
        session_key = kem.unwrap(wrapped, recipient.private_key)
    """

    __slots__ = ("_session_key_size",)

    def __init__(self, session_key_size: int = SESSION_KEY_SIZE) -> None:
        """
        Args:
            session_key_size: Exact length unwrap accepts for a recovered key
        """
        self._session_key_size = session_key_size

    @staticmethod
    def max_wrap_size(public_key: KeyLike) -> int:
        """Largest message OAEP-SHA256 can wrap under this key."""
        modulus_bytes = (as_public_key(public_key).key_size + 7) // 8
        return modulus_bytes - 2 * _OAEP_HASH_SIZE - 2

    def wrap(self, session_key: bytes, public_key: KeyLike) -> bytes:
        """
        Encrypt the session key under the recipient's public key.

        Args:
            session_key: Symmetric key to protect
            public_key: Recipient key pair handle or RSA public key

        Returns:
            Wrapped key, exactly the modulus size in bytes

        Raises:
            EncapsulationError: If the key material is not an RSA key or the
                session key exceeds the OAEP maximum message size
        """
        try:
            rsa_public = as_public_key(public_key)
        except TypeError as exc:
            raise EncapsulationError("Invalid recipient public key") from exc

        if len(session_key) > self.max_wrap_size(rsa_public):
            raise EncapsulationError("Session key too large for recipient key")

        try:
            return rsa_public.encrypt(bytes(session_key), _oaep())
        except (ValueError, TypeError) as exc:
            raise EncapsulationError("Session key encapsulation failed") from exc

    def unwrap(self, wrapped_key: bytes, private_key: KeyLike) -> bytes:
        """
        Recover the session key with the recipient's private key.

        Args:
            wrapped_key: Output of wrap()
            private_key: Recipient key pair handle or RSA private key

        Returns:
            Session key bytes

        Raises:
            EncapsulationError: On any failure, always with the same message
        """
        try:
            rsa_private = as_private_key(private_key)
            session_key = rsa_private.decrypt(bytes(wrapped_key), _oaep())
        except Exception as exc:
            logger.debug("Session key unwrap failed: %s", type(exc).__name__)
            raise EncapsulationError() from None

        if len(session_key) != self._session_key_size:
            logger.debug("Session key unwrap failed: unexpected key length")
            raise EncapsulationError()

        return session_key
