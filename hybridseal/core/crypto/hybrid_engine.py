"""
Hybrid Encryption Packet Engine
===============================

Combines four layers into one self-contained packet:
    1. AES-256-GCM (payload confidentiality + AEAD tag)
    2. RSA-OAEP (session key encapsulation)
    3. HMAC-SHA256 (integrity tag over ciphertext || nonce)
    4. RSA-PSS (sender signature over the integrity tag)

Encryption Flow:
    plaintext
        ↓ AES-256-GCM seal (session_key, nonce)
    ciphertext, tag
        ↓ RSA-OAEP wrap (session_key, recipient public key)
    wrapped_session_key
        ↓ HMAC-SHA256 (ciphertext || nonce, session_key)
    integrity_tag
        ↓ RSA-PSS sign (integrity_tag, sender private key)
    EncryptedPacket

Decryption Flow:
    EncryptedPacket
        ↓ RSA-OAEP unwrap → session_key
        ↓ HMAC-SHA256 recompute, fixed-time compare   (IntegrityError)
        ↓ RSA-PSS verify integrity_tag                 (SignatureError)
        ↓ AES-256-GCM open                             (AuthenticationError)
    plaintext

Each gate runs only if the previous one passed. The integrity tag is the
cheap check against corruption or the wrong key, the signature proves the
sender, and the AEAD tag is the cipher's own final check.

WARNING:
    - The session key exists only inside one encrypt/decrypt call
    - Any failure = complete rejection, no partial packet or plaintext
"""

from __future__ import annotations

import json
import logging
import secrets
import struct
from base64 import b64decode, b64encode
from binascii import Error as Base64Error
from dataclasses import dataclass
from typing import Final, Optional

from hybridseal.core.config import CryptoConfig, HybridSealConfig
from hybridseal.core.crypto.aes_gcm import AesGcmCipher, AuthenticatedCipher
from hybridseal.core.crypto.exceptions import (
    OPAQUE_FAILURE_MESSAGE,
    ErrorKind,
    HybridCryptoError,
    IntegrityError,
    PacketFormatError,
    SignatureError,
)
from hybridseal.core.crypto.integrity import compute_integrity_tag, tags_equal
from hybridseal.core.crypto.rsa_kem import RsaKEM
from hybridseal.core.crypto.rsa_keys import (
    KeyLike,
    RsaKeyPair,
    export_private_key,
    generate_keypair,
)
from hybridseal.core.crypto.signature import RsaSigner, SignatureAuthenticator
from hybridseal.core.memory.zeroization import ZeroizeContext
from hybridseal.security.constants import (
    INTEGRITY_TAG_SIZE,
    NONCE_SIZE,
    SESSION_KEY_SIZE,
    TAG_SIZE,
)

logger = logging.getLogger(__name__)

# Version for format compatibility
PACKET_VERSION: Final[int] = 1
MAGIC_BYTES: Final[bytes] = b"HSPK"  # HybridSeal PacKet

_HEADER: Final[struct.Struct] = struct.Struct(">4sB")
_U16: Final[struct.Struct] = struct.Struct(">H")
_U32: Final[struct.Struct] = struct.Struct(">I")
_U16_MAX: Final[int] = 0xFFFF
_U32_MAX: Final[int] = 0xFFFFFFFF


@dataclass(frozen=True, slots=True)
class EncryptedPacket:
    """
    Immutable hybrid-encrypted packet.

    Contains everything the recipient needs besides their private key and
    the sender's public signing key. Safe to serialize and transmit.
    """

    nonce: bytes
    ciphertext: bytes
    tag: bytes
    wrapped_session_key: bytes
    integrity_tag: bytes
    signature: bytes
    version: int = PACKET_VERSION

    def to_bytes(self) -> bytes:
        """
        Serialize packet to bytes.

        Format (big-endian):
            MAGIC (4) | VERSION (1) |
            NONCE (12) | TAG (16) | INTEGRITY_TAG (32) |
            WRAPPED_KEY_LEN (2) | WRAPPED_KEY |
            SIGNATURE_LEN (2) | SIGNATURE |
            CT_LEN (4) | CIPHERTEXT

        Raises:
            PacketFormatError: If a field is too long for its length prefix
        """
        if (
            len(self.wrapped_session_key) > _U16_MAX
            or len(self.signature) > _U16_MAX
            or len(self.ciphertext) > _U32_MAX
        ):
            raise PacketFormatError("Packet field too long for binary encoding")

        parts = [
            _HEADER.pack(MAGIC_BYTES, self.version),
            self.nonce,
            self.tag,
            self.integrity_tag,
            _U16.pack(len(self.wrapped_session_key)),
            self.wrapped_session_key,
            _U16.pack(len(self.signature)),
            self.signature,
            _U32.pack(len(self.ciphertext)),
            self.ciphertext,
        ]
        return b"".join(parts)

    @classmethod
    def from_bytes(cls, data: bytes) -> "EncryptedPacket":
        """
        Deserialize packet from bytes.

        Raises:
            PacketFormatError: If data is malformed, truncated, has trailing
                bytes, or uses an unsupported version
        """
        reader = _Reader(bytes(data))

        magic, version = _HEADER.unpack(reader.take(_HEADER.size))
        if magic != MAGIC_BYTES:
            raise PacketFormatError("Invalid packet: bad magic bytes")
        if version != PACKET_VERSION:
            raise PacketFormatError(f"Unsupported packet version: {version}")

        nonce = reader.take(NONCE_SIZE)
        tag = reader.take(TAG_SIZE)
        integrity_tag = reader.take(INTEGRITY_TAG_SIZE)
        wrapped_session_key = reader.take(_U16.unpack(reader.take(_U16.size))[0])
        signature = reader.take(_U16.unpack(reader.take(_U16.size))[0])
        ciphertext = reader.take(_U32.unpack(reader.take(_U32.size))[0])

        if reader.remaining:
            raise PacketFormatError("Invalid packet: trailing data")

        return cls(
            nonce=nonce,
            ciphertext=ciphertext,
            tag=tag,
            wrapped_session_key=wrapped_session_key,
            integrity_tag=integrity_tag,
            signature=signature,
            version=version,
        )

    def to_json(self) -> str:
        """Serialize to JSON string with base64-encoded binary fields."""
        return json.dumps({
            "version": self.version,
            "nonce": b64encode(self.nonce).decode(),
            "ciphertext": b64encode(self.ciphertext).decode(),
            "tag": b64encode(self.tag).decode(),
            "wrapped_session_key": b64encode(self.wrapped_session_key).decode(),
            "integrity_tag": b64encode(self.integrity_tag).decode(),
            "signature": b64encode(self.signature).decode(),
        })

    @classmethod
    def from_json(cls, json_str: str) -> "EncryptedPacket":
        """
        Deserialize from JSON string.

        Raises:
            PacketFormatError: If JSON, base64 or field sizes are invalid
        """
        try:
            data = json.loads(json_str)
            packet = cls(
                version=int(data["version"]),
                nonce=b64decode(data["nonce"], validate=True),
                ciphertext=b64decode(data["ciphertext"], validate=True),
                tag=b64decode(data["tag"], validate=True),
                wrapped_session_key=b64decode(data["wrapped_session_key"], validate=True),
                integrity_tag=b64decode(data["integrity_tag"], validate=True),
                signature=b64decode(data["signature"], validate=True),
            )
        except (ValueError, KeyError, TypeError, Base64Error) as exc:
            raise PacketFormatError() from exc

        if packet.version != PACKET_VERSION:
            raise PacketFormatError(f"Unsupported packet version: {packet.version}")
        if (
            len(packet.nonce) != NONCE_SIZE
            or len(packet.tag) != TAG_SIZE
            or len(packet.integrity_tag) != INTEGRITY_TAG_SIZE
        ):
            raise PacketFormatError("Invalid packet: wrong field size")
        return packet

    def __repr__(self) -> str:
        """Safe representation."""
        return (
            f"EncryptedPacket(v{self.version}, "
            f"ct_len={len(self.ciphertext)}, "
            f"wrapped_key_len={len(self.wrapped_session_key)}, "
            f"sig_len={len(self.signature)})"
        )


class _Reader:
    """Bounds-checked cursor over serialized packet bytes."""

    __slots__ = ("_data", "_offset")

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def take(self, size: int) -> bytes:
        if size > self.remaining:
            raise PacketFormatError("Invalid packet: truncated")
        chunk = self._data[self._offset:self._offset + size]
        self._offset += size
        return chunk


@dataclass(frozen=True, slots=True)
class DecryptOutcome:
    """
    Result-value form of a decryption.

    Exactly one of ``plaintext`` and ``error_kind`` is set. ``error_kind``
    is for local observability; anything reported to an untrusted party
    should use ``public_message``, which is identical for every failure.
    """

    plaintext: Optional[bytes] = None
    error_kind: Optional[ErrorKind] = None

    @property
    def succeeded(self) -> bool:
        return self.error_kind is None

    @property
    def public_message(self) -> str:
        return "OK" if self.succeeded else OPAQUE_FAILURE_MESSAGE

    def __repr__(self) -> str:
        if self.succeeded:
            return f"DecryptOutcome(ok, len={len(self.plaintext or b'')})"
        return f"DecryptOutcome(failed, kind={self.error_kind.name})"


class HybridEncryptionEngine:
    """
    Hybrid encryption packet engine.

    Provides authenticated, signed hybrid encryption using:
    - RSA-OAEP for session key encapsulation
    - AES-256-GCM for payload encryption
    - HMAC-SHA256 integrity tag bound to the session key
    - RSA-PSS signature over the integrity tag

    Usage:
        engine = HybridEncryptionEngine()

        recipient = engine.generate_keypair()
        sender = engine.generate_keypair()

        packet = engine.encrypt_data(plaintext, recipient.public_key, sender.private_key)
        plaintext = engine.decrypt_data(packet, recipient.private_key, sender.public_key)

    Key arguments accept either an RsaKeyPair handle or a ``cryptography``
    RSA key object. The engine holds no per-call state, so one instance
    can be shared between threads.
    """

    __slots__ = ("_cipher", "_kem", "_signer", "_config")

    def __init__(
        self,
        config: Optional[CryptoConfig] = None,
        cipher: Optional[AuthenticatedCipher] = None,
        signer: Optional[SignatureAuthenticator] = None,
        kem: Optional[RsaKEM] = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            config: Crypto configuration (defaults to the process-wide config)
            cipher: Authenticated cipher (defaults to AES-256-GCM)
            signer: Signature primitive (defaults to RSA-PSS-SHA256)
            kem: Key encapsulation (defaults to RSA-OAEP-SHA256)
        """
        self._config = config or HybridSealConfig.get_instance().crypto
        self._cipher = cipher or AesGcmCipher()
        self._signer = signer or RsaSigner()
        self._kem = kem or RsaKEM()

    @property
    def config(self) -> CryptoConfig:
        return self._config

    def generate_keypair(self) -> RsaKeyPair:
        """Generate an RSA key pair of the configured size."""
        return generate_keypair(self._config.rsa_key_size)

    def export_private_key(self, keypair: RsaKeyPair, password: str) -> bytes:
        """Export a private key with the configured PBKDF2 iteration count."""
        return export_private_key(
            keypair,
            password,
            iterations=self._config.private_key_export_iterations,
        )

    def encrypt_data(
        self,
        plaintext: bytes,
        recipient_public_key: KeyLike,
        signer_private_key: KeyLike,
    ) -> EncryptedPacket:
        """
        Encrypt and sign data for one recipient.

        Args:
            plaintext: Data to encrypt (can be empty)
            recipient_public_key: Recipient's key (public half is used)
            signer_private_key: Sender's signing key

        Returns:
            EncryptedPacket

        Raises:
            CipherError: The AEAD primitive rejected the input
            EncapsulationError: The session key could not be wrapped
            SignatureError: The integrity tag could not be signed

        Security:
            - Fresh random session key and nonce for every call
            - Session key buffer is wiped before returning, on any path
        """
        session_key = bytearray(secrets.token_bytes(SESSION_KEY_SIZE))
        nonce = secrets.token_bytes(NONCE_SIZE)

        with ZeroizeContext(session_key):
            try:
                ciphertext, tag = self._cipher.seal(plaintext, session_key, nonce, None)
                wrapped_session_key = self._kem.wrap(session_key, recipient_public_key)
                integrity_tag = compute_integrity_tag(ciphertext, nonce, session_key)
                signature = self._signer.sign(integrity_tag, signer_private_key)

                if self._config.verify_after_encrypt and not self._signer.verify(
                    signature, integrity_tag, signer_private_key
                ):
                    raise SignatureError("Produced signature does not verify")
            except HybridCryptoError as exc:
                logger.warning("Packet encryption failed: %s", exc.kind.name)
                raise

        packet = EncryptedPacket(
            nonce=nonce,
            ciphertext=ciphertext,
            tag=tag,
            wrapped_session_key=wrapped_session_key,
            integrity_tag=integrity_tag,
            signature=signature,
        )
        logger.debug("Encrypted packet: %r", packet)
        return packet

    def decrypt_data(
        self,
        packet: EncryptedPacket,
        recipient_private_key: KeyLike,
        signer_public_key: KeyLike,
    ) -> bytes:
        """
        Verify and decrypt a packet.

        Args:
            packet: EncryptedPacket from encrypt_data()
            recipient_private_key: Recipient's private key
            signer_public_key: Expected sender's public signing key

        Returns:
            The exact original plaintext

        Raises:
            EncapsulationError: Session key could not be recovered
            IntegrityError: Integrity tag mismatch (nothing decrypted)
            SignatureError: Sender signature does not verify
            AuthenticationError: AEAD tag mismatch
            CipherError: Malformed nonce or key sizes
        """
        try:
            session_key = bytearray(
                self._kem.unwrap(packet.wrapped_session_key, recipient_private_key)
            )
            with ZeroizeContext(session_key):
                expected_tag = compute_integrity_tag(packet.ciphertext, packet.nonce, session_key)
                if not tags_equal(expected_tag, packet.integrity_tag, INTEGRITY_TAG_SIZE):
                    raise IntegrityError()

                if not self._signer.verify(packet.signature, packet.integrity_tag, signer_public_key):
                    raise SignatureError()

                return self._cipher.open(
                    packet.ciphertext,
                    session_key,
                    packet.nonce,
                    packet.tag,
                    None,
                )
        except HybridCryptoError as exc:
            logger.warning("Packet decryption failed: %s", exc.kind.name)
            raise

    def try_decrypt_data(
        self,
        packet: EncryptedPacket,
        recipient_private_key: KeyLike,
        signer_public_key: KeyLike,
    ) -> DecryptOutcome:
        """
        Decrypt without raising for protocol failures.

        Returns:
            DecryptOutcome with either the plaintext or the error kind
        """
        try:
            plaintext = self.decrypt_data(packet, recipient_private_key, signer_public_key)
        except HybridCryptoError as exc:
            return DecryptOutcome(error_kind=exc.kind)
        return DecryptOutcome(plaintext=plaintext)

    def encrypt_to_bytes(
        self,
        plaintext: bytes,
        recipient_public_key: KeyLike,
        signer_private_key: KeyLike,
    ) -> bytes:
        """Encrypt and serialize in one step."""
        return self.encrypt_data(plaintext, recipient_public_key, signer_private_key).to_bytes()

    def decrypt_from_bytes(
        self,
        data: bytes,
        recipient_private_key: KeyLike,
        signer_public_key: KeyLike,
    ) -> bytes:
        """Deserialize and decrypt in one step."""
        return self.decrypt_data(
            EncryptedPacket.from_bytes(data),
            recipient_private_key,
            signer_public_key,
        )
