"""
HybridSeal Cryptographic Core
=============================

Hybrid encryption packets with layered verification.

Architecture:
    1. AES-256-GCM: Payload encryption (authenticated)
    2. RSA-OAEP-SHA256: Session key encapsulation
    3. HMAC-SHA256: Integrity tag over ciphertext || nonce
    4. RSA-PSS-SHA256: Sender signature over the integrity tag

Security Properties:
    - Fresh session key and nonce per packet
    - Fixed-time, fixed-length integrity tag comparison
    - Integrity, signature and AEAD tag all verified before plaintext
      is returned
    - Uniform key decapsulation errors (no padding oracle)
    - Private keys leave memory only password-encrypted

WARNING: This module handles sensitive cryptographic material.
         Incorrect usage can compromise security.
"""

from hybridseal.core.crypto.aes_gcm import AesGcmCipher, AuthenticatedCipher
from hybridseal.core.crypto.exceptions import (
    OPAQUE_FAILURE_MESSAGE,
    AuthenticationError,
    CipherError,
    EncapsulationError,
    ErrorKind,
    HybridCryptoError,
    IntegrityError,
    KeyImportError,
    PacketFormatError,
    SignatureError,
)
from hybridseal.core.crypto.hybrid_engine import (
    DecryptOutcome,
    EncryptedPacket,
    HybridEncryptionEngine,
)
from hybridseal.core.crypto.integrity import compute_integrity_tag, tags_equal
from hybridseal.core.crypto.rsa_kem import RsaKEM
from hybridseal.core.crypto.rsa_keys import (
    RsaKeyPair,
    export_private_key,
    export_public_key,
    generate_keypair,
    import_private_key,
    import_public_key,
)
from hybridseal.core.crypto.signature import RsaSigner, SignatureAuthenticator

__all__ = [
    "AesGcmCipher",
    "AuthenticatedCipher",
    "HybridEncryptionEngine",
    "EncryptedPacket",
    "DecryptOutcome",
    "RsaKEM",
    "RsaKeyPair",
    "RsaSigner",
    "SignatureAuthenticator",
    "compute_integrity_tag",
    "tags_equal",
    "generate_keypair",
    "export_public_key",
    "import_public_key",
    "export_private_key",
    "import_private_key",
    "OPAQUE_FAILURE_MESSAGE",
    "ErrorKind",
    "HybridCryptoError",
    "CipherError",
    "EncapsulationError",
    "IntegrityError",
    "SignatureError",
    "AuthenticationError",
    "KeyImportError",
    "PacketFormatError",
]
