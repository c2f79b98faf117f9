"""
HybridSeal - Signed Hybrid Encryption Packets
=============================================

Encrypts data for one recipient (RSA-OAEP + AES-256-GCM), binds the
ciphertext to its session key (HMAC-SHA256), and signs the result
(RSA-PSS) so any holder of the sender's public key can authenticate it.

Security Notice:
- No secrets are logged
- Fail-closed design pattern
- No plaintext private-key export
"""

from hybridseal.core.config import HybridSealConfig
from hybridseal.core.logging import configure_logging, get_secure_logger
from hybridseal.core.crypto import (
    EncryptedPacket,
    HybridEncryptionEngine,
    RsaKeyPair,
)

__version__ = "0.1.0"

__all__ = [
    "HybridSealConfig",
    "configure_logging",
    "get_secure_logger",
    "HybridEncryptionEngine",
    "EncryptedPacket",
    "RsaKeyPair",
    "__version__",
]
