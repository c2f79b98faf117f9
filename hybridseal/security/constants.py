"""
Security Constants
==================

Sizes and algorithm names shared by the packet protocol.
These values define the packet format and must not change without a
packet version bump.
"""

from typing import Final

# Symmetric layer (AES-256-GCM)
SYMMETRIC_ALGORITHM: Final[str] = "AES-256-GCM"
SESSION_KEY_SIZE: Final[int] = 32  # 256 bits
NONCE_SIZE: Final[int] = 12  # 96 bits for GCM
TAG_SIZE: Final[int] = 16  # 128 bits

# Integrity binder
INTEGRITY_ALGORITHM: Final[str] = "HMAC-SHA256"
INTEGRITY_TAG_SIZE: Final[int] = 32

# Asymmetric layer
KEY_ENCAPSULATION_ALGORITHM: Final[str] = "RSA-OAEP-SHA256"
SIGNATURE_ALGORITHM: Final[str] = "RSA-PSS-SHA256"
RSA_PUBLIC_EXPONENT: Final[int] = 65537
DEFAULT_RSA_KEY_SIZE: Final[int] = 2048
MIN_RSA_KEY_SIZE: Final[int] = 2048

# Private key export (PBES2)
PRIVATE_KEY_PROTECTION: Final[str] = "PBKDF2WithHMAC-SHA256AndAES256-CBC"
DEFAULT_EXPORT_ITERATIONS: Final[int] = 600_000  # OWASP 2023 recommendation
