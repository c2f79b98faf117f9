"""
Security module - Protocol constants and cryptographic self-tests.

Security Considerations:
- Use only approved primitives (AES-256-GCM, HMAC-SHA256, RSA-OAEP, RSA-PSS)
- Fail-closed design principles
- No custom cryptography implementations
"""

from hybridseal.security.constants import (
    SESSION_KEY_SIZE,
    NONCE_SIZE,
    TAG_SIZE,
    INTEGRITY_TAG_SIZE,
    DEFAULT_RSA_KEY_SIZE,
)
from hybridseal.security.hardening import (
    CryptoSelfTest,
    StartupSecurityValidator,
    CheckResult,
    SecurityCheckResult,
)

__all__ = [
    # Constants
    "SESSION_KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
    "INTEGRITY_TAG_SIZE",
    "DEFAULT_RSA_KEY_SIZE",
    # Hardening
    "CryptoSelfTest",
    "StartupSecurityValidator",
    "CheckResult",
    "SecurityCheckResult",
]
