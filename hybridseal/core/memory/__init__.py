"""
HybridSeal Memory Security Module
=================================

Best-effort wiping of ephemeral key material.
"""

from hybridseal.core.memory.zeroization import secure_zero, ZeroizeContext

__all__ = [
    "secure_zero",
    "ZeroizeContext",
]
