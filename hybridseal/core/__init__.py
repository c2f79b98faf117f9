"""
Core module - Contains configuration, logging, and the cryptographic core.
"""

from hybridseal.core.config import HybridSealConfig
from hybridseal.core.logging import configure_logging, get_secure_logger, SecureLogFilter

__all__ = ["HybridSealConfig", "configure_logging", "get_secure_logger", "SecureLogFilter"]
