"""
Secure Configuration Module
===========================

Immutable, environment-aware configuration with security-first defaults.

Security Features:
- Immutable configuration after initialization
- Environment variable override support (HYBRIDSEAL_ prefix)
- Passwords and key material are never read from the environment
- Validation of cryptographic parameters
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Optional

from hybridseal.security.constants import (
    DEFAULT_EXPORT_ITERATIONS,
    DEFAULT_RSA_KEY_SIZE,
    MIN_RSA_KEY_SIZE,
)


# Environment keys containing any of these fragments are ignored
_SENSITIVE_KEYS: Final[frozenset[str]] = frozenset({
    "password", "passphrase", "secret", "token",
    "private", "credential", "salt", "pem", "der",
})

_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})


def _is_sensitive_key(key: str) -> bool:
    """Check if a configuration key might contain sensitive data."""
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in _SENSITIVE_KEYS)


def _as_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True, slots=True)
class CryptoConfig:
    """Immutable cryptographic parameters."""

    rsa_key_size: int = DEFAULT_RSA_KEY_SIZE
    private_key_export_iterations: int = DEFAULT_EXPORT_ITERATIONS
    # Check the freshly produced signature before returning a packet
    verify_after_encrypt: bool = False

    def __post_init__(self) -> None:
        """Validate cryptographic settings."""
        if self.rsa_key_size < MIN_RSA_KEY_SIZE:
            raise ValueError(f"RSA key size must be at least {MIN_RSA_KEY_SIZE} bits")
        if self.rsa_key_size % 8:
            raise ValueError("RSA key size must be a multiple of 8")
        if self.private_key_export_iterations < 1:
            raise ValueError("Private key export iterations must be positive")


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Immutable logging configuration."""

    level: str = "INFO"
    enable_console: bool = True
    enable_file: bool = False
    enable_json: bool = False
    log_dir: Optional[Path] = None
    max_file_size_bytes: int = 10 * 1024 * 1024  # 10 MB
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate logging settings."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.level.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {self.level}")
        if self.enable_file and self.log_dir is None:
            raise ValueError("File logging requires log_dir")
        if self.log_dir is not None and not self.log_dir.is_absolute():
            raise ValueError(f"log_dir must be an absolute path: {self.log_dir}")


class HybridSealConfig:
    """
    Centralized, immutable configuration with environment override support.

    Usage:
        config = HybridSealConfig.load()
        key_size = config.crypto.rsa_key_size
        level = config.logging.level

    Environment variables use the HYBRIDSEAL_ prefix and double
    underscores for nesting:
        HYBRIDSEAL_CRYPTO__RSA_KEY_SIZE=3072
        HYBRIDSEAL_CRYPTO__VERIFY_AFTER_ENCRYPT=true
        HYBRIDSEAL_LOGGING__LEVEL=DEBUG
        HYBRIDSEAL_LOGGING__LOG_DIR=/var/log/hybridseal
    """

    __slots__ = ("_crypto", "_logging", "_frozen", "_config_hash")

    _instance: Optional[HybridSealConfig] = None

    def __init__(
        self,
        crypto: Optional[CryptoConfig] = None,
        logging: Optional[LoggingConfig] = None,
    ) -> None:
        """Initialize configuration. Use HybridSealConfig.load() for standard initialization."""
        object.__setattr__(self, "_frozen", False)
        object.__setattr__(self, "_crypto", crypto or CryptoConfig())
        object.__setattr__(self, "_logging", logging or LoggingConfig())
        object.__setattr__(self, "_config_hash", self._compute_hash())
        object.__setattr__(self, "_frozen", True)

    def _compute_hash(self) -> str:
        """Compute a hash of the configuration for integrity checking."""
        config_str = f"{self._crypto}|{self._logging}"
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @property
    def crypto(self) -> CryptoConfig:
        return self._crypto

    @property
    def logging(self) -> LoggingConfig:
        return self._logging

    @property
    def config_hash(self) -> str:
        """Get configuration integrity hash."""
        return self._config_hash

    @classmethod
    def load(cls, env_prefix: str = "HYBRIDSEAL") -> HybridSealConfig:
        """
        Load configuration with environment variable overrides.

        Args:
            env_prefix: Prefix for environment variables

        Returns:
            Configured HybridSealConfig instance

        Raises:
            ValueError: If an override has an invalid value
        """
        env_overrides = cls._parse_env_overrides(env_prefix)

        crypto_kwargs: dict[str, Any] = {}
        if "crypto.rsa_key_size" in env_overrides:
            crypto_kwargs["rsa_key_size"] = int(env_overrides["crypto.rsa_key_size"])
        if "crypto.private_key_export_iterations" in env_overrides:
            crypto_kwargs["private_key_export_iterations"] = int(
                env_overrides["crypto.private_key_export_iterations"]
            )
        if "crypto.verify_after_encrypt" in env_overrides:
            crypto_kwargs["verify_after_encrypt"] = _as_bool(
                env_overrides["crypto.verify_after_encrypt"]
            )

        logging_kwargs: dict[str, Any] = {}
        if "logging.level" in env_overrides:
            logging_kwargs["level"] = env_overrides["logging.level"].upper()
        if "logging.enable_console" in env_overrides:
            logging_kwargs["enable_console"] = _as_bool(env_overrides["logging.enable_console"])
        if "logging.enable_file" in env_overrides:
            logging_kwargs["enable_file"] = _as_bool(env_overrides["logging.enable_file"])
        if "logging.enable_json" in env_overrides:
            logging_kwargs["enable_json"] = _as_bool(env_overrides["logging.enable_json"])
        if "logging.log_dir" in env_overrides:
            logging_kwargs["log_dir"] = Path(env_overrides["logging.log_dir"])

        return cls(
            crypto=CryptoConfig(**crypto_kwargs) if crypto_kwargs else None,
            logging=LoggingConfig(**logging_kwargs) if logging_kwargs else None,
        )

    @staticmethod
    def _parse_env_overrides(prefix: str) -> dict[str, str]:
        """Parse environment variables with the given prefix."""
        overrides: dict[str, str] = {}
        prefix_upper = f"{prefix.upper()}_"

        for key, value in os.environ.items():
            if key.startswith(prefix_upper):
                # HYBRIDSEAL_SECTION__KEY -> section.key
                config_key = key[len(prefix_upper):].lower().replace("__", ".")

                if _is_sensitive_key(config_key):
                    continue

                overrides[config_key] = value

        return overrides

    @classmethod
    def get_instance(cls) -> HybridSealConfig:
        """Get or create the process-wide configuration instance."""
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance. Use only for testing."""
        cls._instance = None

    def __repr__(self) -> str:
        return f"HybridSealConfig(hash={self._config_hash}, rsa={self._crypto.rsa_key_size})"

    def __setattr__(self, name: str, value: Any) -> None:
        """Prevent modification after initialization."""
        if getattr(self, "_frozen", False):
            raise AttributeError("HybridSealConfig is immutable after initialization")
        super().__setattr__(name, value)
