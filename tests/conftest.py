"""Shared fixtures for the hybridseal test suite."""

from __future__ import annotations

import pytest

from hybridseal.core.config import CryptoConfig, HybridSealConfig
from hybridseal.core.crypto import HybridEncryptionEngine, RsaKeyPair, generate_keypair


@pytest.fixture(autouse=True)
def _reset_config_singleton():
    HybridSealConfig.reset_instance()
    yield
    HybridSealConfig.reset_instance()


# RSA key generation is slow; share key pairs across the session.

@pytest.fixture(scope="session")
def recipient() -> RsaKeyPair:
    return generate_keypair(2048)


@pytest.fixture(scope="session")
def sender() -> RsaKeyPair:
    return generate_keypair(2048)


@pytest.fixture(scope="session")
def stranger() -> RsaKeyPair:
    return generate_keypair(2048)


@pytest.fixture
def engine() -> HybridEncryptionEngine:
    return HybridEncryptionEngine(config=CryptoConfig())
