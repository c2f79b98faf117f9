"""Tests for cryptographic self-tests and the startup validator."""

from __future__ import annotations

import logging

from hybridseal.security import CryptoSelfTest, SecurityCheckResult, StartupSecurityValidator
from hybridseal.security.constants import (
    INTEGRITY_ALGORITHM,
    KEY_ENCAPSULATION_ALGORITHM,
    SIGNATURE_ALGORITHM,
    SYMMETRIC_ALGORITHM,
)


class TestCryptoSelfTest:

    def test_aes_gcm(self) -> None:
        result = CryptoSelfTest.test_aes_gcm()

        assert result.result is SecurityCheckResult.PASS
        assert result.name == SYMMETRIC_ALGORITHM

    def test_hmac_known_answer(self) -> None:
        assert CryptoSelfTest.test_hmac().result is SecurityCheckResult.PASS

    def test_rsa_oaep(self, recipient) -> None:
        assert CryptoSelfTest.test_rsa_oaep(recipient).result is SecurityCheckResult.PASS

    def test_rsa_pss(self, sender) -> None:
        assert CryptoSelfTest.test_rsa_pss(sender).result is SecurityCheckResult.PASS

    def test_packet_round_trip(self, recipient, sender) -> None:
        result = CryptoSelfTest.test_packet_round_trip(recipient, sender)

        assert result.result is SecurityCheckResult.PASS

    def test_random_generator(self) -> None:
        assert CryptoSelfTest.test_random_generator().result is not SecurityCheckResult.FAIL

    def test_failure_is_reported_not_raised(self) -> None:
        result = CryptoSelfTest.test_rsa_oaep(keypair="not a key pair")  # type: ignore[arg-type]

        assert result.result is SecurityCheckResult.FAIL


class TestStartupSecurityValidator:

    def test_run_all_checks(self, caplog) -> None:
        validator = StartupSecurityValidator()

        with caplog.at_level(logging.INFO, logger="hybridseal.security"):
            assert validator.run_all_checks() is True

        results = validator.get_results()
        assert len(results) == 6
        assert "0 failures" in validator.get_summary()
        assert "Security validation passed" in caplog.text

    def test_results_named_by_algorithm(self) -> None:
        validator = StartupSecurityValidator()
        validator.run_all_checks()

        names = [r.name for r in validator.get_results()]

        assert names[:4] == [
            SYMMETRIC_ALGORITHM,
            INTEGRITY_ALGORITHM,
            KEY_ENCAPSULATION_ALGORITHM,
            SIGNATURE_ALGORITHM,
        ]
