"""
Security Hardening Module
=========================

Cryptographic self-tests and startup validation.

This module implements:
- Known-answer and round-trip self-tests for each primitive
- A full packet round-trip including tamper rejection
- A startup validator that runs and logs all checks
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, List, Optional

from hybridseal.security.constants import (
    INTEGRITY_ALGORITHM,
    KEY_ENCAPSULATION_ALGORITHM,
    SIGNATURE_ALGORITHM,
    SYMMETRIC_ALGORITHM,
)

if TYPE_CHECKING:
    from hybridseal.core.crypto.rsa_keys import RsaKeyPair


class SecurityCheckResult(Enum):
    """Result of a security check."""
    PASS = auto()
    WARN = auto()
    FAIL = auto()


@dataclass
class CheckResult:
    """Individual security check result."""
    name: str
    result: SecurityCheckResult
    message: str
    details: Optional[str] = None


# RFC 4231 test case 2
_HMAC_KAT_KEY = b"Jefe"
_HMAC_KAT_DATA = b"what do ya want for nothing?"
_HMAC_KAT_DIGEST = bytes.fromhex(
    "5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843"
)


class CryptoSelfTest:
    """
    Cryptographic algorithm self-tests.

    Run on startup to verify the primitives behind the packet protocol.
    Each test catches its own failure and reports it as a CheckResult.
    """

    @staticmethod
    def test_aes_gcm() -> CheckResult:
        """Test AES-256-GCM seal/open and tag rejection."""
        try:
            from hybridseal.core.crypto.aes_gcm import AesGcmCipher
            from hybridseal.core.crypto.exceptions import AuthenticationError

            cipher = AesGcmCipher()
            key = cipher.generate_key()
            nonce = cipher.generate_nonce()
            plaintext = b"Test plaintext for AES-GCM self-test"

            ciphertext, tag = cipher.seal(plaintext, key, nonce)
            if cipher.open(ciphertext, key, nonce, tag) != plaintext:
                return CheckResult(SYMMETRIC_ALGORITHM, SecurityCheckResult.FAIL, "Decryption mismatch")

            forged = bytes([tag[0] ^ 0x01]) + tag[1:]
            try:
                cipher.open(ciphertext, key, nonce, forged)
            except AuthenticationError:
                return CheckResult(SYMMETRIC_ALGORITHM, SecurityCheckResult.PASS, "Self-test passed")
            return CheckResult(SYMMETRIC_ALGORITHM, SecurityCheckResult.FAIL, "Forged tag accepted")

        except Exception as e:
            return CheckResult(SYMMETRIC_ALGORITHM, SecurityCheckResult.FAIL, f"Self-test failed: {type(e).__name__}")

    @staticmethod
    def test_hmac() -> CheckResult:
        """Test the integrity binder against an RFC 4231 known answer."""
        try:
            from hybridseal.core.crypto.integrity import compute_integrity_tag, tags_equal

            # compute_integrity_tag(ct, nonce, key) MACs ct || nonce
            digest = compute_integrity_tag(_HMAC_KAT_DATA[:20], _HMAC_KAT_DATA[20:], _HMAC_KAT_KEY)
            if tags_equal(digest, _HMAC_KAT_DIGEST):
                return CheckResult(INTEGRITY_ALGORITHM, SecurityCheckResult.PASS, "Known answer matched")
            return CheckResult(INTEGRITY_ALGORITHM, SecurityCheckResult.FAIL, "Known answer mismatch")

        except Exception as e:
            return CheckResult(INTEGRITY_ALGORITHM, SecurityCheckResult.FAIL, f"Self-test failed: {type(e).__name__}")

    @staticmethod
    def test_rsa_oaep(keypair: Optional[RsaKeyPair] = None) -> CheckResult:
        """Test RSA-OAEP wrap/unwrap."""
        try:
            from hybridseal.core.crypto.rsa_kem import RsaKEM
            from hybridseal.core.crypto.rsa_keys import generate_keypair

            keypair = keypair or generate_keypair()
            kem = RsaKEM()
            session_key = secrets.token_bytes(32)

            wrapped = kem.wrap(session_key, keypair)
            if len(wrapped) != (keypair.key_size + 7) // 8:
                return CheckResult(KEY_ENCAPSULATION_ALGORITHM, SecurityCheckResult.FAIL, "Unexpected wrapped key size")
            if kem.unwrap(wrapped, keypair) != session_key:
                return CheckResult(KEY_ENCAPSULATION_ALGORITHM, SecurityCheckResult.FAIL, "Unwrap mismatch")
            return CheckResult(KEY_ENCAPSULATION_ALGORITHM, SecurityCheckResult.PASS, "Self-test passed")

        except Exception as e:
            return CheckResult(KEY_ENCAPSULATION_ALGORITHM, SecurityCheckResult.FAIL, f"Self-test failed: {type(e).__name__}")

    @staticmethod
    def test_rsa_pss(keypair: Optional[RsaKeyPair] = None) -> CheckResult:
        """Test RSA-PSS sign/verify and rejection of a different message."""
        try:
            from hybridseal.core.crypto.rsa_keys import generate_keypair
            from hybridseal.core.crypto.signature import RsaSigner

            keypair = keypair or generate_keypair()
            signer = RsaSigner()
            message = secrets.token_bytes(32)

            signature = signer.sign(message, keypair)
            if not signer.verify(signature, message, keypair):
                return CheckResult(SIGNATURE_ALGORITHM, SecurityCheckResult.FAIL, "Valid signature rejected")
            if signer.verify(signature, message[::-1], keypair):
                return CheckResult(SIGNATURE_ALGORITHM, SecurityCheckResult.FAIL, "Signature accepted for other message")
            return CheckResult(SIGNATURE_ALGORITHM, SecurityCheckResult.PASS, "Self-test passed")

        except Exception as e:
            return CheckResult(SIGNATURE_ALGORITHM, SecurityCheckResult.FAIL, f"Self-test failed: {type(e).__name__}")

    @staticmethod
    def test_packet_round_trip(
        recipient: Optional[RsaKeyPair] = None,
        sender: Optional[RsaKeyPair] = None,
    ) -> CheckResult:
        """Test a full packet encrypt/decrypt and a tampered packet."""
        try:
            from dataclasses import replace

            from hybridseal.core.config import CryptoConfig
            from hybridseal.core.crypto.hybrid_engine import HybridEncryptionEngine

            engine = HybridEncryptionEngine(config=CryptoConfig())
            recipient = recipient or engine.generate_keypair()
            sender = sender or engine.generate_keypair()
            plaintext = b"Hello, World!"

            packet = engine.encrypt_data(plaintext, recipient, sender)
            if engine.decrypt_data(packet, recipient, sender) != plaintext:
                return CheckResult("Packet", SecurityCheckResult.FAIL, "Round trip mismatch")

            tampered = replace(packet, ciphertext=bytes([packet.ciphertext[0] ^ 0x80]) + packet.ciphertext[1:])
            if engine.try_decrypt_data(tampered, recipient, sender).succeeded:
                return CheckResult("Packet", SecurityCheckResult.FAIL, "Tampered packet accepted")
            return CheckResult("Packet", SecurityCheckResult.PASS, "Self-test passed")

        except Exception as e:
            return CheckResult("Packet", SecurityCheckResult.FAIL, f"Self-test failed: {type(e).__name__}")

    @staticmethod
    def test_random_generator() -> CheckResult:
        """Test cryptographic random number generator."""
        try:
            random1 = secrets.token_bytes(32)
            random2 = secrets.token_bytes(32)

            if random1 == random2:
                return CheckResult("CSPRNG", SecurityCheckResult.FAIL, "Random bytes not unique")

            unique_bytes = len(set(random1))
            if unique_bytes < 20:  # At least 20 unique bytes in 32
                return CheckResult("CSPRNG", SecurityCheckResult.WARN, f"Low entropy: {unique_bytes}/32 unique")

            return CheckResult("CSPRNG", SecurityCheckResult.PASS, "Self-test passed")

        except Exception as e:
            return CheckResult("CSPRNG", SecurityCheckResult.FAIL, f"Self-test failed: {type(e).__name__}")

    @classmethod
    def run_all_tests(cls) -> List[CheckResult]:
        """Run all cryptographic self-tests, sharing one pair of RSA keys."""
        from hybridseal.core.crypto.rsa_keys import generate_keypair

        recipient = generate_keypair()
        sender = generate_keypair()
        return [
            cls.test_aes_gcm(),
            cls.test_hmac(),
            cls.test_rsa_oaep(recipient),
            cls.test_rsa_pss(sender),
            cls.test_packet_round_trip(recipient, sender),
            cls.test_random_generator(),
        ]


class StartupSecurityValidator:
    """
    Startup security validation.

    Runs all self-tests and determines if the library can be used safely.
    """

    def __init__(self, strict_mode: bool = True):
        self._strict = strict_mode
        self._results: List[CheckResult] = []
        self._log = logging.getLogger("hybridseal.security")

    def run_all_checks(self) -> bool:
        """
        Run all security checks.

        Returns:
            True if safe to proceed, False if any check failed
        """
        self._results.clear()

        self._log.info("Running cryptographic self-tests...")
        self._results.extend(CryptoSelfTest.run_all_tests())

        failures = [r for r in self._results if r.result == SecurityCheckResult.FAIL]
        warnings = [r for r in self._results if r.result == SecurityCheckResult.WARN]

        for result in self._results:
            level = {
                SecurityCheckResult.PASS: logging.INFO,
                SecurityCheckResult.WARN: logging.WARNING,
                SecurityCheckResult.FAIL: logging.ERROR,
            }[result.result]
            self._log.log(level, "[%s] %s: %s", result.result.name, result.name, result.message)

        if failures:
            self._log.critical("Security validation failed: %d critical failures", len(failures))
            return False

        if warnings and self._strict:
            self._log.warning("Security validation completed with %d warnings", len(warnings))

        self._log.info("Security validation passed")
        return True

    def get_results(self) -> List[CheckResult]:
        """Get all check results."""
        return self._results.copy()

    def get_summary(self) -> str:
        """Get a summary of check results."""
        passed = sum(1 for r in self._results if r.result == SecurityCheckResult.PASS)
        warned = sum(1 for r in self._results if r.result == SecurityCheckResult.WARN)
        failed = sum(1 for r in self._results if r.result == SecurityCheckResult.FAIL)

        return f"Security Check Summary: {passed} passed, {warned} warnings, {failed} failures"
