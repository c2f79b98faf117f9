"""Tests for RSA key-pair handles, export and import."""

from __future__ import annotations

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from hybridseal.core.config import CryptoConfig, HybridSealConfig
from hybridseal.core.crypto import (
    HybridEncryptionEngine,
    KeyImportError,
    RsaKeyPair,
    export_private_key,
    export_public_key,
    generate_keypair,
    import_private_key,
    import_public_key,
)
from hybridseal.core.crypto.rsa_keys import as_private_key, as_public_key


def _public_der(keypair: RsaKeyPair) -> bytes:
    return keypair.public_key.public_bytes(
        serialization.Encoding.DER,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )


class TestKeyPairHandle:

    def test_generated_pair(self, recipient) -> None:
        assert recipient.key_size == 2048
        assert recipient.has_private_key
        assert recipient.public_key.public_numbers().e == 65537

    def test_public_only(self, recipient) -> None:
        public = recipient.public_only()

        assert not public.has_private_key
        assert public.key_size == 2048
        with pytest.raises(KeyImportError):
            public.require_private_key()

    def test_repr_hides_key_material(self, recipient) -> None:
        text = repr(recipient)

        assert text == "RsaKeyPair(bits=2048, private)"

    def test_handles_are_immutable(self, recipient) -> None:
        with pytest.raises(AttributeError):
            recipient.private_key = None  # type: ignore[misc]

    def test_rejects_small_modulus(self) -> None:
        with pytest.raises(ValueError):
            generate_keypair(1024)

    def test_resolvers(self, recipient) -> None:
        assert as_public_key(recipient) is recipient.public_key
        assert as_private_key(recipient) is recipient.private_key
        assert as_public_key(recipient.private_key).public_numbers() == recipient.public_key.public_numbers()
        with pytest.raises(TypeError):
            as_private_key(recipient.public_key)
        with pytest.raises(TypeError):
            as_public_key(b"not a key")  # type: ignore[arg-type]


class TestPublicKeyExport:

    def test_spki_round_trip(self, recipient) -> None:
        der = export_public_key(recipient)

        imported = import_public_key(der)

        assert der == _public_der(recipient)
        assert imported.public_key.public_numbers() == recipient.public_key.public_numbers()
        assert not imported.has_private_key

    def test_pkcs1_round_trip(self, recipient) -> None:
        der = export_public_key(recipient, fmt="pkcs1")

        imported = import_public_key(der)

        assert der != _public_der(recipient)
        assert imported.public_key.public_numbers() == recipient.public_key.public_numbers()

    def test_unknown_format(self, recipient) -> None:
        with pytest.raises(ValueError):
            export_public_key(recipient, fmt="pem")

    def test_malformed(self) -> None:
        with pytest.raises(KeyImportError):
            import_public_key(b"\x30\x03garbage")

    def test_non_rsa_key(self) -> None:
        der = ec.generate_private_key(ec.SECP256R1()).public_key().public_bytes(
            serialization.Encoding.DER,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )

        with pytest.raises(KeyImportError):
            import_public_key(der)


class TestPrivateKeyExport:

    def test_encrypted_round_trip(self, recipient) -> None:
        exported = export_private_key(recipient, "correct horse", iterations=1000)

        imported = import_private_key(exported, "correct horse")

        assert imported.private_key.private_numbers() == recipient.private_key.private_numbers()
        assert imported is not recipient

    def test_output_is_encrypted_pkcs8(self, recipient) -> None:
        exported = export_private_key(recipient, "pw", iterations=1000)

        with pytest.raises(TypeError):
            serialization.load_der_private_key(exported, password=None)

    def test_output_sized_to_encoding(self, recipient) -> None:
        exported = export_private_key(recipient, "pw", iterations=1000)

        # Outer DER SEQUENCE with a two-byte length covers the whole buffer
        assert exported[:2] == b"\x30\x82"
        assert len(exported) == 4 + int.from_bytes(exported[2:4], "big")

    @pytest.mark.parametrize("password", ["pässwörd", "密码", "emoji 🔑"])
    def test_non_ascii_password_round_trip(self, recipient, password) -> None:
        exported = export_private_key(recipient, password, iterations=1000)

        imported = import_private_key(exported, password)

        assert imported.private_key.private_numbers() == recipient.private_key.private_numbers()

    def test_password_is_utf8_encoded(self, recipient) -> None:
        exported = export_private_key(recipient, "pässwörd", iterations=1000)

        key = serialization.load_der_private_key(exported, password="pässwörd".encode("utf-8"))

        assert key.private_numbers() == recipient.private_key.private_numbers()

    def test_iterations_default_to_config(self, recipient, monkeypatch) -> None:
        monkeypatch.setenv("HYBRIDSEAL_CRYPTO__PRIVATE_KEY_EXPORT_ITERATIONS", "4321")
        HybridSealConfig.reset_instance()

        exported = export_private_key(recipient, "pw")

        # PBKDF2 iteration count is DER INTEGER 4321
        assert b"\x02\x02\x10\xe1" in exported
        assert import_private_key(exported, "pw").key_size == 2048

    def test_engine_export_uses_engine_config(self, recipient) -> None:
        engine = HybridEncryptionEngine(config=CryptoConfig(private_key_export_iterations=4321))

        exported = engine.export_private_key(recipient, "pw")

        assert b"\x02\x02\x10\xe1" in exported
        assert import_private_key(exported, "pw").key_size == 2048

    def test_pem_import(self, recipient) -> None:
        exported = export_private_key(recipient, "pw", iterations=1000)
        pem = serialization.load_der_private_key(exported, password=b"pw").private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.BestAvailableEncryption(b"pw"),
        )

        assert import_private_key(pem, "pw").key_size == 2048

    def test_wrong_password(self, recipient) -> None:
        exported = export_private_key(recipient, "right", iterations=1000)

        with pytest.raises(KeyImportError):
            import_private_key(exported, "wrong")

    def test_requires_password(self, recipient) -> None:
        with pytest.raises(KeyImportError):
            export_private_key(recipient, "", iterations=1000)

    def test_requires_positive_iterations(self, recipient) -> None:
        with pytest.raises(KeyImportError):
            export_private_key(recipient, "pw", iterations=0)

    def test_public_only_handle_cannot_export(self, recipient) -> None:
        with pytest.raises(KeyImportError):
            export_private_key(recipient.public_only(), "pw", iterations=1000)

    def test_unencrypted_import_rejected(self, recipient) -> None:
        plain = recipient.private_key.private_bytes(
            serialization.Encoding.DER,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )

        with pytest.raises(KeyImportError):
            import_private_key(plain, "pw")

    def test_malformed_import(self) -> None:
        with pytest.raises(KeyImportError):
            import_private_key(b"not a key", "pw")
