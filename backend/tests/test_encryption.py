"""
Tests for app/core/encryption.py - PII field encryption and key rotation.
"""
from unittest.mock import patch

import pytest


class TestFieldEncryptor:

    def test_encrypt_decrypt(self):
        from app.core.encryption import FieldEncryptor

        encryptor = FieldEncryptor(FieldEncryptor.generate_key())
        token = encryptor.encrypt("ABCDE1234F")

        assert token != "ABCDE1234F"
        assert FieldEncryptor.is_encrypted(token)
        assert encryptor.decrypt(token) == "ABCDE1234F"

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_values_pass_through(self, value):
        from app.core.encryption import FieldEncryptor

        encryptor = FieldEncryptor(FieldEncryptor.generate_key())
        assert encryptor.encrypt(value) == value
        assert encryptor.decrypt(value) == value

    def test_wrong_key_raises(self):
        from app.core.encryption import EncryptionError, FieldEncryptor

        token = FieldEncryptor(FieldEncryptor.generate_key()).encrypt("123412341234")

        with pytest.raises(EncryptionError):
            FieldEncryptor(FieldEncryptor.generate_key()).decrypt(token)

    def test_rotated_keys_decrypt_old_tokens(self):
        """The first key encrypts, every listed key decrypts."""
        from app.core.encryption import FieldEncryptor

        old_key = FieldEncryptor.generate_key()
        new_key = FieldEncryptor.generate_key()
        old_token = FieldEncryptor(old_key).encrypt("MH/BAN/0012345")

        rotated = FieldEncryptor(f"{new_key},{old_key}")

        assert rotated.decrypt(old_token) == "MH/BAN/0012345"
        assert FieldEncryptor(new_key).decrypt(rotated.encrypt("x")) == "x"

    def test_derives_key_from_secret_outside_production(self):
        from app.core.encryption import FieldEncryptor

        with patch("app.core.encryption.settings") as settings:
            settings.ENCRYPTION_KEY = None
            settings.ENVIRONMENT = "development"
            settings.SECRET_KEY = "test-secret-key-for-testing-only-min-32-chars"
            first = FieldEncryptor()
            second = FieldEncryptor()

        assert second.decrypt(first.encrypt("stable")) == "stable"

    def test_missing_key_in_production_raises(self):
        from app.core.encryption import EncryptionError, FieldEncryptor

        with patch("app.core.encryption.settings") as settings:
            settings.ENCRYPTION_KEY = None
            settings.ENVIRONMENT = "production"
            with pytest.raises(EncryptionError):
                FieldEncryptor()

    def test_bytes_roundtrip(self):
        from app.core.encryption import FieldEncryptor

        encryptor = FieldEncryptor(FieldEncryptor.generate_key())
        assert encryptor.decrypt_bytes(encryptor.encrypt_bytes(b"pg_dump output")) == b"pg_dump output"


class TestEncryptedString:
    """Column type used for PAN, Aadhaar, bank account and PF number."""

    @pytest.fixture
    def encryptor(self):
        from app.core.encryption import FieldEncryptor

        encryptor = FieldEncryptor(FieldEncryptor.generate_key())
        with patch("app.core.encryption.get_encryptor", return_value=encryptor):
            yield encryptor

    def test_bind_encrypts_and_result_decrypts(self, encryptor):
        from app.core.encryption import EncryptedString

        column = EncryptedString()
        stored = column.process_bind_param("ABCDE1234F", None)

        assert stored != "ABCDE1234F"
        assert column.process_result_value(stored, None) == "ABCDE1234F"

    def test_already_encrypted_value_not_double_encrypted(self, encryptor):
        from app.core.encryption import EncryptedString

        token = encryptor.encrypt("ABCDE1234F")
        assert EncryptedString().process_bind_param(token, None) == token

    def test_undecryptable_value_returned_as_stored(self, encryptor):
        from app.core.encryption import EncryptedString

        assert EncryptedString().process_result_value("legacy-plaintext", None) == "legacy-plaintext"

    def test_none_passes_through(self, encryptor):
        from app.core.encryption import EncryptedString

        column = EncryptedString()
        assert column.process_bind_param(None, None) is None
        assert column.process_result_value(None, None) is None
