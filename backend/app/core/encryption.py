"""
Field-level encryption for employee PII (PAN, Aadhaar, bank account, PF number)
and for password-reset tokens and database backups.

Fernet symmetric encryption; ENCRYPTION_KEY may hold several comma-separated
keys, the first encrypts and all of them decrypt (key rotation).
"""

import base64
import logging
from typing import Optional, Union

from cryptography.fernet import Fernet, InvalidToken, MultiFernet
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from sqlalchemy import TypeDecorator, String

from app.core.config import settings

logger = logging.getLogger("vodichron.encryption")


class EncryptionError(Exception):
    """Raised when encryption/decryption fails."""


class FieldEncryptor:
    """
    Wraps a Fernet/MultiFernet built from settings.

        encryptor = get_encryptor()
        token = encryptor.encrypt("ABCDE1234F")
        encryptor.decrypt(token)
    """

    def __init__(self, encryption_key: Optional[str] = None):
        key_material = encryption_key or settings.ENCRYPTION_KEY

        if not key_material:
            if settings.ENVIRONMENT.lower() == "production":
                raise EncryptionError("ENCRYPTION_KEY must be set in production.")
            logger.warning(
                "ENCRYPTION_KEY not set. Using key derived from SECRET_KEY (development only)."
            )
            key_material = self._derive_key_from_secret(settings.SECRET_KEY)

        keys = [k.strip() for k in key_material.split(",") if k.strip()]
        self._fernet: Union[Fernet, MultiFernet]
        if len(keys) == 1:
            self._fernet = Fernet(keys[0].encode())
        else:
            self._fernet = MultiFernet([Fernet(k.encode()) for k in keys])

        logger.info(f"Field encryption initialized with {len(keys)} key(s)")

    @staticmethod
    def _derive_key_from_secret(secret: str) -> str:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=b"vodichron_dev_salt_v1",
            iterations=100000,
        )
        return base64.urlsafe_b64encode(kdf.derive(secret.encode())).decode()

    def encrypt(self, plaintext: Optional[str]) -> Optional[str]:
        if not plaintext:
            return plaintext
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, ciphertext: Optional[str]) -> Optional[str]:
        if not ciphertext:
            return ciphertext
        try:
            return self._fernet.decrypt(ciphertext.encode()).decode()
        except InvalidToken:
            raise EncryptionError("Failed to decrypt data: invalid key or corrupted data")

    def encrypt_bytes(self, data: bytes) -> bytes:
        return self._fernet.encrypt(data)

    def decrypt_bytes(self, data: bytes) -> bytes:
        try:
            return self._fernet.decrypt(data)
        except InvalidToken:
            raise EncryptionError("Failed to decrypt data: invalid key or corrupted data")

    @staticmethod
    def is_encrypted(value: Optional[str]) -> bool:
        """Fernet tokens always start with 'gAAAAA'."""
        return bool(value) and len(value) >= 10 and value.startswith("gAAAAA")

    @staticmethod
    def generate_key() -> str:
        return Fernet.generate_key().decode()


_encryptor: Optional[FieldEncryptor] = None


def get_encryptor() -> FieldEncryptor:
    """Get the global field encryptor instance."""
    global _encryptor
    if _encryptor is None:
        _encryptor = FieldEncryptor()
    return _encryptor


class EncryptedString(TypeDecorator):
    """
    String column encrypted at rest.

        pan_number = Column(EncryptedString(500))
    """

    impl = String
    cache_ok = True

    def __init__(self, length: int = 500, *args, **kwargs):
        super().__init__(length, *args, **kwargs)

    def process_bind_param(self, value, dialect):
        if value is None or FieldEncryptor.is_encrypted(value):
            return value
        return get_encryptor().encrypt(str(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        try:
            return get_encryptor().decrypt(value)
        except EncryptionError:
            logger.warning("Failed to decrypt field value, returning stored data")
            return value
