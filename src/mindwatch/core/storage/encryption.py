"""Fernet field encryption for self-reported data at rest.

Raw entries (including free-text mood notes) and derived labels are
encrypted before they reach SQLite. Sub-scores stay in the clear so history
windows can be queried without decrypting every row.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class EncryptionError(Exception):
    """Raised when a key is unusable or a value cannot be encrypted/decrypted."""


class FieldEncryptor:
    """Round-trips JSON-serializable values through a Fernet token.

    Usage::

        encryptor = FieldEncryptor(key)
        token = encryptor.encrypt({"note": "rough day at work"})
        encryptor.decrypt(token)  # {"note": "rough day at work"}
    """

    def __init__(self, key: str) -> None:
        if not key or not key.strip():
            raise EncryptionError("Encryption key must not be empty")
        try:
            self._fernet = Fernet(key.strip().encode("utf-8"))
        except (TypeError, ValueError) as exc:
            raise EncryptionError(f"Invalid encryption key: {exc}") from exc

    @classmethod
    def ephemeral(cls) -> FieldEncryptor:
        """Encryptor with a throwaway key; tokens die with the process."""
        logger.warning("Using an ephemeral encryption key; stored data cannot be reopened later")
        return cls(cls.generate_key())

    def encrypt(self, data: Any) -> str:
        """Encrypt a JSON-serializable value. ``None`` encrypts to ``""``."""
        if data is None:
            return ""
        try:
            plaintext = json.dumps(data, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EncryptionError(f"Value is not JSON-serializable: {exc}") from exc
        return self._fernet.encrypt(plaintext).decode("utf-8")

    def decrypt(self, token: str | None) -> Any:
        """Decrypt a token produced by :meth:`encrypt`. Empty token -> ``None``.

        Raises:
            EncryptionError: If the token is corrupt or was made with another key.
        """
        if not token:
            return None
        try:
            plaintext = self._fernet.decrypt(token.encode("utf-8"))
        except InvalidToken as exc:
            raise EncryptionError("Decryption failed: invalid token or wrong key") from exc
        return json.loads(plaintext)

    @staticmethod
    def generate_key() -> str:
        """Generate a new URL-safe base64 Fernet key."""
        return Fernet.generate_key().decode("utf-8")
