"""Tests for the FieldEncryptor (Fernet-based encryption of self-reported data)."""

from __future__ import annotations

import pytest
from cryptography.fernet import Fernet

from mindwatch.core.storage.encryption import EncryptionError, FieldEncryptor


@pytest.fixture
def key() -> str:
    return Fernet.generate_key().decode()


@pytest.fixture
def encryptor(key: str) -> FieldEncryptor:
    return FieldEncryptor(key)


class TestRoundTrip:
    def test_entry_payload(self, encryptor: FieldEncryptor):
        data = {"mood_value": 3, "note": "argument with my sister"}
        token = encryptor.encrypt(data)
        assert isinstance(token, str)
        assert "sister" not in token
        assert encryptor.decrypt(token) == data

    def test_label_list(self, encryptor: FieldEncryptor):
        labels = ["Family Tension", "Poor Sleep"]
        assert encryptor.decrypt(encryptor.encrypt(labels)) == labels

    def test_empty_list_is_not_none(self, encryptor: FieldEncryptor):
        assert encryptor.decrypt(encryptor.encrypt([])) == []

    def test_null_round_trip(self, encryptor: FieldEncryptor):
        assert encryptor.encrypt(None) == ""
        assert encryptor.decrypt("") is None
        assert encryptor.decrypt(None) is None


class TestKeyValidation:
    def test_empty_key_raises(self):
        with pytest.raises(EncryptionError, match="must not be empty"):
            FieldEncryptor("")

    def test_whitespace_key_raises(self):
        with pytest.raises(EncryptionError, match="must not be empty"):
            FieldEncryptor("   ")

    def test_malformed_key_raises(self):
        with pytest.raises(EncryptionError, match="Invalid encryption key"):
            FieldEncryptor("not-a-fernet-key")

    def test_generated_key_is_usable(self):
        encryptor = FieldEncryptor(FieldEncryptor.generate_key())
        assert encryptor.decrypt(encryptor.encrypt({"a": 1})) == {"a": 1}

    def test_ephemeral_encryptor(self, caplog):
        encryptor = FieldEncryptor.ephemeral()
        assert encryptor.decrypt(encryptor.encrypt("x")) == "x"
        assert "ephemeral" in caplog.text


class TestFailures:
    def test_wrong_key_raises(self, encryptor: FieldEncryptor):
        token = encryptor.encrypt({"note": "private"})
        other = FieldEncryptor(Fernet.generate_key().decode())
        with pytest.raises(EncryptionError, match="Decryption failed"):
            other.decrypt(token)

    def test_tampered_token_raises(self, encryptor: FieldEncryptor):
        with pytest.raises(EncryptionError):
            encryptor.decrypt("gAAAAABgarbage")

    def test_unserializable_value_raises(self, encryptor: FieldEncryptor):
        with pytest.raises(EncryptionError, match="not JSON-serializable"):
            encryptor.encrypt({"when": object()})
