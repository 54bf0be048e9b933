# File: tests/test_crypto.py

import base64

import pytest

from app.core.config import settings
from app.core.crypto import EncryptionError, decrypt, encrypt


def test_encrypt_decrypt_roundtrip():
    secret = encrypt("sk-live-0123456789")
    assert secret.ciphertext != "sk-live-0123456789"
    assert len(base64.b64decode(secret.iv)) == 12
    assert len(base64.b64decode(secret.tag)) == 16
    assert decrypt(secret.ciphertext, secret.iv, secret.tag) == "sk-live-0123456789"


def test_each_encryption_uses_a_fresh_iv():
    first = encrypt("same value")
    second = encrypt("same value")
    assert first.iv != second.iv
    assert first.ciphertext != second.ciphertext


def test_tampered_tag_fails():
    secret = encrypt("sk-live-0123456789")
    bad_tag = base64.b64encode(bytes(16)).decode("ascii")
    with pytest.raises(EncryptionError):
        decrypt(secret.ciphertext, secret.iv, bad_tag)


def test_missing_key(monkeypatch):
    monkeypatch.setattr(settings, "encryption_key_base64", None)
    with pytest.raises(EncryptionError, match="required"):
        encrypt("value")


def test_key_must_be_32_bytes(monkeypatch):
    monkeypatch.setattr(settings, "encryption_key_base64", base64.b64encode(b"short").decode())
    with pytest.raises(EncryptionError, match="32 bytes"):
        encrypt("value")


def test_key_must_be_base64(monkeypatch):
    monkeypatch.setattr(settings, "encryption_key_base64", "not base64 !!")
    with pytest.raises(EncryptionError, match="base64"):
        encrypt("value")
