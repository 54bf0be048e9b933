# File: app/core/crypto.py

"""
Encryption of provider API keys at rest.

AES-256-GCM from the ``cryptography`` package. Every value gets a fresh
96-bit IV; ciphertext, IV and authentication tag are stored base64-encoded
in separate columns. The key comes from ``ENCRYPTION_KEY_BASE64`` and must
decode to exactly 32 bytes.
"""

import base64
import binascii
import logging
import os
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.core.config import settings

logger = logging.getLogger(__name__)

IV_BYTES = 12
TAG_BYTES = 16
KEY_BYTES = 32


class EncryptionError(Exception):
    """Raised when the key is misconfigured or a value fails to decrypt."""


@dataclass(frozen=True)
class EncryptedSecret:
    ciphertext: str
    iv: str
    tag: str


def _load_key() -> bytes:
    raw = settings.encryption_key_base64
    if not raw:
        raise EncryptionError("ENCRYPTION_KEY_BASE64 is required")
    try:
        key = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise EncryptionError("ENCRYPTION_KEY_BASE64 is not valid base64") from exc
    if len(key) != KEY_BYTES:
        raise EncryptionError("ENCRYPTION_KEY_BASE64 must be 32 bytes base64")
    return key


def encrypt(text: str) -> EncryptedSecret:
    aesgcm = AESGCM(_load_key())
    iv = os.urandom(IV_BYTES)
    sealed = aesgcm.encrypt(iv, text.encode("utf-8"), None)
    # AESGCM appends the tag to the ciphertext
    ciphertext, tag = sealed[:-TAG_BYTES], sealed[-TAG_BYTES:]
    return EncryptedSecret(
        ciphertext=base64.b64encode(ciphertext).decode("ascii"),
        iv=base64.b64encode(iv).decode("ascii"),
        tag=base64.b64encode(tag).decode("ascii"),
    )


def decrypt(ciphertext_b64: str, iv_b64: str, tag_b64: str) -> str:
    aesgcm = AESGCM(_load_key())
    try:
        ciphertext = base64.b64decode(ciphertext_b64)
        iv = base64.b64decode(iv_b64)
        tag = base64.b64decode(tag_b64)
    except (binascii.Error, ValueError) as exc:
        raise EncryptionError("Stored secret is not valid base64") from exc

    try:
        plain = aesgcm.decrypt(iv, ciphertext + tag, None)
    except (InvalidTag, ValueError) as exc:
        logger.warning("Failed to decrypt stored secret: %s", type(exc).__name__)
        raise EncryptionError("Failed to decrypt stored secret") from exc
    return plain.decode("utf-8")
