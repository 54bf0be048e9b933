# File: app/services/llm_keys.py

"""
Provider API keys stored encrypted in the database.

Keys are written by administrators and read back, decrypted, right before an
outbound call. Listing never decrypts.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.crypto import EncryptionError, decrypt, encrypt
from app.models.llm_key import LLMProvider, LlmApiKey
from app.models.user import User

logger = logging.getLogger(__name__)


class MissingApiKeyError(Exception):
    """No usable key is configured for the provider."""


def parse_provider(value) -> LLMProvider | None:
    if isinstance(value, LLMProvider):
        return value
    if isinstance(value, str):
        try:
            return LLMProvider(value.strip().upper())
        except ValueError:
            return None
    return None


def _find(db: Session, provider: LLMProvider) -> LlmApiKey | None:
    return db.execute(
        select(LlmApiKey).where(LlmApiKey.provider == provider)
    ).scalar_one_or_none()


def get_llm_key(db: Session, provider: LLMProvider) -> str | None:
    row = _find(db, provider)
    if row is None:
        return None
    try:
        return decrypt(row.key_ciphertext, row.key_iv, row.key_tag)
    except EncryptionError as exc:
        logger.error("Stored %s key cannot be decrypted: %s", provider.value, exc)
        return None


def get_openai_key(db: Session) -> str | None:
    return get_llm_key(db, LLMProvider.OPENAI)


def require_openai_key(db: Session) -> str:
    key = get_openai_key(db)
    if not key:
        raise MissingApiKeyError("OpenAI key is not configured")
    return key


def upsert_llm_key(
    db: Session,
    provider: LLMProvider,
    api_key: str,
    user: User | None = None,
) -> LlmApiKey:
    """Encrypt and store ``api_key``, replacing any key for the same provider."""
    secret = encrypt(api_key)
    row = _find(db, provider)
    if row is None:
        row = LlmApiKey(provider=provider, created_by_id=user.id if user is not None else None)
        db.add(row)
    row.key_ciphertext = secret.ciphertext
    row.key_iv = secret.iv
    row.key_tag = secret.tag
    row.last4 = api_key[-4:]
    db.commit()
    db.refresh(row)
    logger.info("Stored %s key ending in %s", provider.value, row.last4)
    return row


def delete_llm_key(db: Session, provider: LLMProvider) -> None:
    row = _find(db, provider)
    if row is None:
        return
    db.delete(row)
    db.commit()
    logger.info("Deleted %s key", provider.value)


def list_llm_keys(db: Session) -> list[LlmApiKey]:
    return list(db.execute(select(LlmApiKey).order_by(LlmApiKey.provider)).scalars())
