# File: app/models/llm_key.py

"""
LlmApiKey model: at most one encrypted credential per provider.

Only ``last4`` is ever returned to clients; the key itself is decrypted
server-side right before an outbound call.
"""

from enum import Enum as PyEnum

from sqlalchemy import Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin


class LLMProvider(str, PyEnum):
    OPENAI = "OPENAI"
    GEMINI = "GEMINI"


class LlmApiKey(TimestampMixin, Base):
    __tablename__ = "llm_api_keys"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    provider: Mapped[LLMProvider] = mapped_column(
        Enum(LLMProvider, name="llm_provider"),
        unique=True,
        nullable=False,
    )
    key_ciphertext: Mapped[str] = mapped_column(Text, nullable=False)
    key_iv: Mapped[str] = mapped_column(String(64), nullable=False)
    key_tag: Mapped[str] = mapped_column(String(64), nullable=False)
    last4: Mapped[str] = mapped_column(String(8), nullable=False)
    created_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
