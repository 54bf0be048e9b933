# File: app/schemas/llm_key.py

from datetime import datetime
from typing import Optional

from app.models.llm_key import LLMProvider
from app.schemas.base import CamelModel


class LlmKeyRead(CamelModel):
    provider: LLMProvider
    last4: str
    updated_at: datetime


class LlmKeyCreate(CamelModel):
    provider: Optional[str] = None
    api_key: Optional[str] = None
