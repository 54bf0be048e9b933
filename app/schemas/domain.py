# File: app/schemas/domain.py

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import field_validator

from app.schemas.base import CamelModel
from app.services.text_utils import extract_competitor_names


class DomainCreate(CamelModel):
    name: Optional[str] = None
    notes: Optional[str] = None
    competitors: Union[list[str], str, None] = None


class DomainUpdate(DomainCreate):
    pass


class DomainRead(CamelModel):
    id: int
    project_id: int
    name: str
    notes: Optional[str] = None
    competitors: list[str] = []
    created_at: datetime
    updated_at: datetime

    @field_validator("competitors", mode="before")
    @classmethod
    def decode_competitors(cls, value: Any) -> Any:
        # The model stores the list as JSON text
        if isinstance(value, str) or value is None:
            return extract_competitor_names(value)
        return value


class DomainCreated(CamelModel):
    id: int


class SuggestRequest(CamelModel):
    type: Optional[str] = None
    domain_name: Optional[str] = None
