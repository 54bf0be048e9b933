# File: app/schemas/project.py

from datetime import datetime
from typing import Optional, Union

from app.schemas.base import CamelModel
from app.schemas.domain import DomainRead


class ProjectCreate(CamelModel):
    name: Optional[str] = None


class ProjectRead(CamelModel):
    id: int
    name: str
    country_code: Optional[str] = None
    city: Optional[str] = None
    website_url: Optional[str] = None
    description: Optional[str] = None
    aliases: list[str] = []
    logo_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProjectDetail(ProjectRead):
    domains: list[DomainRead] = []


class BrandUpdate(CamelModel):
    """Partial update: only the fields present in the body are written."""

    name: Optional[str] = None
    country_code: Optional[str] = None
    city: Optional[str] = None
    website_url: Optional[str] = None
    description: Optional[str] = None
    aliases: Union[list[str], str, None] = None
    logo_url: Optional[str] = None
