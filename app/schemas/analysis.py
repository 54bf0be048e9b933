# File: app/schemas/analysis.py

from typing import Optional

from app.schemas.base import CamelModel


class ReputationRequest(CamelModel):
    project_name: Optional[str] = None
    website_url: Optional[str] = None
    competitor1: Optional[str] = None
    competitor2: Optional[str] = None
    city: Optional[str] = None


class ReputationResponse(CamelModel):
    analysis: Optional[str] = None
