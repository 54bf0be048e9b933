# File: app/api/v1/routes_reputation.py

"""
Standalone reputation report for any company, returned as free text.

Nothing is stored; the report is not validated against the report schema.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_current_user, get_openai_client
from app.core.config import settings
from app.models.user import User
from app.schemas.analysis import ReputationRequest, ReputationResponse
from app.services.llm_client import LlmClient, LlmError
from app.services.prompts import build_freeform_prompt

logger = logging.getLogger(__name__)

router = APIRouter()

FREEFORM_MAX_TOKENS = 4096


@router.post("/analyse", response_model=ReputationResponse, summary="Free-text reputation report")
def analyse(
    payload: ReputationRequest,
    user: User = Depends(get_current_user),
    client: LlmClient = Depends(get_openai_client),
):
    if not payload.project_name or not payload.website_url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Project name and website URL are required",
        )

    prompt = build_freeform_prompt(
        project_name=payload.project_name,
        website_url=payload.website_url,
        competitor1=payload.competitor1,
        competitor2=payload.competitor2,
        city=payload.city,
    )
    try:
        text = client.chat(
            model=settings.analysis_model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.7,
            timeout=settings.analysis_timeout_seconds,
            max_tokens=FREEFORM_MAX_TOKENS,
        )
    except LlmError as exc:
        logger.error("Free-text analysis failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get analysis from OpenAI",
        ) from exc
    return ReputationResponse(analysis=text)
