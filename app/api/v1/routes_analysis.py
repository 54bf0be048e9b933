# File: app/api/v1/routes_analysis.py

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, get_managed_project, get_openai_client
from app.models.project import Project
from app.models.user import User
from app.services.analysis_service import get_latest_analysis, run_project_analysis
from app.services.llm_client import LlmClient, LlmError, LlmResponseError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{project_id}/analysis", summary="Latest analysis and run history")
def read_analysis(
    project: Project = Depends(get_managed_project),
    db: Session = Depends(get_db),
):
    latest = get_latest_analysis(db, project)
    if latest is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No analysis yet")
    return latest


@router.post("/{project_id}/analysis", summary="Generate a new reputation analysis")
def create_analysis(
    project: Project = Depends(get_managed_project),
    client: LlmClient = Depends(get_openai_client),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        return run_project_analysis(db, project, client, user)
    except LlmResponseError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except LlmError as exc:
        logger.error("Analysis failed for project %s: %s", project.id, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Unable to generate the analysis: {exc}",
        ) from exc
