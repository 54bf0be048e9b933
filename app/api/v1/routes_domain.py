# File: app/api/v1/routes_domain.py

"""
Domains of a project and the suggestion endpoint of the brand form.

Every route requires the caller to own the project or be an administrator.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_managed_project, get_openai_client
from app.models.domain import Domain
from app.models.project import Project
from app.schemas.domain import DomainCreate, DomainCreated, DomainRead, DomainUpdate, SuggestRequest
from app.services.llm_client import LlmClient, LlmError
from app.services.suggestion_service import NoSuggestionError, suggest_competitors, suggest_domains
from app.services.text_utils import dump_json_list, extract_competitor_names

logger = logging.getLogger(__name__)

router = APIRouter()


def _competitor_names(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(item).strip() for item in value if item and str(item).strip()]
    return extract_competitor_names(value)


def _get_domain(db: Session, project: Project, domain_id: int) -> Domain:
    domain = db.get(Domain, domain_id)
    if domain is None or domain.project_id != project.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return domain


@router.get("/{project_id}/domains", response_model=list[DomainRead], summary="List domains")
def list_domains(
    project: Project = Depends(get_managed_project),
    db: Session = Depends(get_db),
):
    return db.execute(
        select(Domain)
        .where(Domain.project_id == project.id)
        .order_by(Domain.created_at.desc(), Domain.id.desc())
    ).scalars().all()


@router.post(
    "/{project_id}/domains",
    response_model=DomainCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create domain",
)
def create_domain(
    payload: DomainCreate,
    project: Project = Depends(get_managed_project),
    db: Session = Depends(get_db),
):
    name = (payload.name or "").strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Domain name is required",
        )

    domain = Domain(
        project_id=project.id,
        name=name,
        notes=(payload.notes or "").strip() or None,
        competitors=dump_json_list(_competitor_names(payload.competitors)),
    )
    db.add(domain)
    db.commit()
    db.refresh(domain)
    return domain


@router.post("/{project_id}/domains/suggest", summary="Suggest domains or competitors")
def suggest(
    payload: SuggestRequest,
    project: Project = Depends(get_managed_project),
    client: LlmClient = Depends(get_openai_client),
):
    if payload.type == "domains":
        try:
            items = suggest_domains(project, client)
        except LlmError as exc:
            logger.error("Domain suggestion failed for project %s: %s", project.id, exc)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"OpenAI error: {exc}",
            ) from exc
        return {"items": items}

    if payload.type == "competitors":
        domain_name = (payload.domain_name or "").strip()
        if not domain_name:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="domainName is required",
            )
        try:
            return suggest_competitors(project, domain_name, client)
        except NoSuggestionError as exc:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=str(exc),
            ) from exc

    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid type")


@router.get("/{project_id}/domains/{domain_id}", response_model=DomainRead, summary="Get domain")
def get_domain(
    domain_id: int,
    project: Project = Depends(get_managed_project),
    db: Session = Depends(get_db),
):
    return _get_domain(db, project, domain_id)


@router.patch("/{project_id}/domains/{domain_id}", response_model=DomainRead, summary="Update domain")
def update_domain(
    domain_id: int,
    payload: DomainUpdate,
    project: Project = Depends(get_managed_project),
    db: Session = Depends(get_db),
):
    domain = _get_domain(db, project, domain_id)
    provided = payload.model_fields_set

    if isinstance(payload.name, str):
        domain.name = payload.name.strip()
    if "notes" in provided:
        domain.notes = (payload.notes or "").strip() or None
    if payload.competitors is not None:
        domain.competitors = dump_json_list(_competitor_names(payload.competitors))

    db.commit()
    db.refresh(domain)
    return domain


@router.delete(
    "/{project_id}/domains/{domain_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete domain",
)
def delete_domain(
    domain_id: int,
    project: Project = Depends(get_managed_project),
    db: Session = Depends(get_db),
):
    domain = _get_domain(db, project, domain_id)
    db.delete(domain)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
