# File: app/api/v1/routes_project.py

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, get_managed_project
from app.models.domain import Domain
from app.models.project import Project
from app.models.user import User
from app.schemas.domain import DomainRead
from app.schemas.project import BrandUpdate, ProjectCreate, ProjectDetail, ProjectRead
from app.services.text_utils import as_list, dump_json_list

router = APIRouter()

MIN_NAME_LENGTH = 2

# Profile fields where an empty string means "clear"
_NULLABLE_BRAND_FIELDS = ("country_code", "city", "website_url", "description", "logo_url")


@router.get("", response_model=list[ProjectRead], summary="List the caller's projects")
def list_projects(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return db.execute(
        select(Project)
        .where(Project.owner_id == user.id)
        .order_by(Project.created_at.desc(), Project.id.desc())
    ).scalars().all()


@router.post(
    "",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create project",
)
def create_project(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    name = (payload.name or "").strip()
    if len(name) < MIN_NAME_LENGTH:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid name")

    project = Project(name=name, owner_id=user.id)
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


@router.get("/{project_id}", response_model=ProjectDetail, summary="Project with its domains")
def get_project(
    project: Project = Depends(get_managed_project),
    db: Session = Depends(get_db),
):
    domains = db.execute(
        select(Domain)
        .where(Domain.project_id == project.id)
        .order_by(Domain.created_at.desc(), Domain.id.desc())
    ).scalars().all()
    detail = ProjectDetail.model_validate(project)
    detail.domains = [DomainRead.model_validate(domain) for domain in domains]
    return detail


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete project")
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    project = db.execute(
        select(Project).where(Project.id == project_id, Project.owner_id == user.id)
    ).scalar_one_or_none()
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")

    db.delete(project)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{project_id}/brand", response_model=ProjectRead, summary="Update brand profile")
def update_brand(
    payload: BrandUpdate,
    project: Project = Depends(get_managed_project),
    db: Session = Depends(get_db),
):
    provided = payload.model_fields_set

    if "name" in provided and isinstance(payload.name, str):
        project.name = payload.name.strip()
    for field in _NULLABLE_BRAND_FIELDS:
        if field in provided:
            setattr(project, field, getattr(payload, field) or None)
    if "aliases" in provided:
        project.aliases_json = dump_json_list(as_list(payload.aliases))

    db.commit()
    db.refresh(project)
    return project
