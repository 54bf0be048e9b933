# File: app/api/deps.py

import logging
from collections.abc import Generator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.roles import can_manage_project, is_admin
from app.core.security import decode_access_token
from app.db.session import SessionLocal
from app.models.project import Project
from app.models.user import User
from app.services.llm_client import LlmClient, LlmClientFactory, get_llm_client
from app.services.llm_keys import MissingApiKeyError, require_openai_key

logger = logging.getLogger(__name__)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a SQLAlchemy session.

    Usage in route functions:
        db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error("Database session error: %s", e)
        db.rollback()
        raise
    finally:
        db.close()


def _session_token(request: Request) -> str | None:
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value:
        return value.strip()
    return None


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Resolve the session cookie (or Bearer token) to a user, else 401."""
    claims = decode_access_token(_session_token(request) or "")
    subject = claims.get("sub") if claims else None
    user = None
    if subject is not None and str(subject).isdigit():
        user = db.get(User, int(subject))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not is_admin(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return user


def get_managed_project(
    project_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> Project:
    """The project from the path, when the caller owns it or is an administrator."""
    project = db.get(Project, project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    if not can_manage_project(user, project):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return project


def get_openai_client(
    db: Session = Depends(get_db),
    factory: LlmClientFactory = Depends(get_llm_client),
) -> LlmClient:
    try:
        api_key = require_openai_key(db)
    except MissingApiKeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc
    return factory(api_key)
