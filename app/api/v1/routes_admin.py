# File: app/api/v1/routes_admin.py

"""
Administration API: users, provider keys and dashboard figures.

All routes require the ADMINISTRATEUR group.
"""

from typing import Optional

from email_validator import EmailNotValidError, validate_email
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_admin
from app.core.crypto import EncryptionError
from app.core.roles import parse_group
from app.core.security import MIN_PASSWORD_LENGTH
from app.models.user import User
from app.schemas.llm_key import LlmKeyCreate, LlmKeyRead
from app.schemas.user import AdminUserCreate, AdminUserUpdate, UserPage, UserRead
from app.services.llm_keys import delete_llm_key, list_llm_keys, parse_provider, upsert_llm_key
from app.services.stats_service import build_admin_stats
from app.services.user_service import (
    DuplicateEmailError,
    clamp_page_size,
    create_user,
    delete_user,
    list_users,
    update_user,
)

router = APIRouter()

PASSWORD_TOO_SHORT = f"Password too short (min {MIN_PASSWORD_LENGTH})"


def _get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


# ---------- Users ----------

@router.get("/users", response_model=UserPage, summary="Search users")
def read_users(
    q: str = "",
    group: Optional[str] = None,
    sort: str = "createdAt",
    order: str = "desc",
    page: int = 1,
    page_size: Optional[int] = Query(default=None, alias="pageSize"),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    page = max(1, page)
    page_size = clamp_page_size(page_size)
    sort = sort if sort in ("createdAt", "email") else "createdAt"
    order = order if order in ("asc", "desc") else "desc"

    items, total = list_users(
        db,
        q=q.strip(),
        group=parse_group(group),
        sort=sort,
        order=order,
        page=page,
        page_size=page_size,
    )
    return UserPage(
        items=[UserRead.model_validate(item) for item in items],
        total=total,
        page=page,
        page_size=page_size,
        sort=sort,
        order=order,
    )


@router.post(
    "/users",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
def add_user(
    payload: AdminUserCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if not payload.email or not payload.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=PASSWORD_TOO_SHORT)
    try:
        email = validate_email(payload.email, check_deliverability=False).normalized
    except EmailNotValidError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email") from exc

    try:
        return create_user(
            db,
            email=email,
            password=payload.password,
            name=payload.name or "",
            group=parse_group(payload.group),
        )
    except DuplicateEmailError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use") from exc


@router.patch("/users/{user_id}", response_model=UserRead, summary="Change password or group")
def edit_user(
    user_id: int,
    payload: AdminUserUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if isinstance(payload.password, str) and len(payload.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=PASSWORD_TOO_SHORT)
    group = parse_group(payload.group)
    if payload.password is None and group is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid update")

    user = _get_user(db, user_id)
    return update_user(db, user, password=payload.password, group=group)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete user")
def remove_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if user_id == admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account",
        )
    delete_user(db, _get_user(db, user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------- Provider keys ----------

@router.get("/llm-keys", response_model=list[LlmKeyRead], summary="Configured provider keys")
def read_llm_keys(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return list_llm_keys(db)


@router.post(
    "/llm-keys",
    response_model=LlmKeyRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create or replace a provider key",
)
def store_llm_key(
    payload: LlmKeyCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if not payload.provider or not payload.api_key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="provider and apiKey are required",
        )
    provider = parse_provider(payload.provider)
    if provider is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid provider")

    try:
        return upsert_llm_key(db, provider, payload.api_key, admin)
    except EncryptionError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc


@router.delete(
    "/llm-keys/{provider}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a provider key",
)
def remove_llm_key(
    provider: str,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    parsed = parse_provider(provider)
    if parsed is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid provider")
    delete_llm_key(db, parsed)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------- Dashboard ----------

@router.get("/stats", summary="Administration dashboard figures")
def read_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return build_admin_stats(db)
