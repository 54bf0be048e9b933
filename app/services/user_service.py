# File: app/services/user_service.py

"""
User administration: search, creation, password / group changes, deletion.
"""

import logging
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.roles import DEFAULT_GROUP, Group
from app.core.security import hash_password
from app.models.user import User
from app.services.auth_service import get_user_by_email, normalize_email

logger = logging.getLogger(__name__)

SORT_COLUMNS = {"createdAt": User.created_at, "email": User.email}
DEFAULT_PAGE_SIZE = 10
MIN_PAGE_SIZE = 5
MAX_PAGE_SIZE = 50


class DuplicateEmailError(Exception):
    pass


def clamp_page_size(value: Optional[int]) -> int:
    if value is None:
        return DEFAULT_PAGE_SIZE
    return min(MAX_PAGE_SIZE, max(MIN_PAGE_SIZE, value))


def list_users(
    db: Session,
    *,
    q: str = "",
    group: Optional[Group] = None,
    sort: str = "createdAt",
    order: str = "desc",
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> tuple[list[User], int]:
    query = select(User)
    if q:
        pattern = f"%{q}%"
        query = query.where(or_(User.email.ilike(pattern), User.name.ilike(pattern)))
    if group is not None:
        query = query.where(User.group == group)

    total = db.execute(select(func.count()).select_from(query.subquery())).scalar_one()

    column = SORT_COLUMNS.get(sort, User.created_at)
    ordering = column.asc() if order == "asc" else column.desc()
    items = db.execute(
        query.order_by(ordering, User.id).offset((page - 1) * page_size).limit(page_size)
    ).scalars()
    return list(items), total


def create_user(
    db: Session,
    *,
    email: str,
    password: str,
    name: str = "",
    group: Optional[Group] = None,
) -> User:
    if get_user_by_email(db, email) is not None:
        raise DuplicateEmailError(email)

    user = User(
        email=normalize_email(email),
        name=name or "",
        password_hash=hash_password(password),
        group=group or DEFAULT_GROUP,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateEmailError(email) from exc
    db.refresh(user)
    logger.info("Created user %s (%s)", user.id, user.group.value)
    return user


def update_user(
    db: Session,
    user: User,
    *,
    password: Optional[str] = None,
    group: Optional[Group] = None,
) -> User:
    if password is not None:
        user.password_hash = hash_password(password)
    if group is not None:
        user.group = group
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user: User) -> None:
    db.delete(user)
    db.commit()
    logger.info("Deleted user %s", user.id)
