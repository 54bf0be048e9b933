# File: app/services/auth_service.py

"""
Authentication service.

  - User lookup by email
  - Password verification (Argon2)
  - Session token generation
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.security import create_access_token, verify_password
from app.models.user import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.execute(
        select(User).where(User.email == normalize_email(email))
    ).scalar_one_or_none()


def authenticate_user(
    db: Session,
    *,
    email: str,
    password: str,
) -> Optional[User]:
    """Return the user when the credentials match, None otherwise."""
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login attempt")
        return None
    return user


def issue_session_token(user: User) -> str:
    return create_access_token({"sub": str(user.id), "group": user.group.value})
