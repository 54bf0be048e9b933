"""
Database initialization helpers.

Every model module is imported here so its table is registered on
Base.metadata before create_all runs.
"""

import logging

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.roles import Group
from app.db.session import engine
from app.models.base import Base
from app.models import analysis, domain, llm_key, project, user  # noqa: F401
from app.services.auth_service import get_user_by_email
from app.services.user_service import create_user, update_user

logger = logging.getLogger(__name__)


def init_db() -> None:
    """
    Create all tables based on SQLAlchemy models.
    """
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready")


def seed_initial_data(db: Session) -> None:
    """
    Make sure the administrator named by SEED_ADMIN_EMAIL exists.

    An existing account is promoted to ADMINISTRATEUR; its password is left
    untouched.
    """
    email = settings.seed_admin_email
    password = settings.seed_admin_password
    if not email or not password:
        return

    existing = get_user_by_email(db, email)
    if existing is None:
        create_user(db, email=email, password=password, name="Admin", group=Group.ADMINISTRATEUR)
        logger.info("Seeded administrator account")
    elif existing.group != Group.ADMINISTRATEUR:
        update_user(db, existing, group=Group.ADMINISTRATEUR)
        logger.info("Promoted seed account to administrator")
