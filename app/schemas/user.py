# File: app/schemas/user.py

from datetime import datetime
from typing import Optional

from app.core.roles import Group
from app.schemas.base import CamelModel


class UserRead(CamelModel):
    id: int
    email: str
    name: str
    group: Group
    created_at: datetime


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AdminUserCreate(CamelModel):
    # Validated in the route so a malformed address is a 400
    email: Optional[str] = None
    name: Optional[str] = None
    password: Optional[str] = None
    # Unknown groups fall back to the default group
    group: Optional[str] = None


class AdminUserUpdate(CamelModel):
    password: Optional[str] = None
    group: Optional[str] = None


class UserPage(CamelModel):
    items: list[UserRead]
    total: int
    page: int
    page_size: int
    sort: str
    order: str
