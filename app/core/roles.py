# File: app/core/roles.py

"""
User groups and the access rules built on them.

Administrators see every project and own the platform settings (users,
provider keys). Everyone else only works on the projects they own.
"""

from enum import Enum


class Group(str, Enum):
    ADMINISTRATEUR = "ADMINISTRATEUR"
    AGENCE = "AGENCE"
    UTILISATEUR = "UTILISATEUR"


DEFAULT_GROUP = Group.UTILISATEUR


def parse_group(value) -> Group | None:
    if isinstance(value, Group):
        return value
    if isinstance(value, str):
        try:
            return Group(value)
        except ValueError:
            return None
    return None


def is_admin(user) -> bool:
    return user is not None and user.group == Group.ADMINISTRATEUR


def can_manage_project(user, project) -> bool:
    if user is None or project is None:
        return False
    return project.owner_id == user.id or is_admin(user)
