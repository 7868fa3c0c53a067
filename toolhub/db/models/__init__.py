"""
Domain-split SQLAlchemy models.

Exposes `Base`, `now_utc`, and all ORM classes plus the access constants
shared by repositories and services.
"""

from .base import Base, now_utc  # re-export

from .users import User, ROLE_USER, ROLE_ADMIN, ALL_ROLES
from .tools import Tool
from .access import (
    UserToolAccess,
    GrantStatus,
    GRANT_SOURCES,
    UNLOCKED_BY_URL,
    UNLOCKED_BY_ADMIN,
    UNLOCKED_BY_ADMIN_PRIVILEGE,
)
from .audit import AuditLog

__all__ = [
    # base
    "Base",
    "now_utc",
    # users
    "User",
    "ROLE_USER",
    "ROLE_ADMIN",
    "ALL_ROLES",
    # catalog/access
    "Tool",
    "UserToolAccess",
    "GrantStatus",
    "GRANT_SOURCES",
    "UNLOCKED_BY_URL",
    "UNLOCKED_BY_ADMIN",
    "UNLOCKED_BY_ADMIN_PRIVILEGE",
    # audit
    "AuditLog",
]
