"""
Domain-split Pydantic schemas.
"""

from .users import UserBase, User, UserWithToolCount
from .tools import ToolBase, Tool, ToolUnlockLink, UnlockLinksResponse
from .access import (
    AccessGrant,
    ToolAccess,
    ToolAccessStatus,
    ToolAccessUpdate,
    ToolAccessUpdateResult,
    UnlockResult,
    ToolPageResult,
)
from .audits import AuditLogBase, AuditLogCreate, AuditLog

__all__ = [
    # Users
    "UserBase",
    "User",
    "UserWithToolCount",
    # Tools
    "ToolBase",
    "Tool",
    "ToolUnlockLink",
    "UnlockLinksResponse",
    # Access
    "AccessGrant",
    "ToolAccess",
    "ToolAccessStatus",
    "ToolAccessUpdate",
    "ToolAccessUpdateResult",
    "UnlockResult",
    "ToolPageResult",
    # Audits
    "AuditLogBase",
    "AuditLogCreate",
    "AuditLog",
]
