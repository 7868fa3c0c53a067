import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

from toolhub.db.models.access import GrantStatus

from .tools import Tool


class AccessGrant(BaseModel):
    """Persisted grant row as shown on admin screens."""
    id: uuid.UUID
    user_id: uuid.UUID
    tool_id: uuid.UUID
    last_unlocked_at: datetime
    last_revoked_at: Optional[datetime] = None
    unlocked_by: str
    status: GrantStatus
    model_config = ConfigDict(from_attributes=True)


class ToolAccess(BaseModel):
    """A tool the user can open, either row-backed or derived from the admin role."""
    id: Optional[uuid.UUID] = None
    user_id: uuid.UUID
    tool_id: uuid.UUID
    last_unlocked_at: datetime
    last_revoked_at: Optional[datetime] = None
    unlocked_by: str
    tool: Tool
    model_config = ConfigDict(from_attributes=True)


class ToolAccessStatus(BaseModel):
    tool: Tool
    has_access: bool
    badge: str
    grant: Optional[AccessGrant] = None


class ToolAccessUpdate(BaseModel):
    has_access: bool


class ToolAccessUpdateResult(BaseModel):
    success: bool
    user_id: uuid.UUID
    tool_id: uuid.UUID
    has_access: bool


class UnlockResult(BaseModel):
    state: str
    message: str
    tool: Optional[Tool] = None
    tool_url: Optional[str] = None


class ToolPageResult(BaseModel):
    state: str
    message: str
    tool: Optional[Tool] = None
