import uuid
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict


class ToolBase(BaseModel):
    slug: str
    name: str
    description: str = ""


class Tool(ToolBase):
    id: uuid.UUID
    is_active: bool
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class ToolUnlockLink(BaseModel):
    tool: Tool
    unlock_link: str


class UnlockLinksResponse(BaseModel):
    links: list[ToolUnlockLink]
    all_links_text: str
