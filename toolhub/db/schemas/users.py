import uuid
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class UserBase(BaseModel):
    email: str
    name: str | None = None


class User(UserBase):
    id: uuid.UUID
    role: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class UserWithToolCount(User):
    tool_count: int = 0
