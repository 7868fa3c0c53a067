import uuid
from enum import Enum
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Index, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import Base, now_utc

# Provenance tags for `unlocked_by`. ADMIN_PRIVILEGE is never persisted.
UNLOCKED_BY_URL = 'url_unlock'
UNLOCKED_BY_ADMIN = 'admin_grant'
UNLOCKED_BY_ADMIN_PRIVILEGE = 'admin_privilege'
GRANT_SOURCES = (UNLOCKED_BY_URL, UNLOCKED_BY_ADMIN)


class GrantStatus(str, Enum):
    ACTIVE = "active"
    REVOKED = "revoked"


class UserToolAccess(Base):
    __tablename__ = 'user_tool_access'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    tool_id = Column(UUID(as_uuid=True), ForeignKey('tools.id', ondelete='CASCADE'), nullable=False)
    last_unlocked_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    # Non-null means the grant is currently revoked (soft delete).
    last_revoked_at = Column(DateTime(timezone=True), nullable=True)
    unlocked_by = Column(String, nullable=False, default=UNLOCKED_BY_URL)

    tool = relationship("Tool", lazy="joined")

    __table_args__ = (
        UniqueConstraint('user_id', 'tool_id', name='uq_user_tool_access_user_tool'),
        Index('ix_user_tool_access_user_id', 'user_id'),
        CheckConstraint("unlocked_by IN ('url_unlock', 'admin_grant')", name='ck_user_tool_access_unlocked_by'),
    )

    @property
    def status(self) -> GrantStatus:
        return GrantStatus.REVOKED if self.last_revoked_at is not None else GrantStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status is GrantStatus.ACTIVE
