import uuid
from sqlalchemy import Column, String, DateTime, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from .base import Base, now_utc

ROLE_USER = 'user'
ROLE_ADMIN = 'admin'
ALL_ROLES = (ROLE_USER, ROLE_ADMIN)


class User(Base):
    __tablename__ = 'users'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=True)
    # 'user'|'admin'; only changed out of band (ADMIN_EMAILS bootstrap, seed script)
    role = Column(String, nullable=False, default=ROLE_USER)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    __table_args__ = (
        CheckConstraint("role IN ('user', 'admin')", name='ck_users_role'),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
