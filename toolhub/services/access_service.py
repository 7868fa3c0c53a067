"""
Access control service: the single source of truth for "can user U use tool T".

It is also the only writer of ``user_tool_access`` rows. Store failures never
cross this boundary: checks fail closed (``False``), mutations report
``False`` and listings come back empty, each after logging the fault.
"""
from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from toolhub.db import models, schemas
from toolhub.db.repositories import access as access_repo
from toolhub.db.repositories import tools as tools_repo
from toolhub.db.repositories import users as users_repo
from toolhub.services.access_policy import AccessPolicy, policy_for_role

logger = logging.getLogger(__name__)

BADGE_ADMIN = "admin"
BADGE_ACTIVE = "active"
BADGE_REVOKED = "revoked"
BADGE_LOCKED = "locked"


class AccessControlService:
    """Grant, revoke, check and enumerate per-user tool access."""

    def __init__(self, db: Session):
        self.db = db

    def resolve_policy(self, user_id: uuid.UUID) -> AccessPolicy:
        return policy_for_role(users_repo.find_user_role(self.db, user_id))

    def has_access(self, user_id: uuid.UUID, tool_id: uuid.UUID) -> bool:
        try:
            tool = tools_repo.find_tool_by_id(self.db, tool_id)
            if tool is None or not tool.is_active:
                return False
            return self.resolve_policy(user_id).has_access(self.db, user_id, tool)
        except SQLAlchemyError:
            logger.exception("access check failed, denying: user=%s tool=%s", user_id, tool_id)
            self._recover()
            return False

    def grant_access(self, user_id: uuid.UUID, tool_id: uuid.UUID, unlocked_by: str) -> bool:
        if unlocked_by not in models.GRANT_SOURCES:
            logger.warning("refusing grant with unknown source %r: user=%s tool=%s", unlocked_by, user_id, tool_id)
            return False
        try:
            access_repo.upsert_access_grant(self.db, user_id, tool_id, unlocked_by)
        except SQLAlchemyError:
            logger.exception("grant failed: user=%s tool=%s source=%s", user_id, tool_id, unlocked_by)
            self._recover()
            return False
        logger.info("access granted: user=%s tool=%s source=%s", user_id, tool_id, unlocked_by)
        return True

    def revoke_access(self, user_id: uuid.UUID, tool_id: uuid.UUID) -> bool:
        """Soft-revoke the grant row. Admin-derived access is unaffected."""
        try:
            touched = access_repo.soft_revoke_access_grant(self.db, user_id, tool_id)
        except SQLAlchemyError:
            logger.exception("revoke failed: user=%s tool=%s", user_id, tool_id)
            self._recover()
            return False
        if touched:
            logger.info("access revoked: user=%s tool=%s", user_id, tool_id)
        else:
            logger.debug("revoke for missing grant is a no-op: user=%s tool=%s", user_id, tool_id)
        return True

    def list_user_access(self, user_id: uuid.UUID) -> List[schemas.ToolAccess]:
        try:
            return self.resolve_policy(user_id).list_access(self.db, user_id)
        except SQLAlchemyError:
            logger.exception("listing access failed: user=%s", user_id)
            self._recover()
            return []

    def list_tool_access_for_user(self, user_id: uuid.UUID) -> List[schemas.ToolAccessStatus]:
        """Every active tool with the user's resolved access and current grant row."""
        try:
            tools = tools_repo.list_active_tools(self.db)
            grants = {g.tool_id: g for g in access_repo.list_all_grants_for_user(self.db, user_id)}
            is_admin = users_repo.find_user_role(self.db, user_id) == models.ROLE_ADMIN
        except SQLAlchemyError:
            logger.exception("listing tool access failed: user=%s", user_id)
            self._recover()
            return []

        statuses = []
        for tool in tools:
            grant = grants.get(tool.id)
            statuses.append(
                schemas.ToolAccessStatus(
                    tool=schemas.Tool.model_validate(tool),
                    has_access=self.has_access(user_id, tool.id),
                    badge=_badge_for(grant, is_admin),
                    grant=schemas.AccessGrant.model_validate(grant) if grant else None,
                )
            )
        return statuses

    def _recover(self) -> None:
        try:
            self.db.rollback()
        except SQLAlchemyError:
            logger.warning("session rollback failed after store error", exc_info=True)


def _badge_for(grant: Optional[models.UserToolAccess], is_admin: bool) -> str:
    if is_admin:
        return BADGE_ADMIN
    if grant is None:
        return BADGE_LOCKED
    if grant.status is models.GrantStatus.REVOKED:
        return BADGE_REVOKED
    return BADGE_ACTIVE
