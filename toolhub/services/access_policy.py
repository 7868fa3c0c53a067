"""
Access policies: how a user's role turns into tool access.

A policy is selected once per operation from the user's role:

- ``GrantBasedPolicy`` (role ``user``): access is backed by a non-revoked row
  in ``user_tool_access``.
- ``RoleBasedPolicy`` (role ``admin``): every active tool is accessible; the
  access is virtual and never written to or read from the grant table.

Tool activity is checked by the caller before a policy is consulted.
"""
from __future__ import annotations

import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from toolhub.db import models, schemas
from toolhub.db.repositories import access as access_repo
from toolhub.db.repositories import tools as tools_repo


class AccessPolicy:
    """Base strategy; subclasses decide access for an already-active tool."""

    name = "base"

    def has_access(self, db: Session, user_id: uuid.UUID, tool: models.Tool) -> bool:
        raise NotImplementedError

    def list_access(self, db: Session, user_id: uuid.UUID) -> List[schemas.ToolAccess]:
        raise NotImplementedError


class GrantBasedPolicy(AccessPolicy):
    name = "grant"

    def has_access(self, db: Session, user_id: uuid.UUID, tool: models.Tool) -> bool:
        grant = access_repo.find_access_grant(db, user_id, tool.id)
        return grant is not None and grant.status is models.GrantStatus.ACTIVE

    def list_access(self, db: Session, user_id: uuid.UUID) -> List[schemas.ToolAccess]:
        grants = access_repo.list_access_grants_for_user(db, user_id)
        return [schemas.ToolAccess.model_validate(g) for g in grants]


class RoleBasedPolicy(AccessPolicy):
    name = "role"

    def has_access(self, db: Session, user_id: uuid.UUID, tool: models.Tool) -> bool:
        return bool(tool.is_active)

    def list_access(self, db: Session, user_id: uuid.UUID) -> List[schemas.ToolAccess]:
        now = models.now_utc()
        return [
            schemas.ToolAccess(
                id=None,
                user_id=user_id,
                tool_id=tool.id,
                last_unlocked_at=now,
                last_revoked_at=None,
                unlocked_by=models.UNLOCKED_BY_ADMIN_PRIVILEGE,
                tool=schemas.Tool.model_validate(tool),
            )
            for tool in tools_repo.list_active_tools(db)
        ]


GRANT_BASED = GrantBasedPolicy()
ROLE_BASED = RoleBasedPolicy()


def policy_for_role(role: Optional[str]) -> AccessPolicy:
    """Unknown or missing roles get the grant-based policy."""
    if role == models.ROLE_ADMIN:
        return ROLE_BASED
    return GRANT_BASED
