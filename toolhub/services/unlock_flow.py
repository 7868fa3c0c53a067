"""
Unlock flow: what happens when a signed-in user visits ``/unlock/{slug}``.

Every visit is an independent, linear transition with at most one grant:

1. no active tool for the slug            -> TOOL_NOT_FOUND
2. the user already has access            -> ALREADY_UNLOCKED (no write)
3. the ``url_unlock`` grant did not stick -> GRANT_FAILED
4. otherwise                              -> NEWLY_UNLOCKED

There are no internal retries; revisiting the link is the retry, and step 2
makes that safe.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from toolhub.audit import AuditAction, log_tool_access
from toolhub.db import models
from toolhub.db.repositories import tools as tools_repo
from toolhub.services.access_service import AccessControlService

logger = logging.getLogger(__name__)


class UnlockState(str, Enum):
    TOOL_NOT_FOUND = "tool_not_found"
    ALREADY_UNLOCKED = "already_unlocked"
    GRANT_FAILED = "grant_failed"
    NEWLY_UNLOCKED = "newly_unlocked"


@dataclass(frozen=True)
class UnlockOutcome:
    state: UnlockState
    tool: Optional[models.Tool] = None

    @property
    def has_access(self) -> bool:
        return self.state in (UnlockState.ALREADY_UNLOCKED, UnlockState.NEWLY_UNLOCKED)


class UnlockFlow:
    def __init__(self, access_service: AccessControlService):
        self.access_service = access_service
        self.db = access_service.db

    def visit(self, user_id: uuid.UUID, slug: str) -> UnlockOutcome:
        try:
            tool = tools_repo.find_tool_by_slug(self.db, slug)
        except SQLAlchemyError:
            # A lookup fault is retryable; it must not masquerade as "not found".
            logger.exception("unlock lookup failed: user=%s slug=%s", user_id, slug)
            self.db.rollback()
            return UnlockOutcome(UnlockState.GRANT_FAILED)

        if tool is None:
            return UnlockOutcome(UnlockState.TOOL_NOT_FOUND)

        if self.access_service.has_access(user_id, tool.id):
            return UnlockOutcome(UnlockState.ALREADY_UNLOCKED, tool)

        if not self.access_service.grant_access(user_id, tool.id, models.UNLOCKED_BY_URL):
            return UnlockOutcome(UnlockState.GRANT_FAILED, tool)

        log_tool_access(
            self.db,
            actor_user_id=user_id,
            action=AuditAction.TOOL_UNLOCK,
            user_id=user_id,
            tool_id=tool.id,
            metadata={"slug": tool.slug, "unlocked_by": models.UNLOCKED_BY_URL},
        )
        return UnlockOutcome(UnlockState.NEWLY_UNLOCKED, tool)
