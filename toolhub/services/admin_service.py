"""
Admin management surface: user listing, per-user tool panel and unlock links.

Not a source of truth; every mutation goes through AccessControlService.
"""
from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from toolhub.audit import AuditAction, log_tool_access
from toolhub.db import models, schemas
from toolhub.db.repositories import tools as tools_repo
from toolhub.db.repositories import users as users_repo
from toolhub.services.access_service import AccessControlService
from toolhub.utils.urls import build_unlock_link

logger = logging.getLogger(__name__)


class ToggleInProgress(Exception):
    """Raised when an access toggle for the same (user, tool) pair is still running."""

    def __init__(self, user_id: uuid.UUID, tool_id: uuid.UUID):
        self.user_id = user_id
        self.tool_id = tool_id
        super().__init__(f"Access update already in progress for user={user_id} tool={tool_id}")


class InFlightGuard:
    """Process-local set of keys with a request currently in flight."""

    def __init__(self):
        self._lock = threading.Lock()
        self._active: set = set()

    @contextmanager
    def hold(self, key):
        with self._lock:
            if key in self._active:
                raise ToggleInProgress(*key)
            self._active.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._active.discard(key)

    def is_held(self, key) -> bool:
        with self._lock:
            return key in self._active


toggle_guard = InFlightGuard()


def filter_users(rows: Iterable[Tuple[models.User, int]], search: Optional[str]) -> List[Tuple[models.User, int]]:
    """Case-insensitive substring match over email and name."""
    term = (search or "").strip().lower()
    if not term:
        return list(rows)
    return [
        (user, count)
        for user, count in rows
        if term in (user.email or "").lower() or term in (user.name or "").lower()
    ]


class AdminAccessService:
    def __init__(self, db: Session, access_service: Optional[AccessControlService] = None, guard: Optional[InFlightGuard] = None):
        self.db = db
        self.access_service = access_service or AccessControlService(db)
        self.guard = guard or toggle_guard

    def list_users(self, search: Optional[str] = None) -> List[schemas.UserWithToolCount]:
        rows = filter_users(users_repo.list_users_with_tool_counts(self.db), search)
        return [
            schemas.UserWithToolCount(
                **schemas.User.model_validate(user).model_dump(),
                tool_count=count,
            )
            for user, count in rows
        ]

    def tool_panel(self, user_id: uuid.UUID) -> List[schemas.ToolAccessStatus]:
        return self.access_service.list_tool_access_for_user(user_id)

    def set_tool_access(self, *, actor_user_id: uuid.UUID, user_id: uuid.UUID, tool_id: uuid.UUID, grant: bool) -> bool:
        """Grant (admin_grant) or soft-revoke one pair; raises ToggleInProgress on overlap."""
        with self.guard.hold((user_id, tool_id)):
            if grant:
                ok = self.access_service.grant_access(user_id, tool_id, models.UNLOCKED_BY_ADMIN)
                action = AuditAction.TOOL_ACCESS_GRANT
            else:
                ok = self.access_service.revoke_access(user_id, tool_id)
                action = AuditAction.TOOL_ACCESS_REVOKE
        if ok:
            log_tool_access(
                self.db,
                actor_user_id=actor_user_id,
                action=action,
                user_id=user_id,
                tool_id=tool_id,
            )
        else:
            logger.warning("admin toggle failed: actor=%s user=%s tool=%s grant=%s", actor_user_id, user_id, tool_id, grant)
        return ok

    def unlock_links(self, origin: Optional[str] = None) -> schemas.UnlockLinksResponse:
        links = [
            schemas.ToolUnlockLink(
                tool=schemas.Tool.model_validate(tool),
                unlock_link=build_unlock_link(tool.slug, origin=origin),
            )
            for tool in tools_repo.list_active_tools(self.db)
        ]
        all_links_text = "\n\n".join(f"{link.tool.name}: {link.unlock_link}" for link in links)
        return schemas.UnlockLinksResponse(links=links, all_links_text=all_links_text)
