"""
Audit logging helpers and enums.

Centralized helpers to persist normalized audit records for tool access
changes.
"""
from __future__ import annotations
import logging
import uuid
from enum import Enum
from typing import Any, Optional, Dict
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from toolhub.db import schemas
from toolhub.db.repositories import audits as audit_repo

logger = logging.getLogger(__name__)


class AuditAction(str, Enum):
    TOOL_ACCESS_GRANT = "tool_access_grant"
    TOOL_ACCESS_REVOKE = "tool_access_revoke"
    TOOL_UNLOCK = "tool_unlock"


class AuditStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


def log(
    db: Session,
    *,
    action: AuditAction | str,
    status: AuditStatus | str = AuditStatus.SUCCESS,
    target_type: str,
    target_id: Optional[uuid.UUID] = None,
    actor_user_id: uuid.UUID,
    metadata: Optional[Dict[str, Any]] = None,
):
    """Central audit logging helper."""
    # Persist pure string values, not Enum reprs (avoid 'AuditAction.XYZ')
    action_value = action.value if isinstance(action, AuditAction) else str(action)
    status_value = status.value if isinstance(status, AuditStatus) else str(status)
    audit_log = schemas.AuditLogCreate(
        action_type=action_value,
        status=status_value,
        target_type=target_type,
        target_id=target_id,
        metadata=metadata or {},
    )
    return audit_repo.create_audit_log(db, audit_log=audit_log, actor_user_id=actor_user_id)


def log_tool_access(
    db: Session,
    *,
    actor_user_id: uuid.UUID,
    action: AuditAction,
    user_id: uuid.UUID,
    tool_id: uuid.UUID,
    status: AuditStatus | str = AuditStatus.SUCCESS,
    metadata: Optional[Dict[str, Any]] = None,
):
    """Record an access change for (user_id, tool_id).

    Audit failures never undo or fail the access change itself; they are logged
    and the session is rolled back.
    """
    payload = {"user_id": str(user_id), "tool_id": str(tool_id)}
    if metadata:
        payload.update(metadata)
    try:
        return log(
            db,
            action=action,
            status=status,
            target_type="user_tool_access",
            target_id=tool_id,
            actor_user_id=actor_user_id,
            metadata=payload,
        )
    except SQLAlchemyError:
        logger.exception("audit write failed: action=%s user=%s tool=%s", action, user_id, tool_id)
        db.rollback()
        return None


__all__ = ["AuditAction", "AuditStatus", "log", "log_tool_access"]
