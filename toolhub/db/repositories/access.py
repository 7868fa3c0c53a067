"""
Tool access grant repository functions.

`user_tool_access` holds at most one row per (user_id, tool_id). Grants are
written with INSERT ... ON CONFLICT DO UPDATE so concurrent grants converge on
that row; revokes only stamp `last_revoked_at`.
"""
from __future__ import annotations

import uuid
from typing import Optional, List
from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from toolhub.db import models

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _upsert_statement(db: Session, values: dict):
    dialect = db.get_bind().dialect.name
    insert_fn = _UPSERT_INSERTS.get(dialect)
    if insert_fn is None:
        raise NotImplementedError(f"Access grant upsert is not supported on dialect '{dialect}'")
    stmt = insert_fn(models.UserToolAccess.__table__).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=["user_id", "tool_id"],
        set_={
            "last_unlocked_at": stmt.excluded.last_unlocked_at,
            "unlocked_by": stmt.excluded.unlocked_by,
            "last_revoked_at": None,
        },
    )


def upsert_access_grant(db: Session, user_id: uuid.UUID, tool_id: uuid.UUID, unlocked_by: str) -> None:
    """Create or re-activate the grant for (user_id, tool_id).

    Raises SQLAlchemyError on store failure; callers decide how to surface it.
    """
    values = {
        "id": uuid.uuid4(),
        "user_id": user_id,
        "tool_id": tool_id,
        "last_unlocked_at": models.now_utc(),
        "last_revoked_at": None,
        "unlocked_by": unlocked_by,
    }
    try:
        db.execute(_upsert_statement(db, values))
        db.commit()
    except Exception:
        db.rollback()
        raise


def soft_revoke_access_grant(db: Session, user_id: uuid.UUID, tool_id: uuid.UUID) -> int:
    """Stamp `last_revoked_at` on the grant row. Returns the number of rows touched (0 when absent)."""
    stmt = (
        update(models.UserToolAccess)
        .where(
            models.UserToolAccess.user_id == user_id,
            models.UserToolAccess.tool_id == tool_id,
        )
        .values(last_revoked_at=models.now_utc())
    )
    try:
        result = db.execute(stmt)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return result.rowcount or 0


def find_access_grant(db: Session, user_id: uuid.UUID, tool_id: uuid.UUID) -> Optional[models.UserToolAccess]:
    return (
        db.query(models.UserToolAccess)
        .filter(
            models.UserToolAccess.user_id == user_id,
            models.UserToolAccess.tool_id == tool_id,
        )
        .first()
    )


def list_access_grants_for_user(db: Session, user_id: uuid.UUID) -> List[models.UserToolAccess]:
    """Non-revoked grants for the user, joined to their active tool."""
    return (
        db.query(models.UserToolAccess)
        .join(models.Tool, models.Tool.id == models.UserToolAccess.tool_id)
        .filter(
            models.UserToolAccess.user_id == user_id,
            models.UserToolAccess.last_revoked_at.is_(None),
            models.Tool.is_active.is_(True),
        )
        .order_by(models.Tool.name)
        .all()
    )


def list_all_grants_for_user(db: Session, user_id: uuid.UUID) -> List[models.UserToolAccess]:
    """Every grant row for the user, revoked ones included (admin panel)."""
    return db.query(models.UserToolAccess).filter(models.UserToolAccess.user_id == user_id).all()


def count_non_revoked_grants_for_user(db: Session, user_id: uuid.UUID) -> int:
    return (
        db.query(models.UserToolAccess)
        .filter(
            models.UserToolAccess.user_id == user_id,
            models.UserToolAccess.last_revoked_at.is_(None),
        )
        .count()
    )
