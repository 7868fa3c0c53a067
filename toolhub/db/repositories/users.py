"""
User repository functions.

Lookups used by the access layer plus the tool-count aggregation used by the
admin listing.
"""
from __future__ import annotations

import uuid
from typing import Optional, List, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session

from toolhub.db import models


def get_user(db: Session, user_id: uuid.UUID) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == email).first()


def find_user_role(db: Session, user_id: uuid.UUID) -> Optional[str]:
    row = db.query(models.User.role).filter(models.User.id == user_id).first()
    return row[0] if row else None


def set_user_role(db: Session, user_id: uuid.UUID, role: str) -> bool:
    if role not in models.ALL_ROLES:
        raise ValueError(f"Unknown role: {role}")
    user = get_user(db, user_id)
    if not user:
        return False
    user.role = role
    db.commit()
    return True


def list_users_with_tool_counts(db: Session) -> List[Tuple[models.User, int]]:
    """Return (user, non-revoked grant count) pairs, newest users first.

    Virtual admin access is not counted; only grant rows are.
    """
    counts = (
        db.query(
            models.UserToolAccess.user_id.label("user_id"),
            func.count(models.UserToolAccess.id).label("tool_count"),
        )
        .filter(models.UserToolAccess.last_revoked_at.is_(None))
        .group_by(models.UserToolAccess.user_id)
        .subquery()
    )
    rows = (
        db.query(models.User, func.coalesce(counts.c.tool_count, 0))
        .outerjoin(counts, counts.c.user_id == models.User.id)
        .order_by(models.User.created_at.desc())
        .all()
    )
    return [(user, int(count)) for user, count in rows]
