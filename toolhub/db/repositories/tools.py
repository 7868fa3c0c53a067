"""
Tool catalog repository functions.

The catalog is read-only to the access layer; lookups by slug only return
active tools.
"""
from __future__ import annotations

import uuid
from typing import Optional, List
from sqlalchemy.orm import Session

from toolhub.db import models


def find_tool_by_slug(db: Session, slug: str) -> Optional[models.Tool]:
    return (
        db.query(models.Tool)
        .filter(models.Tool.slug == slug, models.Tool.is_active.is_(True))
        .first()
    )


def find_tool_by_id(db: Session, tool_id: uuid.UUID) -> Optional[models.Tool]:
    return db.query(models.Tool).filter(models.Tool.id == tool_id).first()


def list_active_tools(db: Session) -> List[models.Tool]:
    return (
        db.query(models.Tool)
        .filter(models.Tool.is_active.is_(True))
        .order_by(models.Tool.name)
        .all()
    )


def get_tool_by_slug_any_state(db: Session, slug: str) -> Optional[models.Tool]:
    return db.query(models.Tool).filter(models.Tool.slug == slug).first()


def create_tool(db: Session, *, slug: str, name: str, description: str = "", is_active: bool = True) -> models.Tool:
    tool = models.Tool(slug=slug, name=name, description=description, is_active=is_active)
    db.add(tool)
    db.commit()
    db.refresh(tool)
    return tool


def set_tool_active(db: Session, slug: str, is_active: bool) -> Optional[models.Tool]:
    tool = get_tool_by_slug_any_state(db, slug)
    if not tool:
        return None
    tool.is_active = is_active
    db.commit()
    db.refresh(tool)
    return tool
