"""
Admin endpoints: user listing, per-user tool panel, access toggle and unlock links.

Every route depends on `require_admin`, which re-reads the caller's role from
the database.
"""
import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from toolhub.api.deps import get_admin_service, require_admin
from toolhub.db import schemas
from toolhub.db.database import get_db
from toolhub.db.repositories import tools as tools_repo
from toolhub.db.repositories import users as users_repo
from toolhub.services.admin_service import AdminAccessService, ToggleInProgress

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _require_user(db: Session, user_id: uuid.UUID):
    target = users_repo.get_user(db, user_id)
    if target is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return target


@router.get("/users", response_model=List[schemas.UserWithToolCount])
def list_users(
    search: Optional[str] = Query(default=None),
    admin_service: AdminAccessService = Depends(get_admin_service),
    admin_context=Depends(require_admin),
):
    return admin_service.list_users(search)


@router.get("/users/{user_id}/tools", response_model=List[schemas.ToolAccessStatus])
def user_tool_panel(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    admin_service: AdminAccessService = Depends(get_admin_service),
    admin_context=Depends(require_admin),
):
    _require_user(db, user_id)
    return admin_service.tool_panel(user_id)


@router.patch("/users/{user_id}/tools/{tool_id}", response_model=schemas.ToolAccessUpdateResult)
def set_user_tool_access(
    user_id: uuid.UUID,
    tool_id: uuid.UUID,
    payload: schemas.ToolAccessUpdate,
    db: Session = Depends(get_db),
    admin_service: AdminAccessService = Depends(get_admin_service),
    admin_context=Depends(require_admin),
):
    admin_user, _ = admin_context
    _require_user(db, user_id)
    tool = tools_repo.find_tool_by_id(db, tool_id)
    if tool is None or not tool.is_active:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tool not found")

    try:
        ok = admin_service.set_tool_access(
            actor_user_id=admin_user.id,
            user_id=user_id,
            tool_id=tool_id,
            grant=payload.has_access,
        )
    except ToggleInProgress:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An update for this user and tool is already in progress",
        )
    if not ok:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update tool access. Please try again.",
        )
    return schemas.ToolAccessUpdateResult(
        success=True,
        user_id=user_id,
        tool_id=tool_id,
        has_access=admin_service.access_service.has_access(user_id, tool_id),
    )


@router.get("/unlock-links", response_model=schemas.UnlockLinksResponse)
def unlock_links(
    admin_service: AdminAccessService = Depends(get_admin_service),
    admin_context=Depends(require_admin),
):
    return admin_service.unlock_links()
