"""
Audit log API endpoints.

Lists access-change records; admins only.
"""
from typing import List, Optional
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from toolhub.api.deps import require_admin
from toolhub.db import schemas
from toolhub.db.database import get_db
from toolhub.db.repositories import audits as audit_repo

router = APIRouter(prefix="/audits", tags=["audits"])


@router.get("", response_model=List[schemas.AuditLog])
def list_audit_logs(
    user_id: Optional[uuid.UUID] = None,
    action_type: Optional[str] = None,
    target_id: Optional[uuid.UUID] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    admin_context=Depends(require_admin),
):
    return audit_repo.get_audit_logs(
        db,
        user_id=user_id,
        action_type=action_type,
        target_id=target_id,
        skip=skip,
        limit=limit,
    )
