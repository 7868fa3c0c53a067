"""
API dependency helpers.

Resolves the calling user from oauth2-proxy headers (or the DEV_MODE
identity) and wires request-scoped services.
"""
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from toolhub.api.auth import get_or_create_user, resolve_identity_from_headers
from toolhub.db import models
from toolhub.db.database import get_db
from toolhub.db.repositories import users as users_repo
from toolhub.services.access_service import AccessControlService
from toolhub.services.admin_service import AdminAccessService
from toolhub.services.unlock_flow import UnlockFlow
from toolhub.utils.runtime import DEV_USER_EMAIL, DEV_USER_NAME, dev_mode_active

logger = logging.getLogger("toolhub.auth")


class LoginRequired(Exception):
    """Raised by page routes when the caller has no identity; rendered as a login redirect."""

    def __init__(self, next_path: str):
        self.next_path = next_path
        super().__init__(f"Login required for {next_path}")


def _identify(
    db: Session,
    x_auth_request_user: Optional[str],
    x_auth_request_email: Optional[str],
    x_forwarded_user: Optional[str],
    x_forwarded_email: Optional[str],
) -> Optional[models.User]:
    try:
        is_dev_mode = dev_mode_active()
    except RuntimeError as exc:
        logger.error("DEV_MODE misconfiguration detected: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="DEV_MODE misconfigured")
    if is_dev_mode:
        return get_or_create_user(db, email=DEV_USER_EMAIL, name=DEV_USER_NAME)
    name, email = resolve_identity_from_headers(
        x_auth_request_user=x_auth_request_user,
        x_auth_request_email=x_auth_request_email,
        x_forwarded_user=x_forwarded_user,
        x_forwarded_email=x_forwarded_email,
    )
    if not email:
        return None
    return get_or_create_user(db, email=email, name=name)


def _context_for(user: models.User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "is_admin": user.role == models.ROLE_ADMIN,
    }


# Contract:
# Returns (sqlalchemy User model, current_user_context_dict)
# Raises 401 if identity cannot be resolved.
def get_current_user_context(
    db: Session = Depends(get_db),
    x_auth_request_user: Optional[str] = Header(default=None),
    x_auth_request_email: Optional[str] = Header(default=None),
    x_forwarded_user: Optional[str] = Header(default=None),
    x_forwarded_email: Optional[str] = Header(default=None),
) -> Tuple[models.User, Dict[str, Any]]:
    user = _identify(db, x_auth_request_user, x_auth_request_email, x_forwarded_user, x_forwarded_email)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user, _context_for(user)


def get_page_user_context(
    request: Request,
    db: Session = Depends(get_db),
    x_auth_request_user: Optional[str] = Header(default=None),
    x_auth_request_email: Optional[str] = Header(default=None),
    x_forwarded_user: Optional[str] = Header(default=None),
    x_forwarded_email: Optional[str] = Header(default=None),
) -> Tuple[models.User, Dict[str, Any]]:
    """Like get_current_user_context, but sends anonymous visitors to login."""
    user = _identify(db, x_auth_request_user, x_auth_request_email, x_forwarded_user, x_forwarded_email)
    if user is None:
        raise LoginRequired(request.url.path)
    return user, _context_for(user)


def require_admin(
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
) -> Tuple[models.User, Dict[str, Any]]:
    """Allow only admins, re-reading the role from the database."""
    user, current_user = user_context
    role = users_repo.find_user_role(db, user.id)
    if role != models.ROLE_ADMIN:
        logger.warning("non-admin %s denied admin route", user.email)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    current_user["role"] = role
    current_user["is_admin"] = True
    return user, current_user


def get_access_service(db: Session = Depends(get_db)) -> AccessControlService:
    return AccessControlService(db)


def get_unlock_flow(access_service: AccessControlService = Depends(get_access_service)) -> UnlockFlow:
    return UnlockFlow(access_service)


def get_admin_service(
    db: Session = Depends(get_db),
    access_service: AccessControlService = Depends(get_access_service),
) -> AdminAccessService:
    return AdminAccessService(db, access_service=access_service)
