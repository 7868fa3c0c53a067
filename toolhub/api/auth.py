"""
Authentication helpers and identity resolution.

Parses oauth2-proxy headers, normalizes emails, and upserts users while
supporting admin elevation via the ADMIN_EMAILS environment variable.
"""
import logging
import os
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from toolhub.db import models

logger = logging.getLogger("toolhub.auth")


def _normalize_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    cleaned = email.strip().lower()
    return cleaned or None


def _normalize_list_env(var_name: str) -> set:
    raw = os.getenv(var_name, "")
    values = set()
    for entry in raw.split(","):
        cleaned = entry.strip().strip('"').strip("'")
        if cleaned:
            values.add(cleaned.lower())
    return values


def admin_emails() -> set:
    return _normalize_list_env("ADMIN_EMAILS")


def is_admin_email(email: Optional[str]) -> bool:
    if not email:
        return False
    return _normalize_email(email) in admin_emails()


def resolve_identity_from_headers(
    x_auth_request_user: Optional[str],
    x_auth_request_email: Optional[str],
    x_forwarded_user: Optional[str],
    x_forwarded_email: Optional[str],
) -> Tuple[Optional[str], Optional[str]]:
    user = x_auth_request_user or x_forwarded_user
    email = _normalize_email(x_auth_request_email or x_forwarded_email)
    return user, email


def get_or_create_user(db: Session, email: str, name: Optional[str] = None) -> models.User:
    """Return the user for ``email``, creating it on first sight.

    New users start as ``user`` unless listed in ADMIN_EMAILS. Existing users
    listed there are promoted on login; nobody is demoted here.
    """
    user = db.query(models.User).filter(models.User.email == email).first()
    if user is None:
        user = models.User(
            email=email,
            name=name or email.split("@")[0],
            role=models.ROLE_ADMIN if is_admin_email(email) else models.ROLE_USER,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("created user %s with role %s", user.email, user.role)
        return user

    if is_admin_email(email) and user.role != models.ROLE_ADMIN:
        user.role = models.ROLE_ADMIN
        try:
            db.commit()
        except SQLAlchemyError:
            logger.warning("could not promote %s to admin", email, exc_info=True)
            db.rollback()
        db.refresh(user)
    return user
