"""Runtime environment helpers for the local development identity."""

import os
from typing import Optional, Set
from urllib.parse import urlparse

_LOCAL_HOSTS: Set[str] = {"localhost", "127.0.0.1", "::1"}

DEV_USER_EMAIL = "dev@localhost"
DEV_USER_NAME = "Development User"


def _truthy(var_name: str) -> bool:
    return os.getenv(var_name, "false").strip().lower() == "true"


def _hostname_of(url_value: Optional[str]) -> Optional[str]:
    if not url_value or not url_value.strip():
        return None
    value = url_value.strip()
    candidate = value if "://" in value else f"http://{value}"
    return urlparse(candidate).hostname


def allowed_dev_hosts() -> Set[str]:
    extra = os.getenv("DEV_MODE_ALLOWED_HOSTS", "")
    hosts = set(_LOCAL_HOSTS)
    hosts.update(h.strip().lower() for h in extra.split(",") if h.strip())
    return hosts


def dev_mode_requested() -> bool:
    return _truthy("DEV_MODE")


def dev_mode_active() -> bool:
    """Return True when DEV_MODE may impersonate the dev user; raise if misconfigured.

    Only allowed while APP_BASE_URL points at a local (or whitelisted) host, or,
    with no APP_BASE_URL at all, when ALLOW_DEV_MODE=true.
    """
    if not dev_mode_requested():
        return False

    hostname = _hostname_of(os.getenv("APP_BASE_URL"))
    if hostname is None:
        if not _truthy("ALLOW_DEV_MODE"):
            raise RuntimeError(
                "DEV_MODE=true requires APP_BASE_URL to be a local URL or ALLOW_DEV_MODE=true."
            )
        return True

    hosts = allowed_dev_hosts()
    if hostname.lower() not in hosts:
        raise RuntimeError(
            f"DEV_MODE=true is not permitted when APP_BASE_URL points to '{hostname}'. "
            f"Allowed hosts: {sorted(hosts)}"
        )
    return True
