"""
URL utilities for building absolute links to the frontend.

Primary source: APP_BASE_URL (e.g., https://tools.example.com)
Fallback: APP_HOST for compatibility (adds scheme heuristically if missing).
"""
from __future__ import annotations

import os
from urllib.parse import quote, urlencode


def _add_scheme_if_missing(host: str) -> str:
    h = host.strip()
    if not h:
        return "http://localhost:3000"
    if h.startswith("http://") or h.startswith("https://"):
        return h
    # Simple heuristic: use http for localhost, otherwise https
    lower = h.lower()
    if lower.startswith("localhost") or lower.startswith("127.0.0.1"):
        return f"http://{h}"
    return f"https://{h}"


def _strip_trailing_slash(url: str) -> str:
    return url[:-1] if url.endswith("/") else url


def get_app_base_url() -> str:
    """Return normalized base URL for the frontend application.

    Precedence:
    1. APP_BASE_URL (recommended)
    2. APP_HOST (legacy), scheme added if missing
    Defaults to http://localhost:3000 if neither is set.
    """
    base = os.getenv("APP_BASE_URL")
    if base and base.strip():
        return _strip_trailing_slash(base.strip())
    host = os.getenv("APP_HOST")
    if host and host.strip():
        full = _add_scheme_if_missing(host.strip())
        return _strip_trailing_slash(full)
    return "http://localhost:3000"


def build_unlock_link(slug: str, *, origin: str | None = None) -> str:
    """Return ``{origin}/unlock/{slug}``. Pure; visiting the link is what unlocks."""
    base = _strip_trailing_slash(origin) if origin else get_app_base_url()
    return f"{base}/unlock/{quote(slug, safe='')}"


def build_tool_link(slug: str, *, origin: str | None = None) -> str:
    base = _strip_trailing_slash(origin) if origin else get_app_base_url()
    return f"{base}/tool/{quote(slug, safe='')}"


def build_login_link(next_path: str | None = None) -> str:
    """Login entry point, optionally carrying the path to return to."""
    base = get_app_base_url()
    if not next_path:
        return f"{base}/auth/login"
    return f"{base}/auth/login?{urlencode({'next': next_path})}"
