"""
App assembly entry point.

Re-exports the FastAPI `app` from `toolhub.api.main` so it can be served with
``uvicorn app:app``.
"""

from toolhub.api.main import app  # noqa: F401
