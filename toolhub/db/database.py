"""
Database engine and session management.

Builds the SQLAlchemy engine from environment configuration, with an
in-memory SQLite fallback under pytest, and exposes the FastAPI dependency.
"""
import os
import sys
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

_SQLITE_MEMORY_URL = "sqlite+pysqlite:///:memory:"


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest.

    ``PYTEST_CURRENT_TEST`` is only set while a test is running, so also look
    for the pytest package in ``sys.modules`` (present during collection).
    """
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    return "pytest" in sys.modules


def _postgres_url_from_parts() -> str:
    parts = {
        "POSTGRES_USER": os.getenv("POSTGRES_USER"),
        "POSTGRES_PASSWORD": os.getenv("POSTGRES_PASSWORD"),
        "POSTGRES_HOST": os.getenv("POSTGRES_HOST"),
        "POSTGRES_PORT": os.getenv("POSTGRES_PORT"),
        "POSTGRES_DB": os.getenv("POSTGRES_DB"),
    }
    missing = [name for name, value in parts.items() if not value]
    if missing:
        raise ValueError(f"Missing required database environment variables: {', '.join(missing)}")
    return (
        f"postgresql://{parts['POSTGRES_USER']}:{parts['POSTGRES_PASSWORD']}"
        f"@{parts['POSTGRES_HOST']}:{parts['POSTGRES_PORT']}/{parts['POSTGRES_DB']}"
    )


def get_database_url() -> str:
    """Resolve the database URL.

    Precedence:
    1. TOOLHUB_TEST_DB (explicit test database)
    2. in-memory SQLite when running under pytest
    3. DATABASE_URL
    4. POSTGRES_* components (all required)
    """
    explicit_test_db = os.getenv("TOOLHUB_TEST_DB")
    if explicit_test_db:
        return explicit_test_db
    if _is_pytest_runtime():
        return _SQLITE_MEMORY_URL
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")
    return _postgres_url_from_parts()


def engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    kwargs = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in url:
        # One shared connection so the schema survives across sessions
        kwargs["poolclass"] = StaticPool
    return kwargs


DATABASE_URL = get_database_url()

engine = create_engine(DATABASE_URL, **engine_kwargs(DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_SCHEMA_INIT_DONE = False


def _ensure_sqlite_schema(bind: Optional[object] = None) -> None:
    """Create tables once for SQLite; PostgreSQL schemas come from Alembic."""
    global _SCHEMA_INIT_DONE
    if _SCHEMA_INIT_DONE:
        return
    target = bind or engine
    if str(target.url).startswith("sqlite"):
        from toolhub.db import models

        models.Base.metadata.create_all(bind=target)
    _SCHEMA_INIT_DONE = True


def get_db():
    """Dependency to get a database session."""
    _ensure_sqlite_schema()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
