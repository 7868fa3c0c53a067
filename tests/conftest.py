import os
import uuid

# Tests never run against a configured deployment database.
os.environ.pop("TOOLHUB_TEST_DB", None)
os.environ["DEV_MODE"] = "false"
os.environ.setdefault("APP_BASE_URL", "http://localhost:3000")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from toolhub.db import models
from toolhub.db.database import get_db
from toolhub.api.main import app


@pytest.fixture(autouse=True)
def _test_env(monkeypatch):
    monkeypatch.setenv("DEV_MODE", "false")
    monkeypatch.setenv("APP_BASE_URL", "http://localhost:3000")
    monkeypatch.delenv("ADMIN_EMAILS", raising=False)
    monkeypatch.delenv("APP_HOST", raising=False)
    yield


@pytest.fixture
def _engine():
    # Fresh in-memory database per test; StaticPool keeps one shared connection
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    models.Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def db_session(_engine):
    SessionLocal = sessionmaker(bind=_engine, autoflush=False, autocommit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


# Backwards compatibility: some tests read better with a 'db' fixture name
@pytest.fixture
def db(db_session):
    return db_session


@pytest.fixture
def override_db(db_session):
    """Point any FastAPI app's get_db dependency at the test session."""
    apps = []

    def _apply(target_app):
        def _override_get_db():
            yield db_session

        target_app.dependency_overrides[get_db] = _override_get_db
        apps.append(target_app)
        return target_app

    yield _apply
    for target_app in apps:
        target_app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def client(override_db):
    override_db(app)
    return TestClient(app)


@pytest.fixture
def user_factory(db_session):
    def _create(email=None, name=None, role=models.ROLE_USER):
        email = email or f"user_{uuid.uuid4().hex[:8]}@example.com"
        user = models.User(email=email, name=name or email.split("@")[0], role=role)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _create


@pytest.fixture
def tool_factory(db_session):
    def _create(slug=None, name=None, description="", is_active=True):
        slug = slug or f"tool-{uuid.uuid4().hex[:8]}"
        tool = models.Tool(slug=slug, name=name or slug.replace("-", " ").title(), description=description, is_active=is_active)
        db_session.add(tool)
        db_session.commit()
        db_session.refresh(tool)
        return tool

    return _create


def auth_headers(email: str, name: str = "Test User") -> dict:
    return {"x-auth-request-email": email, "x-auth-request-user": name}


@pytest.fixture
def headers_for():
    return auth_headers
