from unittest.mock import patch

from sqlalchemy.exc import SQLAlchemyError

from toolhub.db import models
from toolhub.db.repositories import access as access_repo

U1 = {"x-auth-request-email": "u1@example.com", "x-auth-request-user": "U One"}


def _grants(db_session):
    return db_session.query(models.UserToolAccess).all()


def test_unlock_requires_login_redirect(client, tool_factory):
    tool_factory(slug="calc")
    r = client.get("/unlock/calc", follow_redirects=False)
    assert r.status_code == 307
    assert r.headers["location"] == "http://localhost:3000/auth/login?next=%2Funlock%2Fcalc"


def test_unlock_scenario_u1_calc(client, db_session, tool_factory):
    tool = tool_factory(slug="calc", name="Calculator")

    # No grant yet: the tool page asks for access
    r = client.get("/tool/calc", headers=U1)
    assert r.status_code == 403
    assert r.json()["state"] == "access_required"

    r = client.get("/unlock/calc", headers=U1)
    assert r.status_code == 200
    body = r.json()
    assert body["state"] == "newly_unlocked"
    assert body["tool"]["slug"] == "calc"
    assert body["tool_url"] == "http://localhost:3000/tool/calc"

    grants = _grants(db_session)
    assert len(grants) == 1
    assert grants[0].tool_id == tool.id
    assert grants[0].unlocked_by == models.UNLOCKED_BY_URL
    assert grants[0].last_revoked_at is None

    r = client.get("/unlock/calc", headers=U1)
    assert r.status_code == 200
    assert r.json()["state"] == "already_unlocked"
    assert len(_grants(db_session)) == 1

    r = client.get("/tool/calc", headers=U1)
    assert r.status_code == 200
    assert r.json()["state"] == "granted"


def test_unlock_unknown_slug_is_404(client, db_session):
    r = client.get("/unlock/does-not-exist", headers=U1)
    assert r.status_code == 404
    assert r.json()["state"] == "tool_not_found"
    assert r.json()["tool"] is None
    assert _grants(db_session) == []


def test_unlock_inactive_tool_is_404(client, tool_factory):
    tool_factory(slug="retired", is_active=False)
    r = client.get("/unlock/retired", headers=U1)
    assert r.status_code == 404


def test_unlock_grant_failure_is_503_and_retryable(client, tool_factory):
    tool_factory(slug="calc")
    with patch.object(access_repo, "upsert_access_grant", side_effect=SQLAlchemyError("write failed")):
        r = client.get("/unlock/calc", headers=U1)
    assert r.status_code == 503
    assert r.json()["state"] == "grant_failed"
    assert r.json()["tool_url"] is None

    r = client.get("/unlock/calc", headers=U1)
    assert r.json()["state"] == "newly_unlocked"


def test_admin_visit_never_writes_grant(client, db_session, user_factory, tool_factory):
    user_factory(email="admin@example.com", role=models.ROLE_ADMIN)
    tool_factory(slug="calc")
    r = client.get("/unlock/calc", headers={"x-auth-request-email": "admin@example.com"})
    assert r.json()["state"] == "already_unlocked"
    assert _grants(db_session) == []
