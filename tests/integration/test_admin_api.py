import uuid
from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from toolhub.db import models
from toolhub.db.repositories import access as access_repo
from toolhub.services import admin_service as admin_module

ADMIN = {"x-auth-request-email": "admin@example.com", "x-auth-request-user": "Admin"}
REGULAR = {"x-auth-request-email": "regular@example.com", "x-auth-request-user": "Regular"}


@pytest.fixture
def admin_user(user_factory):
    return user_factory(email="admin@example.com", name="Admin", role=models.ROLE_ADMIN)


@pytest.mark.parametrize(
    "method,path",
    [
        ("get", "/admin/users"),
        ("get", f"/admin/users/{uuid.uuid4()}/tools"),
        ("get", "/admin/unlock-links"),
        ("get", "/audits"),
    ],
)
def test_admin_routes_reject_anonymous_and_regular_users(client, method, path):
    assert getattr(client, method)(path).status_code == 401
    assert getattr(client, method)(path, headers=REGULAR).status_code == 403


def test_toggle_rejects_regular_user(client, user_factory, tool_factory):
    target = user_factory()
    tool = tool_factory()
    r = client.patch(f"/admin/users/{target.id}/tools/{tool.id}", json={"has_access": True}, headers=REGULAR)
    assert r.status_code == 403


def test_user_listing_with_counts_and_search(client, admin_user, user_factory, tool_factory):
    alice = user_factory(email="alice@example.com", name="Alice")
    user_factory(email="bob@example.com", name="Bob")
    t1, t2 = tool_factory(), tool_factory()
    for tool in (t1, t2):
        client.patch(f"/admin/users/{alice.id}/tools/{tool.id}", json={"has_access": True}, headers=ADMIN)
    client.patch(f"/admin/users/{alice.id}/tools/{t2.id}", json={"has_access": False}, headers=ADMIN)

    r = client.get("/admin/users", headers=ADMIN)
    assert r.status_code == 200
    counts = {u["email"]: u["tool_count"] for u in r.json()}
    assert counts == {"admin@example.com": 0, "alice@example.com": 1, "bob@example.com": 0}

    r = client.get("/admin/users", params={"search": "ALI"}, headers=ADMIN)
    assert [u["email"] for u in r.json()] == ["alice@example.com"]


def test_toggle_grant_then_revoke(client, db_session, admin_user, user_factory, tool_factory):
    target = user_factory()
    tool = tool_factory()
    url = f"/admin/users/{target.id}/tools/{tool.id}"

    r = client.patch(url, json={"has_access": True}, headers=ADMIN)
    assert r.status_code == 200
    assert r.json() == {"success": True, "user_id": str(target.id), "tool_id": str(tool.id), "has_access": True}
    grant = db_session.query(models.UserToolAccess).one()
    assert grant.unlocked_by == models.UNLOCKED_BY_ADMIN

    r = client.patch(url, json={"has_access": False}, headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["has_access"] is False

    panel = client.get(f"/admin/users/{target.id}/tools", headers=ADMIN).json()
    assert len(panel) == 1
    assert panel[0]["has_access"] is False
    assert panel[0]["badge"] == "revoked"
    assert panel[0]["grant"]["status"] == "revoked"
    assert panel[0]["grant"]["last_revoked_at"] is not None


def test_revoking_admin_grant_keeps_access_and_shows_admin_badge(client, admin_user, user_factory, tool_factory):
    other_admin = user_factory(role=models.ROLE_ADMIN)
    tool = tool_factory()
    url = f"/admin/users/{other_admin.id}/tools/{tool.id}"
    client.patch(url, json={"has_access": True}, headers=ADMIN)

    r = client.patch(url, json={"has_access": False}, headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["has_access"] is True

    panel = client.get(f"/admin/users/{other_admin.id}/tools", headers=ADMIN).json()
    assert panel[0]["badge"] == "admin"


def test_revoke_without_grant_is_success(client, admin_user, user_factory, tool_factory):
    target = user_factory()
    tool = tool_factory()
    r = client.patch(f"/admin/users/{target.id}/tools/{tool.id}", json={"has_access": False}, headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["success"] is True


def test_toggle_unknown_user_or_tool_is_404(client, admin_user, user_factory, tool_factory):
    target = user_factory()
    tool = tool_factory()
    retired = tool_factory(is_active=False)

    assert client.patch(f"/admin/users/{uuid.uuid4()}/tools/{tool.id}", json={"has_access": True}, headers=ADMIN).status_code == 404
    assert client.patch(f"/admin/users/{target.id}/tools/{uuid.uuid4()}", json={"has_access": True}, headers=ADMIN).status_code == 404
    assert client.patch(f"/admin/users/{target.id}/tools/{retired.id}", json={"has_access": True}, headers=ADMIN).status_code == 404
    assert client.get(f"/admin/users/{uuid.uuid4()}/tools", headers=ADMIN).status_code == 404


def test_toggle_store_failure_is_500(client, admin_user, user_factory, tool_factory):
    target = user_factory()
    tool = tool_factory()
    with patch.object(access_repo, "upsert_access_grant", side_effect=SQLAlchemyError("down")):
        r = client.patch(f"/admin/users/{target.id}/tools/{tool.id}", json={"has_access": True}, headers=ADMIN)
    assert r.status_code == 500


def test_toggle_in_flight_is_409(client, admin_user, user_factory, tool_factory):
    target = user_factory()
    tool = tool_factory()
    with admin_module.toggle_guard.hold((target.id, tool.id)):
        r = client.patch(f"/admin/users/{target.id}/tools/{tool.id}", json={"has_access": True}, headers=ADMIN)
    assert r.status_code == 409
    assert not admin_module.toggle_guard.is_held((target.id, tool.id))


def test_unlock_links(client, admin_user, tool_factory):
    tool_factory(slug="calculator", name="Calculator")
    tool_factory(slug="review-link-generator", name="Review Link Generator")

    r = client.get("/admin/unlock-links", headers=ADMIN)
    assert r.status_code == 200
    body = r.json()
    assert [l["unlock_link"] for l in body["links"]] == [
        "http://localhost:3000/unlock/calculator",
        "http://localhost:3000/unlock/review-link-generator",
    ]
    assert body["all_links_text"].split("\n\n") == [
        "Calculator: http://localhost:3000/unlock/calculator",
        "Review Link Generator: http://localhost:3000/unlock/review-link-generator",
    ]


def test_audit_trail_records_unlocks_and_toggles(client, admin_user, user_factory, tool_factory):
    tool = tool_factory(slug="calc")
    target = user_factory(email="target@example.com")
    client.get("/unlock/calc", headers={"x-auth-request-email": "target@example.com"})
    client.patch(f"/admin/users/{target.id}/tools/{tool.id}", json={"has_access": False}, headers=ADMIN)

    r = client.get("/audits", headers=ADMIN)
    assert r.status_code == 200
    assert sorted(a["action_type"] for a in r.json()) == ["tool_access_revoke", "tool_unlock"]

    r = client.get("/audits", params={"action_type": "tool_unlock"}, headers=ADMIN)
    entries = r.json()
    assert len(entries) == 1
    assert entries[0]["actor_user_id"] == str(target.id)
    assert entries[0]["metadata"]["slug"] == "calc"
