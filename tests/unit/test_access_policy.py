from toolhub.db import models
from toolhub.db.repositories import access as access_repo
from toolhub.services.access_policy import (
    GRANT_BASED,
    ROLE_BASED,
    GrantBasedPolicy,
    RoleBasedPolicy,
    policy_for_role,
)


def test_policy_selection_by_role():
    assert isinstance(policy_for_role(models.ROLE_ADMIN), RoleBasedPolicy)
    assert isinstance(policy_for_role(models.ROLE_USER), GrantBasedPolicy)
    # Missing users and unexpected roles never get admin treatment
    assert policy_for_role(None) is GRANT_BASED
    assert policy_for_role("superuser") is GRANT_BASED


def test_grant_policy_follows_rows(db_session, user_factory, tool_factory):
    user = user_factory()
    tool = tool_factory()
    assert GRANT_BASED.has_access(db_session, user.id, tool) is False

    access_repo.upsert_access_grant(db_session, user.id, tool.id, models.UNLOCKED_BY_URL)
    assert GRANT_BASED.has_access(db_session, user.id, tool) is True

    access_repo.soft_revoke_access_grant(db_session, user.id, tool.id)
    assert GRANT_BASED.has_access(db_session, user.id, tool) is False


def test_role_policy_never_reads_grant_table(db_session, user_factory, tool_factory, monkeypatch):
    admin = user_factory(role=models.ROLE_ADMIN)
    tool = tool_factory()

    def _fail(*args, **kwargs):
        raise AssertionError("grant table must not be consulted for admins")

    monkeypatch.setattr(access_repo, "find_access_grant", _fail)
    monkeypatch.setattr(access_repo, "list_access_grants_for_user", _fail)

    assert ROLE_BASED.has_access(db_session, admin.id, tool) is True
    listed = ROLE_BASED.list_access(db_session, admin.id)
    assert [a.tool_id for a in listed] == [tool.id]
    assert listed[0].unlocked_by == models.UNLOCKED_BY_ADMIN_PRIVILEGE
