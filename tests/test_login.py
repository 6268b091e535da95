import pytest

import login
from login import AuthError, authenticate, effective_permissions


@pytest.fixture
def admin_row(db):
    return db.add(
        "admins",
        username="manager",
        password_hash="hashed::secret",
        role="admin",
        permissions={"can_manage_users": True},
    )


def test_authenticate_returns_session_admin(db, admin_row):
    admin = authenticate(db, " manager ", "secret")

    assert admin["id"] == admin_row["id"]
    assert admin["role"] == "admin"
    assert admin["permissions"]["can_manage_users"] is True
    assert admin["permissions"]["can_manage_registrations"] is True
    assert "password_hash" not in admin
    assert db.rpc_calls == [("verify_password", {"username": "manager", "password": "secret"})]


def test_wrong_password(db, admin_row):
    with pytest.raises(AuthError, match="Invalid username or password"):
        authenticate(db, "manager", "guess")


def test_blank_credentials_skip_the_backend(db):
    with pytest.raises(AuthError, match="required"):
        authenticate(db, "", "secret")
    assert db.rpc_calls == []


def test_disabled_admin_cannot_log_in(db):
    db.add("admins", username="old", password_hash="hashed::pw", is_active=False)
    with pytest.raises(AuthError, match="disabled"):
        authenticate(db, "old", "pw")


def test_missing_admin_row_after_verification(db, monkeypatch):
    monkeypatch.setattr(login.database, "rpc", lambda client, name, params: True)
    with pytest.raises(AuthError, match="Failed to get admin data"):
        authenticate(db, "ghost", "pw")


def test_effective_permissions_overlay_role_defaults():
    permissions = effective_permissions({"role": "viewer", "permissions": {"can_edit": True, "bogus": True}})
    assert permissions["can_edit"] is True
    assert permissions["can_view"] is True
    assert permissions["can_delete"] is False
    assert "bogus" not in permissions

    assert effective_permissions({"role": None})["can_create"] is True


def test_session_helpers(monkeypatch):
    session = {
        "admin": {"id": "a1", "username": "manager", "permissions": {"can_edit": True}},
        "translation_edit_mode": True,
    }
    monkeypatch.setattr(login.st, "session_state", session)

    assert login.current_admin()["username"] == "manager"
    assert login.has_permission("can_edit")
    assert not login.has_permission("can_manage_users")

    login.logout()
    assert login.current_admin() is None
    assert "translation_edit_mode" not in session
    assert not login.has_permission("can_edit")


def test_grants_accepts_any_of_several_permissions():
    viewer = {"permissions": effective_permissions({"role": "viewer"})}
    moderator = {"permissions": effective_permissions({"role": "moderator"})}

    assert not login.grants(viewer, ("can_create", "can_edit"))
    assert login.grants(moderator, ("can_create", "can_edit"))
    assert login.grants(viewer, "can_view")
    assert login.grants(viewer, None)
    assert not login.grants(None, None)
