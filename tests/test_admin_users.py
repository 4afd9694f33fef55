"""
User administration tests.

Tests cover:
  - Create / update with username + email uniqueness
  - Password handling (hashed at rest, never serialised)
  - Status toggling and its effect on live sessions
  - Admin-only access
"""

from pmo_dashboard.models import db
from pmo_dashboard.models.admin import ActivityLogEntry
from pmo_dashboard.models.auth import User
from pmo_dashboard.utils.crypto import verify_password
from tests.conftest import bearer, login_token

BASE = "/api/v1/admin/users"
LOGIN = "/api/v1/auth/login"


def _payload(**overrides):
    payload = {
        "username": "bob",
        "email": "bob@example.com",
        "password": "secret1",
        "role": "viewer",
    }
    payload.update(overrides)
    return payload


class TestCreateUser:
    def test_create_hashes_password_and_hides_it(self, client, admin_headers):
        res = client.post(BASE, json=_payload(), headers=admin_headers)
        assert res.status_code == 201
        data = res.get_json()["data"]
        assert "password" not in data
        assert "password_hash" not in data
        assert data["is_active"] is True

        row = User.query.filter_by(username="bob").one()
        assert row.password_hash != "secret1"
        assert verify_password("secret1", row.password_hash)

    def test_duplicate_username_or_email_is_409(self, client, admin_headers):
        assert client.post(BASE, json=_payload(), headers=admin_headers).status_code == 201
        res = client.post(BASE, json=_payload(email="other@example.com"), headers=admin_headers)
        assert res.status_code == 409
        assert res.get_json()["error"] == "User with this username or email already exists"
        res = client.post(BASE, json=_payload(username="bobby"), headers=admin_headers)
        assert res.status_code == 409

    def test_every_invalid_field_is_reported(self, client, admin_headers):
        res = client.post(
            BASE,
            json=_payload(username="bo", email="not-an-email", role="root", password="123"),
            headers=admin_headers,
        )
        assert res.status_code == 400
        fields = {d["field"] for d in res.get_json()["details"]}
        assert fields == {"username", "email", "role", "password"}

    def test_password_required_on_create(self, client, admin_headers):
        payload = _payload()
        del payload["password"]
        res = client.post(BASE, json=payload, headers=admin_headers)
        assert res.status_code == 400
        assert res.get_json()["details"] == [{"field": "password", "reason": "is required"}]

    def test_password_past_bcrypt_limit_is_400(self, client, admin_headers):
        for password in ("x" * 100, "\u00e9" * 40):
            res = client.post(BASE, json=_payload(password=password), headers=admin_headers)
            assert res.status_code == 400
            assert res.get_json()["details"] == [
                {"field": "password", "reason": "must be at most 72 bytes"},
            ]
        assert User.query.filter_by(username="bob").first() is None

    def test_create_is_logged(self, client, admin_headers):
        client.post(BASE, json=_payload(), headers=admin_headers)
        entry = ActivityLogEntry.query.one()
        assert entry.action == "CREATE_USER"
        assert entry.details == "Created user: bob (viewer)"
        assert "secret1" not in entry.details


class TestUpdateUser:
    def test_update_without_password_keeps_it(self, client, app, admin_headers):
        user = client.post(BASE, json=_payload(), headers=admin_headers).get_json()["data"]
        res = client.put(
            f"{BASE}/{user['id']}",
            json={"username": "bob", "email": "bob@example.com", "role": "manager"},
            headers=admin_headers,
        )
        assert res.status_code == 200
        assert res.get_json()["data"]["role"] == "manager"
        assert login_token(app, "bob", "secret1")

    def test_update_with_password_rehashes(self, client, app, admin_headers):
        user = client.post(BASE, json=_payload(), headers=admin_headers).get_json()["data"]
        client.put(
            f"{BASE}/{user['id']}",
            json={"username": "bob", "email": "bob@example.com", "role": "viewer", "password": "newpass1"},
            headers=admin_headers,
        )
        assert client.post(LOGIN, json={"username": "bob", "password": "secret1"}).status_code == 401
        assert login_token(app, "bob", "newpass1")

    def test_update_with_overlong_password_is_400_and_keeps_old_one(self, client, app, admin_headers):
        user = client.post(BASE, json=_payload(), headers=admin_headers).get_json()["data"]
        res = client.put(
            f"{BASE}/{user['id']}",
            json={"username": "bob", "email": "bob@example.com", "role": "viewer", "password": "y" * 73},
            headers=admin_headers,
        )
        assert res.status_code == 400
        assert res.get_json()["details"][0]["field"] == "password"
        assert login_token(app, "bob", "secret1")

    def test_update_into_taken_username_is_409(self, client, admin_headers):
        client.post(BASE, json=_payload(), headers=admin_headers)
        carol = client.post(
            BASE, json=_payload(username="carol", email="carol@example.com"), headers=admin_headers,
        ).get_json()["data"]
        res = client.put(
            f"{BASE}/{carol['id']}",
            json={"username": "bob", "email": "carol@example.com", "role": "viewer"},
            headers=admin_headers,
        )
        assert res.status_code == 409

    def test_update_missing_user_is_404(self, client, admin_headers):
        res = client.put(
            f"{BASE}/999",
            json={"username": "ghost", "email": "ghost@example.com", "role": "viewer"},
            headers=admin_headers,
        )
        assert res.status_code == 404


class TestToggleStatus:
    def test_deactivate_then_reactivate(self, client, app, admin_headers):
        bob = client.post(BASE, json=_payload(), headers=admin_headers).get_json()["data"]
        bob_headers = bearer(login_token(app, "bob", "secret1"))
        assert client.get("/api/v1/auth/me", headers=bob_headers).status_code == 200

        res = client.put(f"{BASE}/{bob['id']}/toggle-status", headers=admin_headers)
        assert res.status_code == 200
        assert res.get_json()["data"]["is_active"] is False
        assert res.get_json()["message"] == "User deactivated successfully"

        # existing session is revoked and new logins fail
        assert client.get("/api/v1/auth/me", headers=bob_headers).status_code == 401
        assert client.post(LOGIN, json={"username": "bob", "password": "secret1"}).status_code == 401

        res = client.put(f"{BASE}/{bob['id']}/toggle-status", headers=admin_headers)
        assert res.get_json()["data"]["is_active"] is True
        assert login_token(app, "bob", "secret1")

        actions = [e.action for e in ActivityLogEntry.query.order_by(ActivityLogEntry.id)]
        assert actions == ["CREATE_USER", "TOGGLE_USER_STATUS", "TOGGLE_USER_STATUS"]

    def test_admin_cannot_deactivate_self(self, client, admin_user, admin_headers):
        res = client.put(f"{BASE}/{admin_user.id}/toggle-status", headers=admin_headers)
        assert res.status_code == 409
        assert db.session.get(User, admin_user.id).is_active is True

    def test_toggle_missing_user_is_404(self, client, admin_headers):
        assert client.put(f"{BASE}/999/toggle-status", headers=admin_headers).status_code == 404


class TestUserAccess:
    def test_list_newest_first_without_hashes(self, client, admin_headers):
        client.post(BASE, json=_payload(), headers=admin_headers)
        users = client.get(BASE, headers=admin_headers).get_json()["data"]
        assert [u["username"] for u in users] == ["bob", "admin1"]
        assert all("password_hash" not in u for u in users)

    def test_get_single_user(self, client, admin_user, admin_headers):
        res = client.get(f"{BASE}/{admin_user.id}", headers=admin_headers)
        assert res.status_code == 200
        assert res.get_json()["data"]["email"] == "admin1@example.com"

    def test_viewer_and_manager_are_forbidden(self, client, viewer_headers, manager_headers):
        assert client.get(BASE, headers=viewer_headers).status_code == 403
        assert client.post(BASE, json=_payload(), headers=manager_headers).status_code == 403


class TestCreateAdminCommand:
    def _run(self, app, username="root1", email="root1@example.com", password="Admin123!"):
        runner = app.test_cli_runner()
        return runner.invoke(args=[
            "create-admin", "--username", username, "--email", email, "--password", password,
        ])

    def test_creates_active_admin_that_can_log_in(self, app):
        result = self._run(app)
        assert result.exit_code == 0, result.output
        assert "Admin user 'root1' created" in result.output

        user = User.query.filter_by(username="root1").one()
        assert user.role == "admin"
        assert user.is_active is True
        assert user.password_hash != "Admin123!"
        assert login_token(app, "root1", "Admin123!")

    def test_duplicate_username_is_refused(self, app, admin_user):
        result = self._run(app, username="admin1", email="other@example.com")
        assert result.exit_code != 0
        assert User.query.filter_by(email="other@example.com").first() is None
