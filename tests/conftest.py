"""
Shared pytest fixtures for the PMO Dashboard test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - make_user: factory for users with a known password
    - admin_headers / manager_headers / viewer_headers: Bearer headers
      obtained through the real login endpoint
"""

import pytest

from pmo_dashboard import create_app
from pmo_dashboard.models import db as _db
from pmo_dashboard.models.auth import User
from pmo_dashboard.utils.crypto import hash_password

PASSWORD = "Pass1234!"


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Users & sessions ─────────────────────────────────────────────────────


def create_user(username, role="viewer", *, password=PASSWORD, is_active=True, email=None):
    user = User(
        username=username,
        email=email or f"{username}@example.com",
        role=role,
        password_hash=hash_password(password),
        is_active=is_active,
    )
    _db.session.add(user)
    _db.session.commit()
    return user


def login_token(app, username, password=PASSWORD) -> str:
    """Log in on a cookie-less client so the shared ``client`` stays anonymous."""
    res = app.test_client(use_cookies=False).post(
        "/api/v1/auth/login", json={"username": username, "password": password},
    )
    assert res.status_code == 200, res.get_json()
    return res.get_json()["data"]["token"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def make_user():
    return create_user


@pytest.fixture()
def admin_user():
    return create_user("admin1", "admin")


@pytest.fixture()
def manager_user():
    return create_user("manager1", "manager")


@pytest.fixture()
def viewer_user():
    return create_user("viewer1", "viewer")


@pytest.fixture()
def admin_headers(app, admin_user):
    return bearer(login_token(app, admin_user.username))


@pytest.fixture()
def manager_headers(app, manager_user):
    return bearer(login_token(app, manager_user.username))


@pytest.fixture()
def viewer_headers(app, viewer_user):
    return bearer(login_token(app, viewer_user.username))


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def project(client, manager_headers):
    """Create and return a project via the API."""
    res = client.post(
        "/api/v1/projects",
        json={
            "customer_name": "Acme",
            "project_name": "Alpha",
            "account_manager": "Jane",
            "status": "Active",
            "priority": "High",
            "end_month": "Oct'26",
            "status2": "In Development",
        },
        headers=manager_headers,
    )
    assert res.status_code == 201
    return res.get_json()["data"]
