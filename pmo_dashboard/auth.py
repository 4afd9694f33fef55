"""
PMO Dashboard
Session & Authorization Gate.

Provides:
    - Per-request identity resolution (``g.identity``) from a session token
      in the ``Authorization: Bearer`` header or the session cookie
    - Role-based access control decorators

Security model:
    - Identity is anonymous unless the token verifies, its session row is
      active and unexpired, and the user is still active
    - Roles: admin > manager > viewer
    - Login is the only way to obtain a token; there are no built-in
      accounts (bootstrap the first admin with ``flask create-admin``)
"""

import functools
import logging
from dataclasses import dataclass

import jwt
from flask import g, request

from pmo_dashboard.config import get_settings
from pmo_dashboard.core.exceptions import AuthError, ForbiddenError
from pmo_dashboard.models.auth import ROLES
from pmo_dashboard.services import jwt_service
from pmo_dashboard.services.data_access import DataAccess, eq

logger = logging.getLogger(__name__)

# Role hierarchy: admin > manager > viewer
ROLE_HIERARCHY = {
    "admin": {"admin", "manager", "viewer"},
    "manager": {"manager", "viewer"},
    "viewer": {"viewer"},
}


@dataclass(frozen=True)
class Identity:
    id: int | None = None
    username: str | None = None
    role: str | None = None
    session_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.id is not None

    def has_role(self, minimum_role: str) -> bool:
        return minimum_role in ROLE_HIERARCHY.get(self.role or "", set())

    def to_dict(self) -> dict:
        return {"id": self.id, "username": self.username, "role": self.role}


ANONYMOUS = Identity()


def get_token_from_request() -> str | None:
    """Extract a session token from the Authorization header or the cookie."""
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        token = header[7:].strip()
        if token:
            return token
    return request.cookies.get(get_settings().session_cookie_name) or None


def resolve_identity(token: str | None) -> Identity:
    """Map a raw token to the caller identity (anonymous on any failure)."""
    if not token:
        return ANONYMOUS

    try:
        payload = jwt_service.decode_session_token(token)
    except jwt.ExpiredSignatureError:
        logger.debug("Expired session token presented")
        return ANONYMOUS
    except jwt.InvalidTokenError:
        logger.debug("Invalid session token presented")
        return ANONYMOUS

    session = jwt_service.get_active_session(token)
    if session is None:
        return ANONYMOUS

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        return ANONYMOUS
    user = DataAccess().first("users", [eq("id", user_id)])
    if user is None or not user.is_active or session.user_id != user.id:
        return ANONYMOUS

    # The stored role wins over the token claim so demotions apply immediately.
    identity = Identity(id=user.id, username=user.username, role=user.role, session_id=session.id)
    jwt_service.touch_session(session)
    return identity


def current_identity() -> Identity:
    return getattr(g, "identity", ANONYMOUS)


# ── Decorators ───────────────────────────────────────────────────────────────

def require_auth(f):
    """Decorator: the caller must hold a live session."""
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        if not current_identity().is_authenticated:
            raise AuthError("Authentication required")
        return f(*args, **kwargs)

    return decorated


def require_role(minimum_role: str):
    """
    Decorator: require a minimum role level.

    Usage:
        @require_role("admin")
        def delete_option(option_id): ...

    Role hierarchy: admin > manager > viewer
    """
    if minimum_role not in ROLES:
        raise ValueError(f"Unknown role: {minimum_role}")

    def decorator(f):
        @functools.wraps(f)
        def decorated(*args, **kwargs):
            identity = current_identity()
            if not identity.is_authenticated:
                raise AuthError("Authentication required")
            if not identity.has_role(minimum_role):
                logger.warning(
                    "Access denied: role '%s' tried to access '%s'-level endpoint %s",
                    identity.role, minimum_role, request.path,
                )
                raise ForbiddenError()
            return f(*args, **kwargs)

        return decorated

    return decorator


# ── App integration ──────────────────────────────────────────────────────────

def init_auth(app):
    """Register the before_request hook that resolves ``g.identity``."""

    @app.before_request
    def _resolve_identity():
        # Health checks must answer even when the session store is down
        if request.path.startswith("/static") or request.blueprint == "health_bp":
            g.identity = ANONYMOUS
            return None
        g.identity = resolve_identity(get_token_from_request())
        return None
