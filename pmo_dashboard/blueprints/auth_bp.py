"""
Auth Blueprint — database-backed login and session endpoints.

  POST /api/v1/auth/login    — username + password → session token (+ HttpOnly cookie)
  GET  /api/v1/auth/logout   — revoke the current session
  POST /api/v1/auth/logout   — same, for API clients
  GET  /api/v1/auth/me       — current identity
"""

import logging

from flask import Blueprint, request

from pmo_dashboard.auth import current_identity, get_token_from_request, require_auth
from pmo_dashboard.config import get_settings
from pmo_dashboard.core.contracts import LOGIN
from pmo_dashboard.services import jwt_service, user_service
from pmo_dashboard.utils.errors import api_success
from pmo_dashboard.utils.helpers import json_body

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth_bp", __name__, url_prefix="/api/v1/auth")

# Landing page per role after a browser login
ROLE_HOME = {
    "admin": "/admin",
    "manager": "/pmo",
    "viewer": "/viewer",
}


# ═══════════════════════════════════════════════════════════════
# POST /api/v1/auth/login
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Authenticate with username + password.

    Body: { "username": "...", "password": "..." }
    """
    data = LOGIN.validate(json_body())
    user = user_service.authenticate_user(data["username"], data["password"])

    jwt_service.prune_sessions(user.id)
    token, token_hash, expires_at = jwt_service.generate_session_token(user.id, user.username, user.role)
    jwt_service.create_session(
        user.id, token_hash,
        request.remote_addr, request.headers.get("User-Agent", ""),
        expires_at,
    )
    user_service.update_last_login(user)
    logger.info("User %s logged in (role=%s)", user.id, user.role)

    settings = get_settings()
    response, status = api_success(
        {
            "user": {"id": user.id, "username": user.username, "role": user.role},
            "token": token,
            "token_type": "Bearer",
            "expires_at": expires_at.isoformat(),
            "redirect": ROLE_HOME.get(user.role, "/viewer"),
        },
        role=user.role,
        message="Login successful",
    )
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="Lax",
        path="/",
    )
    return response, status


# ═══════════════════════════════════════════════════════════════
# GET|POST /api/v1/auth/logout
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/logout", methods=["GET", "POST"])
def logout():
    """Revoke the presented session (if any) and clear the cookie."""
    token = get_token_from_request()
    if token:
        jwt_service.revoke_session_by_token(token)

    response, status = api_success(message="Logged out")
    response.delete_cookie(get_settings().session_cookie_name, path="/")
    return response, status


# ═══════════════════════════════════════════════════════════════
# GET /api/v1/auth/me
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/me", methods=["GET"])
@require_auth
def me():
    return api_success(current_identity().to_dict())
