"""
JWT Service — session token generation, verification and revocation.

Session token:  SESSION_TTL_SECONDS (default 8 hours)
Algorithm:      HS256

Token payload:
{
    "sub": "<user_id>",
    "username": "<username>",
    "role": "admin" | "manager" | "viewer",
    "iat": <issued_at>,
    "exp": <expires_at>,
    "jti": <unique_id>
}

A token is only honoured while its ``sessions`` row (keyed by the token's
SHA-256) is active and unexpired; logout flips the row inactive.
"""

import hashlib
import logging
import uuid
from datetime import datetime, timedelta, timezone

import jwt
from sqlalchemy.exc import SQLAlchemyError

from pmo_dashboard.config import get_settings
from pmo_dashboard.models import db
from pmo_dashboard.models.auth import Session
from pmo_dashboard.services.data_access import DataAccess, eq, lt, or_of
from pmo_dashboard.utils.crypto import constant_time_equals

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


# ═══════════════════════════════════════════════════════════════
# Token Generation
# ═══════════════════════════════════════════════════════════════
def generate_session_token(user_id: int, username: str, role: str) -> tuple[str, str, datetime]:
    """
    Generate a signed session token.
    Returns: (raw_token, token_hash, expires_at)
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(seconds=settings.session_ttl_seconds)
    payload = {
        "sub": str(user_id),
        "username": username,
        "role": role,
        "iat": now,
        "exp": expires_at,
        "jti": str(uuid.uuid4()),
    }
    raw_token = jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)
    return raw_token, hash_token(raw_token), expires_at


# ═══════════════════════════════════════════════════════════════
# Token Verification
# ═══════════════════════════════════════════════════════════════
def decode_session_token(token: str) -> dict:
    """
    Decode and verify a session token.

    Returns the payload dict on success.
    Raises jwt.exceptions on failure (ExpiredSignatureError, InvalidTokenError, etc.)
    """
    payload = jwt.decode(
        token,
        get_settings().jwt_secret,
        algorithms=[ALGORITHM],
        options={"require": ["sub", "exp", "jti"]},
    )
    if payload.get("role") is None or payload.get("username") is None:
        raise jwt.InvalidTokenError("Token is missing identity claims")
    return payload


# ═══════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════
def hash_token(token: str) -> str:
    """SHA-256 hash of a token; only the hash is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


# ═══════════════════════════════════════════════════════════════
# Session Management
# ═══════════════════════════════════════════════════════════════

def create_session(
    user_id: int,
    token_hash: str,
    ip_address: str | None,
    user_agent: str | None,
    expires_at: datetime,
) -> Session:
    """Persist a new authenticated session."""
    return DataAccess().insert("sessions", {
        "user_id": user_id,
        "token_hash": token_hash,
        "ip_address": ip_address,
        "user_agent": (user_agent or "")[:500],
        "expires_at": expires_at,
    })


def get_active_session(token: str) -> Session | None:
    """Return the live session row for ``token``, or None."""
    token_h = hash_token(token)
    session = DataAccess().first("sessions", [eq("token_hash", token_h), eq("is_active", True)])
    if session is None or not constant_time_equals(session.token_hash, token_h):
        return None
    if session.is_expired:
        revoke_session(session)
        return None
    return session


def touch_session(session: Session) -> None:
    """Best-effort ``last_used_at`` stamp; a failed write never blocks the request."""
    session_id = session.id
    session.last_used_at = datetime.now(timezone.utc)
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.warning("Could not update last_used_at for session %s: %s", session_id, exc)


def revoke_session(session: Session) -> None:
    """Mark a session as inactive and commit."""
    session.is_active = False
    db.session.commit()


def revoke_session_by_token(token: str) -> bool:
    """
    Find an active session by raw token and revoke it.

    Returns True if a session was found and revoked, False otherwise.
    """
    session = DataAccess().first(
        "sessions", [eq("token_hash", hash_token(token)), eq("is_active", True)],
    )
    if session:
        revoke_session(session)
        logger.info("Session revoked for user_id=%s", session.user_id)
        return True
    return False


def revoke_all_user_sessions(user_id: int) -> int:
    """Revoke every active session for a user (used on deactivation)."""
    rows = DataAccess().find("sessions", [eq("user_id", user_id), eq("is_active", True)]).rows
    for session in rows:
        session.is_active = False
    if rows:
        db.session.commit()
    return len(rows)


def prune_sessions(user_id: int | None = None) -> int:
    """
    Delete revoked and expired session rows.

    Scoped to one user when ``user_id`` is given (the login path), otherwise
    across the whole table (``flask prune-sessions``).
    """
    filters = [or_of(eq("is_active", False), lt("expires_at", datetime.now(timezone.utc)))]
    if user_id is not None:
        filters.append(eq("user_id", user_id))
    removed = DataAccess().delete_where("sessions", filters)
    if removed:
        logger.info("Pruned %d dead session(s)%s", removed,
                    f" for user_id={user_id}" if user_id is not None else "")
    return removed
