"""User service — dashboard accounts, authentication and status toggling.

Transaction policy: public functions commit through ``DataAccess``.
Passwords are hashed with bcrypt before they reach storage and never
appear in log lines or API responses.
"""
import logging
from datetime import datetime, timezone

from pmo_dashboard.core.contracts import USER_CREATE, USER_UPDATE
from pmo_dashboard.core.exceptions import AuthError, ConflictError
from pmo_dashboard.models import db
from pmo_dashboard.services import activity_log
from pmo_dashboard.services.data_access import DataAccess, eq, neq, or_of
from pmo_dashboard.services.jwt_service import revoke_all_user_sessions
from pmo_dashboard.utils.crypto import hash_password, verify_password

logger = logging.getLogger(__name__)

RESOURCE = "User"


def _check_unique(da: DataAccess, username: str, email: str, exclude_id: int | None = None) -> None:
    filters = [or_of(eq("username", username), eq("email", email))]
    if exclude_id is not None:
        filters.append(neq("id", exclude_id))
    if da.exists("users", filters):
        raise ConflictError(RESOURCE, "username or email",
                            message="User with this username or email already exists")


# ── Authentication ───────────────────────────────────────────────────────────


def authenticate_user(username: str, password: str):
    """Return the active user matching the credentials.

    Raises the same ``AuthError`` for an unknown user, an inactive user and
    a wrong password. The bcrypt check always runs.
    """
    user = DataAccess().first("users", [eq("username", username)])
    password_ok = verify_password(password, user.password_hash if user else None)
    if user is None or not password_ok or not user.is_active:
        logger.info("Failed login attempt for username=%r", username)
        raise AuthError()
    return user


def update_last_login(user) -> None:
    user.last_login_at = datetime.now(timezone.utc)
    db.session.commit()


# ── CRUD ─────────────────────────────────────────────────────────────────────


def list_users() -> list:
    return DataAccess().find("users", sort=[("created_at", True), ("id", True)]).rows


def get_user(user_id: int):
    return DataAccess().find_one("users", user_id)


def create_user(payload: dict, *, actor_id: int | None, ip: str | None):
    data = USER_CREATE.validate(payload)
    da = DataAccess()
    _check_unique(da, data["username"], data["email"])

    row = {
        "username": data["username"],
        "email": data["email"],
        "role": data["role"],
        "password_hash": hash_password(data["password"]),
        "is_active": data.get("is_active") if data.get("is_active") is not None else True,
    }
    user = da.insert("users", row)
    logger.info("User created id=%s role=%s", user.id, user.role)
    activity_log.log_action(
        activity_log.CREATE_USER, f"Created user: {user.username} ({user.role})", actor_id, ip,
    )
    return user


def update_user(user_id: int, payload: dict, *, actor_id: int | None, ip: str | None):
    data = USER_UPDATE.validate(payload)
    da = DataAccess()
    user = da.find_one("users", user_id)
    _check_unique(da, data["username"], data["email"], exclude_id=user_id)

    patch = {
        "username": data["username"],
        "email": data["email"],
        "role": data["role"],
        "updated_at": datetime.now(timezone.utc),
    }
    if data.get("is_active") is not None:
        if not data["is_active"] and user.id == actor_id:
            raise ConflictError(RESOURCE, message="You cannot deactivate your own account")
        patch["is_active"] = data["is_active"]
    if data.get("password"):
        patch["password_hash"] = hash_password(data["password"])

    user = da.update("users", user_id, patch)
    if not user.is_active:
        revoke_all_user_sessions(user.id)
    activity_log.log_action(activity_log.UPDATE_USER, f"Updated user: {user.username}", actor_id, ip)
    return user


def toggle_user_status(user_id: int, *, actor_id: int | None, ip: str | None):
    """Flip ``is_active``. Deactivation also revokes the user's sessions."""
    da = DataAccess()
    user = da.find_one("users", user_id)
    if user.id == actor_id and user.is_active:
        raise ConflictError(RESOURCE, message="You cannot deactivate your own account")

    new_status = not user.is_active
    user = da.update("users", user_id, {"is_active": new_status, "updated_at": datetime.now(timezone.utc)})
    if not new_status:
        revoke_all_user_sessions(user.id)

    state = "activated" if new_status else "deactivated"
    activity_log.log_action(
        activity_log.TOGGLE_USER_STATUS, f"User {user.username} {state}", actor_id, ip,
    )
    return user


def create_admin(username: str, email: str, password: str):
    """Bootstrap an admin account (CLI only; not logged to the activity trail)."""
    data = USER_CREATE.validate({
        "username": username, "email": email, "password": password, "role": "admin",
    })
    da = DataAccess()
    _check_unique(da, data["username"], data["email"])
    return da.insert("users", {
        "username": data["username"],
        "email": data["email"],
        "role": "admin",
        "password_hash": hash_password(data["password"]),
        "is_active": True,
    })
