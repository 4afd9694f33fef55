"""
Activity logger — best-effort audit trail of admin mutations.

``log_action`` never raises: a failed write is rolled back, logged at
WARNING and dropped, so the operation that triggered it still succeeds.
"""

import logging

from pmo_dashboard.models import db
from pmo_dashboard.models.admin import ActivityLogEntry
from pmo_dashboard.services.data_access import DataAccess, Page

logger = logging.getLogger(__name__)

CREATE_DROPDOWN_OPTION = "CREATE_DROPDOWN_OPTION"
UPDATE_DROPDOWN_OPTION = "UPDATE_DROPDOWN_OPTION"
DELETE_DROPDOWN_OPTION = "DELETE_DROPDOWN_OPTION"
CREATE_USER = "CREATE_USER"
UPDATE_USER = "UPDATE_USER"
TOGGLE_USER_STATUS = "TOGGLE_USER_STATUS"
UPDATE_SETTINGS = "UPDATE_SETTINGS"


def log_action(action: str, details: str | None, user_id: int | None, ip_address: str | None) -> bool:
    """Append one activity entry. Returns False when the write was dropped."""
    try:
        db.session.add(ActivityLogEntry(
            action=action,
            details=details,
            user_id=user_id,
            ip_address=(ip_address or "")[:45] or None,
        ))
        db.session.commit()
        return True
    except Exception:  # noqa: BLE001
        try:
            db.session.rollback()
        except Exception:  # noqa: BLE001
            logger.debug("Rollback after failed activity log write also failed", exc_info=True)
        logger.warning("Activity log write dropped: action=%s", action, exc_info=True)
        return False


def list_activity(limit: int = 100, offset: int = 0):
    """Newest entries first. Returns ``FindResult``."""
    return DataAccess().find(
        "admin_activity_log",
        sort=[("timestamp", True), ("id", True)],
        page=Page(limit=limit, offset=offset),
    )
