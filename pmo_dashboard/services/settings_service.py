"""System settings — free-form key/value pairs, upserted by key."""
import json
import logging
from datetime import datetime, timezone

from pmo_dashboard.core.exceptions import ValidationError
from pmo_dashboard.services import activity_log
from pmo_dashboard.services.data_access import DataAccess

logger = logging.getLogger(__name__)

MAX_KEY_LENGTH = 100


def encode_value(value) -> str | None:
    """String-encode a setting value (booleans as ``true``/``false``)."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True)
    return str(value)


def get_settings_map() -> dict:
    rows = DataAccess().find("system_settings", sort=[("setting_key", False)]).rows
    return {row.setting_key: row.setting_value for row in rows}


def update_settings(payload: dict, *, actor_id: int | None, ip: str | None) -> int:
    """Upsert every key in ``payload``. Returns how many keys were written."""
    if not payload:
        return 0

    errors = [
        {"field": key, "reason": f"must be at most {MAX_KEY_LENGTH} characters"}
        for key in payload if len(key) > MAX_KEY_LENGTH
    ]
    errors += [{"field": key, "reason": "must not be blank"} for key in payload if not key.strip()]
    if errors:
        raise ValidationError("Invalid settings", details=errors)

    now = datetime.now(timezone.utc)
    rows = [
        {"setting_key": key, "setting_value": encode_value(value), "updated_at": now}
        for key, value in payload.items()
    ]
    DataAccess().upsert("system_settings", rows, "setting_key")
    logger.info("Settings updated: %s", ", ".join(sorted(payload)))
    activity_log.log_action(
        activity_log.UPDATE_SETTINGS,
        f"Updated settings: {', '.join(sorted(payload))}",
        actor_id, ip,
    )
    return len(rows)
