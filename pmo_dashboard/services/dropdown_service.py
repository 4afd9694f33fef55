"""Dropdown option service — admin-managed select values for the project forms.

Rules:
- (type, value) is unique; create and update check it first (update
  excludes the option itself) and the unique constraint backs it up.
- An option whose value is referenced by any project's account_manager,
  status, priority, current_phase or end_month cannot be deleted.
- Successful mutations are written to the activity log.
"""
import logging
from datetime import datetime, timezone

from pmo_dashboard.core.contracts import DROPDOWN_OPTION
from pmo_dashboard.core.exceptions import ConflictError, InUseError, ValidationError
from pmo_dashboard.models.dropdown import DROPDOWN_PROJECT_FIELDS, DropdownType
from pmo_dashboard.services import activity_log
from pmo_dashboard.services.data_access import DataAccess, any_eq, eq, neq

logger = logging.getLogger(__name__)

RESOURCE = "Dropdown option"


def _parse_type(raw: str | None) -> DropdownType | None:
    if raw in (None, ""):
        return None
    try:
        return DropdownType(raw)
    except ValueError:
        raise ValidationError(
            "Invalid dropdown type",
            details=[{"field": "type", "reason": f"must be one of {DropdownType.values()}"}],
        ) from None


def list_options(type_filter: str | None = None, *, active_only: bool = False) -> list:
    filters = []
    option_type = _parse_type(type_filter)
    if option_type is not None:
        filters.append(eq("type", option_type))
    if active_only:
        filters.append(eq("is_active", True))
    return DataAccess().find("dropdown_options", filters, sort=[("type", False), ("value", False)]).rows


def grouped_options() -> dict:
    """Active option values keyed by category, every category present."""
    grouped = {t.value: [] for t in DropdownType}
    for option in list_options(active_only=True):
        grouped[option.type.value].append(option.value)
    return grouped


def get_option(option_id: int):
    return DataAccess().find_one("dropdown_options", option_id)


def _check_unique(da: DataAccess, option_type: DropdownType, value: str, exclude_id: int | None = None):
    filters = [eq("type", option_type), eq("value", value)]
    if exclude_id is not None:
        filters.append(neq("id", exclude_id))
    if da.exists("dropdown_options", filters):
        raise ConflictError(RESOURCE, "type and value", f"{option_type.value}:{value}",
                            message="Option with this type and value already exists")


def create_option(payload: dict, *, actor_id: int | None, ip: str | None):
    data = DROPDOWN_OPTION.validate(payload)
    data["type"] = DropdownType(data["type"])
    data.setdefault("is_active", True)
    if data["is_active"] is None:
        data["is_active"] = True

    da = DataAccess()
    _check_unique(da, data["type"], data["value"])
    option = da.insert("dropdown_options", data)

    activity_log.log_action(
        activity_log.CREATE_DROPDOWN_OPTION,
        f"Created {option.type.value} option: {option.value}",
        actor_id, ip,
    )
    return option


def update_option(option_id: int, payload: dict, *, actor_id: int | None, ip: str | None):
    data = DROPDOWN_OPTION.validate(payload)
    data["type"] = DropdownType(data["type"])
    if data.get("is_active") is None:
        data.pop("is_active", None)

    da = DataAccess()
    da.find_one("dropdown_options", option_id)
    _check_unique(da, data["type"], data["value"], exclude_id=option_id)
    data["updated_at"] = datetime.now(timezone.utc)
    option = da.update("dropdown_options", option_id, data)

    activity_log.log_action(
        activity_log.UPDATE_DROPDOWN_OPTION,
        f"Updated {option.type.value} option: {option.value}",
        actor_id, ip,
    )
    return option


def delete_option(option_id: int, *, actor_id: int | None, ip: str | None) -> None:
    da = DataAccess()
    option = da.find_one("dropdown_options", option_id)

    if da.exists("projects", [any_eq(DROPDOWN_PROJECT_FIELDS.values(), option.value)]):
        raise InUseError(RESOURCE, DROPDOWN_PROJECT_FIELDS[option.type], option.value)

    label = f"{option.type.value} option: {option.value}"
    da.delete("dropdown_options", option_id)
    activity_log.log_action(activity_log.DELETE_DROPDOWN_OPTION, f"Deleted {label}", actor_id, ip)
