"""Request body contracts for each resource kind."""

from pmo_dashboard.core.validation import Contract, Field
from pmo_dashboard.models.auth import ROLES
from pmo_dashboard.models.dropdown import DropdownType
from pmo_dashboard.utils.crypto import MAX_PASSWORD_BYTES

LOGIN = Contract("login", [
    Field("username", required=True, max_length=100),
    Field("password", required=True, max_length=256),
])

PROJECT = Contract("project", [
    Field("customer_name", max_length=255),
    Field("project_name", required=True, max_length=255),
    Field("account_manager", max_length=255),
    Field("status", max_length=100),
    Field("current_phase", max_length=255),
    Field("priority", max_length=50),
    Field("end_month", max_length=50),
    Field("status2", max_length=100),
    Field("pmo_comments"),
])

SIMPLE_PROJECT = Contract("simple project", [
    Field("project", required=True, max_length=255),
    Field("month", max_length=10),
    Field("status", max_length=100),
    Field("comments"),
])

DROPDOWN_OPTION = Contract("dropdown option", [
    Field("type", required=True, choices=DropdownType.values()),
    Field("value", required=True, max_length=255),
    Field("description", max_length=500),
    Field("is_active", "boolean"),
])

_USER_FIELDS = [
    Field("username", required=True, min_length=3, max_length=100),
    Field("email", "email", required=True, max_length=255),
    Field("role", required=True, choices=ROLES),
    Field("is_active", "boolean"),
]

USER_CREATE = Contract("user", _USER_FIELDS + [
    Field("password", required=True, min_length=6, max_bytes=MAX_PASSWORD_BYTES),
])

# Password may be left out on update; when present it is re-hashed.
USER_UPDATE = Contract("user", _USER_FIELDS + [
    Field("password", min_length=6, max_bytes=MAX_PASSWORD_BYTES),
])

COMMENT = Contract("comment", [
    Field("comment_text", required=True, min_length=1, max_length=1000),
    Field("added_by", required=True, min_length=1, max_length=100),
])
