"""
Admin Blueprint — dropdown options, users, settings and the activity log.

Dropdown options:
  GET    /api/v1/admin/dropdown-options             — any signed-in user (?type=, ?grouped=true)
  GET    /api/v1/admin/dropdown-options/<id>        — any signed-in user
  POST   /api/v1/admin/dropdown-options             — admin
  PUT    /api/v1/admin/dropdown-options/<id>        — admin
  DELETE /api/v1/admin/dropdown-options/<id>        — admin (409 while in use)

Users (admin):
  GET  /api/v1/admin/users
  GET  /api/v1/admin/users/<id>
  POST /api/v1/admin/users
  PUT  /api/v1/admin/users/<id>
  PUT  /api/v1/admin/users/<id>/toggle-status

Activity log & settings (admin):
  GET /api/v1/admin/activity-log?limit&offset
  GET /api/v1/admin/settings
  PUT /api/v1/admin/settings
"""

from flask import Blueprint, request

from pmo_dashboard.auth import current_identity, require_auth, require_role
from pmo_dashboard.services import activity_log, dropdown_service, settings_service, user_service
from pmo_dashboard.utils.errors import api_success
from pmo_dashboard.utils.helpers import client_ip, json_body, pagination_meta, parse_bool, parse_pagination

admin_bp = Blueprint("admin_bp", __name__, url_prefix="/api/v1/admin")


def _actor() -> dict:
    return {"actor_id": current_identity().id, "ip": client_ip()}


# ═════════════════════════════════════════════════════════════════════════
# Dropdown options
# ═════════════════════════════════════════════════════════════════════════


@admin_bp.route("/dropdown-options", methods=["GET"])
@require_auth
def list_dropdown_options():
    if parse_bool(request.args.get("grouped")):
        return api_success(dropdown_service.grouped_options())
    options = dropdown_service.list_options(
        request.args.get("type"),
        active_only=parse_bool(request.args.get("active")),
    )
    return api_success([o.to_dict() for o in options])


@admin_bp.route("/dropdown-options/<int:option_id>", methods=["GET"])
@require_auth
def get_dropdown_option(option_id):
    return api_success(dropdown_service.get_option(option_id).to_dict())


@admin_bp.route("/dropdown-options", methods=["POST"])
@require_role("admin")
def create_dropdown_option():
    option = dropdown_service.create_option(json_body(), **_actor())
    return api_success(option.to_dict(), status=201, message="Option created successfully")


@admin_bp.route("/dropdown-options/<int:option_id>", methods=["PUT"])
@require_role("admin")
def update_dropdown_option(option_id):
    option = dropdown_service.update_option(option_id, json_body(), **_actor())
    return api_success(option.to_dict(), message="Option updated successfully")


@admin_bp.route("/dropdown-options/<int:option_id>", methods=["DELETE"])
@require_role("admin")
def delete_dropdown_option(option_id):
    dropdown_service.delete_option(option_id, **_actor())
    return api_success(message="Option deleted successfully")


# ═════════════════════════════════════════════════════════════════════════
# Users
# ═════════════════════════════════════════════════════════════════════════


@admin_bp.route("/users", methods=["GET"])
@require_role("admin")
def list_users():
    return api_success([u.to_dict() for u in user_service.list_users()])


@admin_bp.route("/users/<int:user_id>", methods=["GET"])
@require_role("admin")
def get_user(user_id):
    return api_success(user_service.get_user(user_id).to_dict())


@admin_bp.route("/users", methods=["POST"])
@require_role("admin")
def create_user():
    user = user_service.create_user(json_body(), **_actor())
    return api_success(user.to_dict(), status=201, message="User created successfully")


@admin_bp.route("/users/<int:user_id>", methods=["PUT"])
@require_role("admin")
def update_user(user_id):
    user = user_service.update_user(user_id, json_body(), **_actor())
    return api_success(user.to_dict(), message="User updated successfully")


@admin_bp.route("/users/<int:user_id>/toggle-status", methods=["PUT"])
@require_role("admin")
def toggle_user_status(user_id):
    user = user_service.toggle_user_status(user_id, **_actor())
    state = "activated" if user.is_active else "deactivated"
    return api_success(user.to_dict(), message=f"User {state} successfully")


# ═════════════════════════════════════════════════════════════════════════
# Activity log
# ═════════════════════════════════════════════════════════════════════════


@admin_bp.route("/activity-log", methods=["GET"])
@require_role("admin")
def list_activity_log():
    limit, offset = parse_pagination(default_limit=100, max_limit=1000)
    result = activity_log.list_activity(limit, offset)
    return api_success(
        [e.to_dict() for e in result.rows],
        pagination=pagination_meta(result.count, limit, offset, len(result.rows)),
    )


# ═════════════════════════════════════════════════════════════════════════
# Settings
# ═════════════════════════════════════════════════════════════════════════


@admin_bp.route("/settings", methods=["GET"])
@require_role("admin")
def get_settings():
    return api_success(settings_service.get_settings_map())


@admin_bp.route("/settings", methods=["PUT"])
@require_role("admin")
def update_settings():
    written = settings_service.update_settings(json_body(), **_actor())
    if not written:
        return api_success(message="No settings provided")
    return api_success(settings_service.get_settings_map(), message="Settings updated successfully")
