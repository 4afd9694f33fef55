"""
Simplified Project Blueprint.

Endpoints:
    GET    /api/v1/simple-projects                 — list (project substring, month, status)
    GET    /api/v1/simple-projects/filters/values  — distinct statuses and months
    GET    /api/v1/simple-projects/<id>
    POST   /api/v1/simple-projects                 — manager+
    PUT    /api/v1/simple-projects/<id>            — manager+
    DELETE /api/v1/simple-projects/<id>            — manager+
"""

from flask import Blueprint, request

from pmo_dashboard.auth import require_auth, require_role
from pmo_dashboard.services import project_service
from pmo_dashboard.utils.errors import api_success
from pmo_dashboard.utils.helpers import json_body, pagination_meta, parse_pagination

simple_project_bp = Blueprint("simple_project_bp", __name__, url_prefix="/api/v1/simple-projects")


@simple_project_bp.route("", methods=["GET"])
@require_auth
def list_simple_projects():
    limit, offset = parse_pagination(default_limit=1000, max_limit=1000)
    result = project_service.list_simple_projects(request.args, limit, offset)
    return api_success(
        [p.to_dict() for p in result.rows],
        pagination=pagination_meta(result.count, limit, offset, len(result.rows)),
    )


@simple_project_bp.route("/filters/values", methods=["GET"])
@require_auth
def filter_values():
    return api_success(project_service.simple_project_filter_values())


@simple_project_bp.route("/<int:item_id>", methods=["GET"])
@require_auth
def get_simple_project(item_id):
    return api_success(project_service.get_simple_project(item_id).to_dict())


@simple_project_bp.route("", methods=["POST"])
@require_role("manager")
def create_simple_project():
    item = project_service.create_simple_project(json_body())
    return api_success(item.to_dict(), status=201, message="Project created successfully")


@simple_project_bp.route("/<int:item_id>", methods=["PUT"])
@require_role("manager")
def update_simple_project(item_id):
    item = project_service.update_simple_project(item_id, json_body())
    return api_success(item.to_dict(), message="Project updated successfully")


@simple_project_bp.route("/<int:item_id>", methods=["DELETE"])
@require_role("manager")
def delete_simple_project(item_id):
    project_service.delete_simple_project(item_id)
    return api_success(message="Project deleted successfully")
