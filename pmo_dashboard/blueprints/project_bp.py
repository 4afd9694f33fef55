"""
Project Blueprint — the PMO project board.

Endpoints:
    GET    /api/v1/projects                 — filtered, paginated list
    GET    /api/v1/projects/filters/values  — distinct values for the filter selects
    GET    /api/v1/projects/export.csv      — board export (same filters as the list)
    GET    /api/v1/projects/<id>            — single project
    POST   /api/v1/projects                 — create (manager+)
    PUT    /api/v1/projects/<id>            — update (manager+)
    DELETE /api/v1/projects/<id>            — delete (manager+)

List query params:
    status, status2, priority, end_month           exact match
    customer_name, project_name, account_manager   case-insensitive substring
    q                                               free-text search
    limit (default 1000, max 1000), offset
"""

from datetime import datetime, timezone

from flask import Blueprint, Response, request

from pmo_dashboard.auth import require_auth, require_role
from pmo_dashboard.services import export_service, project_service
from pmo_dashboard.utils.errors import api_success
from pmo_dashboard.utils.helpers import json_body, pagination_meta, parse_pagination

project_bp = Blueprint("project_bp", __name__, url_prefix="/api/v1/projects")

DEFAULT_LIMIT = 1000
MAX_LIMIT = 1000


@project_bp.route("", methods=["GET"])
@require_auth
def list_projects():
    limit, offset = parse_pagination(default_limit=DEFAULT_LIMIT, max_limit=MAX_LIMIT)
    result = project_service.list_projects(request.args, limit, offset)
    return api_success(
        [p.to_dict() for p in result.rows],
        pagination=pagination_meta(result.count, limit, offset, len(result.rows)),
    )


@project_bp.route("/filters/values", methods=["GET"])
@require_auth
def filter_values():
    return api_success(project_service.project_filter_values())


@project_bp.route("/export.csv", methods=["GET"])
@require_auth
def export_csv():
    result = project_service.list_projects(request.args, None, 0)
    body = export_service.export_projects_csv(result.rows)
    filename = f"PMO_Projects_{datetime.now(timezone.utc):%Y-%m-%d}.csv"
    return Response(
        body,
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@project_bp.route("/<int:project_id>", methods=["GET"])
@require_auth
def get_project(project_id):
    return api_success(project_service.get_project(project_id).to_dict())


@project_bp.route("", methods=["POST"])
@require_role("manager")
def create_project():
    project = project_service.create_project(json_body())
    return api_success(project.to_dict(), status=201, message="Project created successfully")


@project_bp.route("/<int:project_id>", methods=["PUT"])
@require_role("manager")
def update_project(project_id):
    project = project_service.update_project(project_id, json_body())
    return api_success(project.to_dict(), message="Project updated successfully")


@project_bp.route("/<int:project_id>", methods=["DELETE"])
@require_role("manager")
def delete_project(project_id):
    project_service.delete_project(project_id)
    return api_success(message="Project deleted successfully")
