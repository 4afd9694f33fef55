"""
Comment Blueprint — PMO comment threads.

Endpoints:
    GET    /api/v1/comments/project/<project_id>  — comments on a project, newest first
    POST   /api/v1/comments/project/<project_id>  — add a comment (manager+, 404 if no project)
    PUT    /api/v1/comments/<comment_id>          — edit text/author (manager+)
    DELETE /api/v1/comments/<comment_id>          — delete (manager+)
    GET    /api/v1/comments/history               — all comments, paginated (?project_id=)
    GET    /api/v1/comments/stats                 — totals
    GET    /api/v1/comments/export.csv            — comment history export (?project_id=)
"""

from datetime import datetime, timezone

from flask import Blueprint, Response

from pmo_dashboard.auth import require_auth, require_role
from pmo_dashboard.services import comment_service, export_service
from pmo_dashboard.utils.errors import api_success
from pmo_dashboard.utils.helpers import json_body, pagination_meta, parse_int_param, parse_pagination

comment_bp = Blueprint("comment_bp", __name__, url_prefix="/api/v1/comments")


@comment_bp.route("/project/<int:project_id>", methods=["GET"])
@require_auth
def list_project_comments(project_id):
    return api_success(comment_service.list_for_project(project_id))


@comment_bp.route("/project/<int:project_id>", methods=["POST"])
@require_role("manager")
def add_comment(project_id):
    comment = comment_service.create_comment(project_id, json_body())
    return api_success(comment, status=201, message="Comment added successfully")


@comment_bp.route("/<int:comment_id>", methods=["PUT"])
@require_role("manager")
def update_comment(comment_id):
    comment = comment_service.update_comment(comment_id, json_body())
    return api_success(comment, message="Comment updated successfully")


@comment_bp.route("/<int:comment_id>", methods=["DELETE"])
@require_role("manager")
def delete_comment(comment_id):
    comment_service.delete_comment(comment_id)
    return api_success(message="Comment deleted successfully")


@comment_bp.route("/history", methods=["GET"])
@require_auth
def comment_history():
    limit, offset = parse_pagination(default_limit=100, max_limit=1000)
    project_id = parse_int_param("project_id")
    items, total = comment_service.history(limit, offset, project_id)
    return api_success(items, pagination=pagination_meta(total, limit, offset, len(items)))


@comment_bp.route("/stats", methods=["GET"])
@require_auth
def comment_stats():
    return api_success(comment_service.stats())


@comment_bp.route("/export.csv", methods=["GET"])
@require_auth
def export_csv():
    body = export_service.export_comments_csv(parse_int_param("project_id"))
    filename = f"PMO_Comments_{datetime.now(timezone.utc):%Y-%m-%d}.csv"
    return Response(
        body,
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
