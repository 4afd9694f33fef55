"""Comment service — PMO comment threads on projects.

Every comment returned to callers is enriched with ``formatted_time``
(``YYYY-MM-DD HH:MM``, UTC) and the owning project's ``project_name`` and
``customer_name``.
"""
import logging
from datetime import datetime, timedelta, timezone

from pmo_dashboard.core.contracts import COMMENT
from pmo_dashboard.models.comment import Comment
from pmo_dashboard.services.data_access import DataAccess, Page, eq, gte, in_

logger = logging.getLogger(__name__)

RECENT_DAYS = 7


def format_time(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%d %H:%M")


def _project_lookup(da: DataAccess, project_ids) -> dict:
    ids = {pid for pid in project_ids if pid is not None}
    if not ids:
        return {}
    return {p.id: p for p in da.find("projects", [in_("id", ids)]).rows}


def enrich(comment: Comment, project=None) -> dict:
    d = comment.to_dict()
    d["formatted_time"] = format_time(comment.added_at)
    d["project_name"] = project.project_name if project else None
    d["customer_name"] = project.customer_name if project else None
    return d


def enrich_many(comments, da: DataAccess | None = None) -> list[dict]:
    da = da or DataAccess()
    projects = _project_lookup(da, (c.project_id for c in comments))
    return [enrich(c, projects.get(c.project_id)) for c in comments]


# ── Reads ────────────────────────────────────────────────────────────────────


def list_for_project(project_id: int) -> list[dict]:
    """Comments on one project, newest first. 404 when the project is absent."""
    da = DataAccess()
    project = da.find_one("projects", project_id)
    rows = da.find("pmo_comments", [eq("project_id", project_id)],
                   sort=[("added_at", True), ("id", True)]).rows
    return [enrich(c, project) for c in rows]


def history(limit: int, offset: int, project_id: int | None = None):
    """Global comment history, newest first. Returns ``(items, total)``."""
    da = DataAccess()
    filters = [eq("project_id", project_id)] if project_id is not None else []
    result = da.find("pmo_comments", filters, sort=[("added_at", True), ("id", True)],
                     page=Page(limit, offset))
    return enrich_many(result.rows, da), result.count


def stats() -> dict:
    da = DataAccess()
    since = datetime.now(timezone.utc) - timedelta(days=RECENT_DAYS)
    projects_with_comments = da.count_distinct("pmo_comments", "project_id")
    return {
        "total_comments": da.count("pmo_comments"),
        "projects_with_comments": projects_with_comments,
        "recent_comments": da.count("pmo_comments", [gte("added_at", since)]),
    }


def latest_by_project() -> dict[int, tuple[datetime | None, str, int]]:
    """``{project_id: (latest_added_at, latest_text, comment_count)}`` for the CSV export."""
    summary: dict[int, tuple[datetime | None, str, int]] = {}
    for c in DataAccess().find("pmo_comments", sort=[("added_at", False), ("id", False)]).rows:
        _, _, count = summary.get(c.project_id, (None, "", 0))
        # rows arrive oldest first, so the last one seen per project wins
        summary[c.project_id] = (c.added_at, c.comment_text, count + 1)
    return summary


# ── Writes ───────────────────────────────────────────────────────────────────


def create_comment(project_id: int, payload: dict) -> dict:
    data = COMMENT.validate(payload)
    da = DataAccess()
    project = da.find_one("projects", project_id)
    comment = da.insert("pmo_comments", {
        "project_id": project.id,
        "comment_text": data["comment_text"],
        "added_by": data["added_by"],
        "added_at": datetime.now(timezone.utc),
    })
    logger.info("Comment %s added to project %s", comment.id, project.id)
    return enrich(comment, project)


def update_comment(comment_id: int, payload: dict) -> dict:
    """Edit text/author only; ``project_id`` is fixed at creation."""
    data = COMMENT.validate(payload)
    da = DataAccess()
    da.find_one("pmo_comments", comment_id)
    data["updated_at"] = datetime.now(timezone.utc)
    comment = da.update("pmo_comments", comment_id, data)
    project = da.first("projects", [eq("id", comment.project_id)])
    return enrich(comment, project)


def delete_comment(comment_id: int) -> None:
    DataAccess().delete("pmo_comments", comment_id)
