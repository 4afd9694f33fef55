"""CSV exports of the project board and the comment history.

Every field is quoted and embedded quotes are doubled (``csv.QUOTE_ALL``),
so the files open cleanly in spreadsheet tools.
"""
import csv
import io
import logging

from pmo_dashboard.services import comment_service
from pmo_dashboard.services.data_access import DataAccess, eq

logger = logging.getLogger(__name__)

PROJECT_COLUMNS = [
    "Customer Name",
    "Project Name",
    "Account Manager",
    "Status",
    "Current Phase",
    "Priority",
    "End Month",
    "Current Status",
    "PMO Comments",
    "Latest Comment Time",
    "Comments Count",
    "Created",
    "Updated",
]

COMMENT_COLUMNS = ["Project", "Customer", "Comment", "Added By", "Timestamp"]


def _fmt(value) -> str:
    return comment_service.format_time(value) or ""


def _iso(value) -> str:
    return value.isoformat() if value else ""


def _write(columns: list[str], rows) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow(["" if v is None else v for v in row])
    return buf.getvalue()


def export_projects_csv(projects) -> str:
    """Board rows; the PMO Comments column carries the latest comment, falling
    back to the project's own ``pmo_comments`` when it has none."""
    latest = comment_service.latest_by_project()
    rows = []
    for p in projects:
        latest_at, latest_text, count = latest.get(p.id, (None, "", 0))
        rows.append([
            p.customer_name,
            p.project_name,
            p.account_manager,
            p.status,
            p.current_phase,
            p.priority,
            p.end_month,
            p.status2,
            latest_text or p.pmo_comments,
            _fmt(latest_at),
            count,
            _iso(p.created_at),
            _iso(p.updated_at),
        ])
    return _write(PROJECT_COLUMNS, rows)


def export_comments_csv(project_id: int | None = None) -> str:
    da = DataAccess()
    filters = [eq("project_id", project_id)] if project_id is not None else []
    comments = da.find("pmo_comments", filters, sort=[("added_at", True), ("id", True)]).rows
    enriched = comment_service.enrich_many(comments)
    return _write(COMMENT_COLUMNS, [
        [c["project_name"], c["customer_name"], c["comment_text"], c["added_by"], c["formatted_time"]]
        for c in enriched
    ])
