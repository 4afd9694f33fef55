"""Project service layer — business logic for the PMO project board.

Transaction policy: public functions commit through ``DataAccess``.

Provides:
- Project list with equality filters, substring search and free-text search
- Project CRUD (payloads validated against the PROJECT contract first)
- Distinct filter values for the dashboard selects
- Simplified project CRUD, filters and filter values
"""
import logging
from datetime import datetime, timezone

from pmo_dashboard.core.contracts import PROJECT, SIMPLE_PROJECT
from pmo_dashboard.services.data_access import DataAccess, Page, eq, ilike, or_of

logger = logging.getLogger(__name__)

# ── Filter definitions ───────────────────────────────────────────────────

PROJECT_EQ_FILTERS = ("status", "status2", "priority", "end_month")
PROJECT_SUBSTRING_FILTERS = ("customer_name", "project_name", "account_manager")
PROJECT_SEARCH_FIELDS = ("customer_name", "project_name", "account_manager", "current_phase", "pmo_comments")
PROJECT_DEFAULT_SORT = [("updated_at", True), ("id", True)]

SIMPLE_EQ_FILTERS = ("month", "status")
SIMPLE_SUBSTRING_FILTERS = ("project",)


def _build_filters(args, eq_fields, substring_fields, search_fields=()):
    filters = []
    for name in eq_fields:
        value = args.get(name)
        if value:
            filters.append(eq(name, value))
    for name in substring_fields:
        value = args.get(name)
        if value:
            filters.append(ilike(name, value))
    q = (args.get("q") or "").strip()
    if q and search_fields:
        filters.append(or_of(*(ilike(name, q) for name in search_fields)))
    return filters


# ═════════════════════════════════════════════════════════════════════════
# Projects
# ═════════════════════════════════════════════════════════════════════════


def list_projects(args, limit: int, offset: int):
    """Filtered page of projects, most recently updated first."""
    filters = _build_filters(args, PROJECT_EQ_FILTERS, PROJECT_SUBSTRING_FILTERS, PROJECT_SEARCH_FIELDS)
    return DataAccess().find("projects", filters, sort=PROJECT_DEFAULT_SORT, page=Page(limit, offset))


def get_project(project_id: int):
    return DataAccess().find_one("projects", project_id)


def create_project(payload: dict):
    data = PROJECT.validate(payload)
    project = DataAccess().insert("projects", data)
    logger.info("Project created id=%s", project.id)
    return project


def update_project(project_id: int, payload: dict):
    """Replace the editable fields and always refresh ``updated_at``."""
    data = PROJECT.validate(payload)
    data["updated_at"] = datetime.now(timezone.utc)
    return DataAccess().update("projects", project_id, data)


def delete_project(project_id: int) -> None:
    """Hard delete; the project's comments go with it (FK cascade)."""
    da = DataAccess()
    da.find_one("projects", project_id)
    da.delete("projects", project_id)
    logger.info("Project deleted id=%s", project_id)


def project_filter_values() -> dict:
    da = DataAccess()
    return {
        "statuses": da.distinct("projects", "status"),
        "status2s": da.distinct("projects", "status2"),
        "priorities": da.distinct("projects", "priority"),
        "endMonths": da.distinct("projects", "end_month"),
        "accountManagers": da.distinct("projects", "account_manager"),
    }


# ═════════════════════════════════════════════════════════════════════════
# Simplified projects
# ═════════════════════════════════════════════════════════════════════════


def list_simple_projects(args, limit: int, offset: int):
    filters = _build_filters(args, SIMPLE_EQ_FILTERS, SIMPLE_SUBSTRING_FILTERS)
    return DataAccess().find(
        "simple_projects", filters,
        sort=[("updated_at", True), ("id", True)],
        page=Page(limit, offset),
    )


def get_simple_project(item_id: int):
    return DataAccess().find_one("simple_projects", item_id)


def create_simple_project(payload: dict):
    data = SIMPLE_PROJECT.validate(payload)
    return DataAccess().insert("simple_projects", data)


def update_simple_project(item_id: int, payload: dict):
    data = SIMPLE_PROJECT.validate(payload)
    data["updated_at"] = datetime.now(timezone.utc)
    return DataAccess().update("simple_projects", item_id, data)


def delete_simple_project(item_id: int) -> None:
    DataAccess().delete("simple_projects", item_id)


def simple_project_filter_values() -> dict:
    da = DataAccess()
    return {
        "statuses": da.distinct("simple_projects", "status"),
        "months": da.distinct("simple_projects", "month"),
    }
