"""Reporting service — read-only aggregates over the project board.

All figures are computed from rows fetched through ``DataAccess``; there are
no materialised views. Distributions keep a bucket for empty values (key
``None``) so that bucket counts always add up to the total row count.

Percentages are ``count / total * 100`` rounded half-up to one decimal.
"""
import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from pmo_dashboard.services.data_access import DataAccess, Page, eq

logger = logging.getLogger(__name__)

# Board vocabulary the summary counters key on
STATUS_ACTIVE = "Active"
STATUS2_IN_DEVELOPMENT = "In Development"
STATUS2_DONE = "Done"
PRIORITY_HIGH = "High"

SIMPLE_STATUS_ACTIVE = "Active"
SIMPLE_STATUS_DELAYED = "Delayed"
SIMPLE_STATUS_COMPLETED = "Completed"

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def percentage(count: int, total: int) -> float:
    if not total:
        return 0.0
    value = Decimal(count * 100) / Decimal(total)
    return float(value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def end_month_key(moment: datetime | None = None) -> str:
    """Board month key for ``moment``, e.g. ``Oct'26``."""
    moment = moment or datetime.now(timezone.utc)
    return f"{_MONTHS[moment.month - 1]}'{moment.year % 100:02d}"


def _bucket(value):
    return value if value not in (None, "") else None


def _sort_key(value):
    # Empty bucket sorts last
    return (value is None, value or "")


def _all_projects() -> list:
    return DataAccess().find("projects").rows


def _distribution(rows, field: str) -> list[dict]:
    total = len(rows)
    counts: dict = {}
    for row in rows:
        key = _bucket(getattr(row, field))
        counts[key] = counts.get(key, 0) + 1
    ordered = sorted(counts.items(), key=lambda kv: (-kv[1], _sort_key(kv[0])))
    return [
        {field: key, "count": count, "percentage": percentage(count, total)}
        for key, count in ordered
    ]


# ═════════════════════════════════════════════════════════════════════════
# Reports
# ═════════════════════════════════════════════════════════════════════════


def summary() -> dict:
    da = DataAccess()
    total = da.count("projects")
    active = da.count("projects", [eq("status", STATUS_ACTIVE)])
    in_dev = da.count("projects", [eq("status2", STATUS2_IN_DEVELOPMENT)])
    done = da.count("projects", [eq("status2", STATUS2_DONE)])
    high = da.count("projects", [eq("priority", PRIORITY_HIGH)])
    this_month = da.count("projects", [eq("end_month", end_month_key())])
    latest = da.find("projects", sort=[("updated_at", True)], page=Page(limit=1)).rows
    return {
        "totalProjects": total,
        "activeProjects": active,
        "inDevelopmentProjects": in_dev,
        "completedProjects": done,
        "highPriorityProjects": high,
        "thisMonthProjects": this_month,
        "lastUpdated": latest[0].updated_at.isoformat() if latest else None,
    }


def monthly_distribution() -> list[dict]:
    buckets: dict = {}
    for p in _all_projects():
        key = _bucket(p.end_month)
        entry = buckets.setdefault(key, {
            "end_month": key, "project_count": 0, "active_count": 0, "development_count": 0,
        })
        entry["project_count"] += 1
        if p.status == STATUS_ACTIVE:
            entry["active_count"] += 1
        if p.status2 == STATUS2_IN_DEVELOPMENT:
            entry["development_count"] += 1
    return [buckets[k] for k in sorted(buckets, key=_sort_key)]


def status_distribution() -> dict:
    rows = _all_projects()
    return {
        "total": len(rows),
        "status": _distribution(rows, "status"),
        "status2": _distribution(rows, "status2"),
    }


def priority_distribution() -> list[dict]:
    return _distribution(_all_projects(), "priority")


def phase_distribution() -> list[dict]:
    return _distribution(_all_projects(), "current_phase")


def recent_activity(limit: int = 10) -> list[dict]:
    rows = DataAccess().find(
        "projects", sort=[("updated_at", True), ("id", True)], page=Page(limit=limit),
    ).rows
    return [
        {
            "id": p.id,
            "project_name": p.project_name,
            "customer_name": p.customer_name,
            "status": p.status,
            "status2": p.status2,
            "pmo_comments": p.pmo_comments,
            "updated_at": p.updated_at.isoformat() if p.updated_at else None,
        }
        for p in rows
    ]


def account_managers() -> list[dict]:
    buckets: dict = {}
    for p in _all_projects():
        key = _bucket(p.account_manager)
        entry = buckets.setdefault(key, {
            "account_manager": key,
            "total_projects": 0,
            "active_projects": 0,
            "high_priority_projects": 0,
            "in_development_projects": 0,
        })
        entry["total_projects"] += 1
        if p.status == STATUS_ACTIVE:
            entry["active_projects"] += 1
        if p.priority == PRIORITY_HIGH:
            entry["high_priority_projects"] += 1
        if p.status2 == STATUS2_IN_DEVELOPMENT:
            entry["in_development_projects"] += 1
    return sorted(buckets.values(), key=lambda e: (-e["total_projects"], _sort_key(e["account_manager"])))


def by_end_month() -> list[dict]:
    buckets: dict = {}
    for p in _all_projects():
        key = _bucket(p.end_month)
        entry = buckets.setdefault(key, {
            "end_month": key,
            "total_projects": 0,
            "active_projects": 0,
            "high_priority_projects": 0,
            "in_development_projects": 0,
            "completed_projects": 0,
        })
        entry["total_projects"] += 1
        if p.status == STATUS_ACTIVE:
            entry["active_projects"] += 1
        if p.priority == PRIORITY_HIGH:
            entry["high_priority_projects"] += 1
        if p.status2 == STATUS2_IN_DEVELOPMENT:
            entry["in_development_projects"] += 1
        if p.status2 == STATUS2_DONE:
            entry["completed_projects"] += 1
    return [buckets[k] for k in sorted(buckets, key=_sort_key)]


def simple_summary() -> dict:
    da = DataAccess()
    return {
        "totalProjects": da.count("simple_projects"),
        "activeProjects": da.count("simple_projects", [eq("status", SIMPLE_STATUS_ACTIVE)]),
        "delayedProjects": da.count("simple_projects", [eq("status", SIMPLE_STATUS_DELAYED)]),
        "completedProjects": da.count("simple_projects", [eq("status", SIMPLE_STATUS_COMPLETED)]),
    }
