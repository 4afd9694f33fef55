"""
Data Access Interface — uniform CRUD/query contract over named collections.

Controllers and services talk to storage only through ``DataAccess``; they
never touch SQLAlchemy query objects directly. Collections are registered by
table name and map onto the Flask-SQLAlchemy models.

Transaction policy: every mutating call commits on success and rolls back on
failure. ``IntegrityError`` surfaces as ``ConflictError`` (the database's
unique constraints are the final authority for duplicate checks); every other
``SQLAlchemyError`` surfaces as ``UpstreamUnavailableError`` with the cause
logged server-side only.

Filters are ``Filter`` tuples built with the helpers below::

    da.find("projects", [eq("status", "Active"), ilike("project_name", "alp")],
            sort=[("updated_at", True)], page=Page(limit=50, offset=0))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, NamedTuple

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from pmo_dashboard.core.exceptions import ConflictError, NotFoundError, UpstreamUnavailableError
from pmo_dashboard.models import db
from pmo_dashboard.models.admin import ActivityLogEntry, SystemSetting
from pmo_dashboard.models.auth import Session, User
from pmo_dashboard.models.comment import Comment
from pmo_dashboard.models.dropdown import DropdownOption
from pmo_dashboard.models.project import Project, SimpleProject

logger = logging.getLogger(__name__)

# ── Collection registry ──────────────────────────────────────────────────

COLLECTIONS: dict[str, type] = {
    "projects": Project,
    "simple_projects": SimpleProject,
    "dropdown_options": DropdownOption,
    "users": User,
    "pmo_comments": Comment,
    "admin_activity_log": ActivityLogEntry,
    "system_settings": SystemSetting,
    "sessions": Session,
}

_LABELS = {
    "projects": "Project",
    "simple_projects": "Simple project",
    "dropdown_options": "Dropdown option",
    "users": "User",
    "pmo_comments": "Comment",
    "admin_activity_log": "Activity log entry",
    "system_settings": "Setting",
    "sessions": "Session",
}


# ── Filter / sort / range types ──────────────────────────────────────────

class Filter(NamedTuple):
    op: str
    column: str | tuple[str, ...] | None
    value: Any = None


def eq(column: str, value) -> Filter:
    return Filter("eq", column, value)


def neq(column: str, value) -> Filter:
    return Filter("neq", column, value)


def ilike(column: str, value: str) -> Filter:
    """Case-insensitive substring match."""
    return Filter("ilike", column, value)


def not_null(column: str) -> Filter:
    """Column is neither NULL nor the empty string."""
    return Filter("not_null", column)


def gte(column: str, value) -> Filter:
    return Filter("gte", column, value)


def lt(column: str, value) -> Filter:
    return Filter("lt", column, value)


def in_(column: str, values: Iterable) -> Filter:
    return Filter("in", column, tuple(values))


def any_eq(columns: Iterable[str], value) -> Filter:
    """OR of equality: any of ``columns`` equals ``value``."""
    return Filter("any_eq", tuple(columns), value)


def or_of(*filters: Filter) -> Filter:
    """OR of arbitrary filters (e.g. username = x OR email = y)."""
    return Filter("or", None, tuple(filters))


@dataclass(frozen=True)
class Page:
    limit: int | None = None
    offset: int = 0


@dataclass
class FindResult:
    rows: list = field(default_factory=list)
    count: int = 0


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class DataAccess:
    """Thin storage facade bound to the Flask-SQLAlchemy session."""

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session or db.session

    # ── Internals ────────────────────────────────────────────────────────

    @staticmethod
    def model_for(collection: str):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    @staticmethod
    def _column(model, name: str):
        col = getattr(model, name, None)
        if col is None:
            raise ValueError(f"{model.__tablename__} has no column {name!r}")
        return col

    def _clause(self, model, flt: Filter):
        if flt.op == "or":
            return or_(*(self._clause(model, f) for f in flt.value))
        if flt.op == "any_eq":
            return or_(*(self._column(model, c) == flt.value for c in flt.column))

        col = self._column(model, flt.column)
        if flt.op == "eq":
            return col.is_(None) if flt.value is None else col == flt.value
        if flt.op == "neq":
            return col.is_not(None) if flt.value is None else col != flt.value
        if flt.op == "ilike":
            pattern = f"%{_escape_like(str(flt.value).lower())}%"
            return func.lower(col).like(pattern, escape="\\")
        if flt.op == "not_null":
            return and_(col.is_not(None), col != "")
        if flt.op == "gte":
            return col >= flt.value
        if flt.op == "lt":
            return col < flt.value
        if flt.op == "in":
            return col.in_(flt.value)
        raise ValueError(f"Unsupported filter op: {flt.op}")

    def _query(self, collection: str, filters: Iterable[Filter] | None):
        model = self.model_for(collection)
        query = self.session.query(model)
        for flt in filters or ():
            query = query.filter(self._clause(model, flt))
        return model, query

    def _commit(self, collection: str, action: str):
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.warning("Integrity error on %s %s: %s", action, collection, exc.orig)
            raise ConflictError(_LABELS.get(collection, collection)) from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Database error on %s %s", action, collection)
            raise UpstreamUnavailableError(cause=exc) from exc

    def _read(self, collection: str, fn):
        try:
            return fn()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Database error reading %s", collection)
            raise UpstreamUnavailableError(cause=exc) from exc

    # ── Public contract ──────────────────────────────────────────────────

    def find(
        self,
        collection: str,
        filters: Iterable[Filter] | None = None,
        sort: Iterable[tuple[str, bool]] | None = None,
        page: Page | None = None,
    ) -> FindResult:
        """Rows matching ``filters`` plus the unpaged total.

        ``sort`` is a list of ``(column, descending)`` pairs.
        """
        model, query = self._query(collection, filters)

        def run():
            total = query.order_by(None).count()
            q = query
            for name, descending in sort or ():
                col = self._column(model, name)
                q = q.order_by(col.desc() if descending else col.asc())
            if page is not None:
                if page.offset:
                    q = q.offset(page.offset)
                if page.limit is not None:
                    q = q.limit(page.limit)
            return FindResult(rows=q.all(), count=total)

        return self._read(collection, run)

    def find_one(self, collection: str, key, *, column: str = "id"):
        """Single row by key. Raises ``NotFoundError`` when absent."""
        row = self.first(collection, [eq(column, key)])
        if row is None:
            raise NotFoundError(_LABELS.get(collection, collection), key)
        return row

    def first(self, collection: str, filters: Iterable[Filter] | None = None):
        """First matching row or None."""
        _, query = self._query(collection, filters)
        return self._read(collection, query.first)

    def exists(self, collection: str, filters: Iterable[Filter]) -> bool:
        return self.first(collection, filters) is not None

    def count(self, collection: str, filters: Iterable[Filter] | None = None) -> int:
        _, query = self._query(collection, filters)
        return self._read(collection, query.count)

    def count_distinct(self, collection: str, column: str, filters: Iterable[Filter] | None = None) -> int:
        """Number of distinct non-NULL values of ``column`` among matching rows."""
        model, query = self._query(collection, filters)
        col = self._column(model, column)
        return self._read(
            collection,
            lambda: query.with_entities(func.count(func.distinct(col))).scalar() or 0,
        )

    def distinct(self, collection: str, column: str) -> list:
        """Sorted distinct values of ``column``, skipping NULL and ''."""
        model = self.model_for(collection)
        col = self._column(model, column)

        def run():
            rows = (
                self.session.query(col)
                .filter(col.is_not(None), col != "")
                .distinct()
                .order_by(col.asc())
                .all()
            )
            return [r[0] for r in rows]

        return self._read(collection, run)

    def insert(self, collection: str, row: dict):
        model = self.model_for(collection)
        instance = model(**row)
        self.session.add(instance)
        self._commit(collection, "insert")
        return instance

    def update(self, collection: str, key, patch: dict, *, column: str = "id"):
        """Apply ``patch`` to the row identified by ``key`` and return it."""
        instance = self.find_one(collection, key, column=column)
        for name, value in patch.items():
            setattr(instance, name, value)
        self._commit(collection, "update")
        return instance

    def delete(self, collection: str, key, *, column: str = "id") -> None:
        instance = self.find_one(collection, key, column=column)
        self.session.delete(instance)
        self._commit(collection, "delete")

    def delete_where(self, collection: str, filters: Iterable[Filter]) -> int:
        """Bulk delete every row matching ``filters``; returns the row count."""
        _, query = self._query(collection, filters)
        try:
            deleted = query.delete(synchronize_session=False)
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Database error on bulk delete %s", collection)
            raise UpstreamUnavailableError(cause=exc) from exc
        self._commit(collection, "bulk delete")
        return deleted

    def upsert(self, collection: str, rows: list[dict], conflict_key: str) -> None:
        """Insert-or-replace each row keyed on ``conflict_key``, in one transaction."""
        model = self.model_for(collection)
        col = self._column(model, conflict_key)
        try:
            for row in rows:
                existing = self.session.query(model).filter(col == row[conflict_key]).first()
                if existing is None:
                    self.session.add(model(**row))
                else:
                    for name, value in row.items():
                        setattr(existing, name, value)
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Database error on upsert %s", collection)
            raise UpstreamUnavailableError(cause=exc) from exc
        self._commit(collection, "upsert")

    def ping(self) -> bool:
        """True when the storage answers a trivial query."""
        try:
            self.session.execute(db.text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Database ping failed: %s", exc)
            return False
