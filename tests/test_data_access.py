"""DataAccess contract tests against the SQLite test database."""

import pytest

from pmo_dashboard.core.exceptions import ConflictError, NotFoundError
from pmo_dashboard.services.data_access import (
    DataAccess,
    Page,
    any_eq,
    eq,
    ilike,
    in_,
    neq,
    not_null,
    or_of,
)


@pytest.fixture()
def da():
    access = DataAccess()
    for name, customer, status, manager in (
        ("Alpha", "Acme", "Active", "Jane"),
        ("Beta", "100% Foods", "Active", ""),
        ("Gamma", "Initech", "Closed", None),
    ):
        access.insert("projects", {
            "project_name": name, "customer_name": customer, "status": status, "account_manager": manager,
        })
    return access


def _names(result):
    return sorted(p.project_name for p in result.rows)


def test_find_with_sort_and_page(da):
    result = da.find("projects", sort=[("project_name", True)], page=Page(limit=2, offset=1))
    assert [p.project_name for p in result.rows] == ["Beta", "Alpha"]
    assert result.count == 3


def test_filters(da):
    assert _names(da.find("projects", [eq("status", "Active")])) == ["Alpha", "Beta"]
    assert _names(da.find("projects", [neq("status", "Active")])) == ["Gamma"]
    assert _names(da.find("projects", [ilike("customer_name", "ACME")])) == ["Alpha"]
    assert _names(da.find("projects", [not_null("account_manager")])) == ["Alpha"]
    assert _names(da.find("projects", [in_("project_name", ["Alpha", "Gamma"])])) == ["Alpha", "Gamma"]
    assert _names(da.find("projects", [any_eq(["status", "customer_name"], "Initech")])) == ["Gamma"]
    assert _names(da.find("projects", [
        or_of(eq("project_name", "Alpha"), eq("status", "Closed")),
    ])) == ["Alpha", "Gamma"]


def test_eq_none_matches_null(da):
    assert _names(da.find("projects", [eq("account_manager", None)])) == ["Gamma"]


def test_ilike_escapes_wildcards(da):
    assert _names(da.find("projects", [ilike("customer_name", "100%")])) == ["Beta"]
    assert _names(da.find("projects", [ilike("customer_name", "%")])) == ["Beta"]
    assert _names(da.find("projects", [ilike("customer_name", "_")])) == []


def test_find_one_and_first(da):
    alpha = da.first("projects", [eq("project_name", "Alpha")])
    assert da.find_one("projects", alpha.id).project_name == "Alpha"
    assert da.first("projects", [eq("project_name", "Nope")]) is None
    with pytest.raises(NotFoundError) as exc:
        da.find_one("projects", 999)
    assert exc.value.message == "Project not found"


def test_count_distinct_and_distinct(da):
    assert da.count("projects", [eq("status", "Active")]) == 2
    assert da.count_distinct("projects", "status") == 2
    assert da.distinct("projects", "account_manager") == ["Jane"]
    assert da.exists("projects", [eq("project_name", "Beta")])


def test_update_and_delete(da):
    alpha = da.first("projects", [eq("project_name", "Alpha")])
    updated = da.update("projects", alpha.id, {"status": "On Hold"})
    assert updated.status == "On Hold"
    da.delete("projects", alpha.id)
    assert da.count("projects") == 2
    with pytest.raises(NotFoundError):
        da.delete("projects", alpha.id)


def test_unique_violation_becomes_conflict():
    access = DataAccess()
    row = {"username": "bob", "email": "bob@example.com", "password_hash": "x", "role": "viewer"}
    access.insert("users", row)
    with pytest.raises(ConflictError):
        access.insert("users", {**row, "email": "other@example.com"})
    # session is usable after the rollback
    assert access.count("users") == 1


def test_upsert_by_key():
    access = DataAccess()
    access.upsert("system_settings", [{"setting_key": "a", "setting_value": "1"}], "setting_key")
    access.upsert("system_settings", [
        {"setting_key": "a", "setting_value": "2"},
        {"setting_key": "b", "setting_value": "3"},
    ], "setting_key")
    rows = access.find("system_settings", sort=[("setting_key", False)]).rows
    assert [(r.setting_key, r.setting_value) for r in rows] == [("a", "2"), ("b", "3")]


def test_unknown_collection_and_column():
    access = DataAccess()
    with pytest.raises(ValueError):
        access.find("nope")
    with pytest.raises(ValueError):
        access.find("projects", [eq("nope", 1)])


def test_ping():
    assert DataAccess().ping() is True
