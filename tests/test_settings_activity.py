"""System settings and activity log tests."""

from pmo_dashboard.models.admin import ActivityLogEntry, SystemSetting
from pmo_dashboard.services import activity_log
from pmo_dashboard.services.settings_service import encode_value

SETTINGS = "/api/v1/admin/settings"
ACTIVITY = "/api/v1/admin/activity-log"


# ═══════════════════════════════════════════════════════════════
# SETTINGS
# ═══════════════════════════════════════════════════════════════

def test_encode_value():
    assert encode_value(True) == "true"
    assert encode_value(False) == "false"
    assert encode_value(5) == "5"
    assert encode_value({"b": 1, "a": 2}) == '{"a": 2, "b": 1}'
    assert encode_value(None) is None


def test_settings_upsert(client, admin_headers):
    res = client.put(
        SETTINGS, json={"site_name": "PMO", "maintenance_mode": True, "page_size": 50},
        headers=admin_headers,
    )
    assert res.status_code == 200
    assert res.get_json()["data"] == {"maintenance_mode": "true", "page_size": "50", "site_name": "PMO"}

    client.put(SETTINGS, json={"maintenance_mode": False}, headers=admin_headers)
    data = client.get(SETTINGS, headers=admin_headers).get_json()["data"]
    assert data["maintenance_mode"] == "false"
    assert data["site_name"] == "PMO"
    assert SystemSetting.query.count() == 3


def test_empty_settings_payload_is_a_noop(client, admin_headers):
    res = client.put(SETTINGS, json={}, headers=admin_headers)
    assert res.status_code == 200
    assert res.get_json()["message"] == "No settings provided"
    assert SystemSetting.query.count() == 0
    assert ActivityLogEntry.query.count() == 0


def test_blank_setting_key_rejected(client, admin_headers):
    res = client.put(SETTINGS, json={" ": "x"}, headers=admin_headers)
    assert res.status_code == 400


def test_settings_are_admin_only(client, manager_headers):
    assert client.get(SETTINGS, headers=manager_headers).status_code == 403
    assert client.put(SETTINGS, json={"a": 1}, headers=manager_headers).status_code == 403


# ═══════════════════════════════════════════════════════════════
# ACTIVITY LOG
# ═══════════════════════════════════════════════════════════════

def test_activity_log_newest_first_and_paginated(client, admin_user, admin_headers):
    for key in ("a", "b", "c"):
        client.put(SETTINGS, json={key: 1}, headers=admin_headers)

    body = client.get(f"{ACTIVITY}?limit=2", headers=admin_headers).get_json()
    assert [e["details"] for e in body["data"]] == ["Updated settings: c", "Updated settings: b"]
    assert body["pagination"] == {"total": 3, "limit": 2, "offset": 0, "hasMore": True}
    entry = body["data"][0]
    assert entry["action"] == "UPDATE_SETTINGS"
    assert entry["user_id"] == admin_user.id
    assert entry["ip_address"] == "127.0.0.1"


def test_activity_log_default_limit(client, admin_headers):
    body = client.get(ACTIVITY, headers=admin_headers).get_json()
    assert body["data"] == []
    assert body["pagination"]["limit"] == 100


def test_log_action_reports_dropped_write(monkeypatch):
    def boom(**kwargs):
        raise RuntimeError("audit store down")

    monkeypatch.setattr(activity_log, "ActivityLogEntry", boom)
    assert activity_log.log_action("X", "details", None, None) is False


def test_failed_log_write_does_not_fail_the_operation(client, admin_headers, monkeypatch):
    def boom(**kwargs):
        raise RuntimeError("audit store down")

    monkeypatch.setattr(activity_log, "ActivityLogEntry", boom)
    res = client.post(
        "/api/v1/admin/dropdown-options", json={"type": "statuses", "value": "Active"},
        headers=admin_headers,
    )
    assert res.status_code == 201
    assert client.get("/api/v1/admin/dropdown-options", headers=admin_headers).get_json()["data"][0]["value"] == "Active"
