"""
Dropdown option admin tests.

Tests cover:
  - Create / update with (type, value) uniqueness
  - Closed type enumeration
  - In-use protection on delete
  - Grouped listing for the project forms
  - Activity log trail
"""

from pmo_dashboard.models.admin import ActivityLogEntry

BASE = "/api/v1/admin/dropdown-options"


def _create(client, headers, type_="statuses", value="Active", **extra):
    return client.post(BASE, json={"type": type_, "value": value, **extra}, headers=headers)


# ═══════════════════════════════════════════════════════════════
# CREATE / UPDATE
# ═══════════════════════════════════════════════════════════════

class TestDropdownWrites:
    def test_create(self, client, admin_headers):
        res = _create(client, admin_headers, description="Running projects")
        assert res.status_code == 201
        data = res.get_json()["data"]
        assert data["type"] == "statuses"
        assert data["value"] == "Active"
        assert data["is_active"] is True
        assert res.get_json()["message"] == "Option created successfully"

    def test_duplicate_type_value_is_409(self, client, admin_headers):
        assert _create(client, admin_headers).status_code == 201
        res = _create(client, admin_headers)
        assert res.status_code == 409
        assert res.get_json()["code"] == "ERR_CONFLICT_DUPLICATE"

    def test_same_value_in_other_type_is_allowed(self, client, admin_headers):
        assert _create(client, admin_headers, "statuses", "High").status_code == 201
        assert _create(client, admin_headers, "priorities", "High").status_code == 201

    def test_unknown_type_rejected(self, client, admin_headers):
        res = _create(client, admin_headers, "colours", "Red")
        assert res.status_code == 400
        assert res.get_json()["details"][0]["field"] == "type"

    def test_value_required(self, client, admin_headers):
        res = client.post(BASE, json={"type": "statuses"}, headers=admin_headers)
        assert res.status_code == 400
        assert res.get_json()["details"] == [{"field": "value", "reason": "is required"}]

    def test_manager_cannot_create(self, client, manager_headers):
        assert _create(client, manager_headers).status_code == 403

    def test_update(self, client, admin_headers):
        option = _create(client, admin_headers).get_json()["data"]
        res = client.put(
            f"{BASE}/{option['id']}",
            json={"type": "statuses", "value": "Active", "is_active": False},
            headers=admin_headers,
        )
        assert res.status_code == 200
        assert res.get_json()["data"]["is_active"] is False

    def test_update_into_duplicate_is_409(self, client, admin_headers):
        _create(client, admin_headers, value="Active")
        other = _create(client, admin_headers, value="Closed").get_json()["data"]
        res = client.put(
            f"{BASE}/{other['id']}", json={"type": "statuses", "value": "Active"}, headers=admin_headers,
        )
        assert res.status_code == 409

    def test_update_missing_is_404(self, client, admin_headers):
        res = client.put(f"{BASE}/999", json={"type": "statuses", "value": "X"}, headers=admin_headers)
        assert res.status_code == 404
        assert res.get_json()["error"] == "Dropdown option not found"


# ═══════════════════════════════════════════════════════════════
# DELETE
# ═══════════════════════════════════════════════════════════════

class TestDropdownDelete:
    def test_in_use_option_cannot_be_deleted(self, client, admin_headers, project):
        # the project fixture uses status "Active"
        option = _create(client, admin_headers, "statuses", "Active").get_json()["data"]
        res = client.delete(f"{BASE}/{option['id']}", headers=admin_headers)
        assert res.status_code == 409
        assert res.get_json()["code"] == "ERR_CONFLICT_IN_USE"
        assert client.get(f"{BASE}/{option['id']}", headers=admin_headers).status_code == 200

    def test_value_used_in_any_project_field_blocks_delete(self, client, admin_headers, project):
        # "Jane" is the project's account_manager, but the option is filed under phases
        option = _create(client, admin_headers, "phases", "Jane").get_json()["data"]
        assert client.delete(f"{BASE}/{option['id']}", headers=admin_headers).status_code == 409

    def test_unused_option_is_deleted(self, client, admin_headers, project):
        option = _create(client, admin_headers, "statuses", "Archived").get_json()["data"]
        res = client.delete(f"{BASE}/{option['id']}", headers=admin_headers)
        assert res.status_code == 200
        assert client.get(f"{BASE}/{option['id']}", headers=admin_headers).status_code == 404


# ═══════════════════════════════════════════════════════════════
# LISTING
# ═══════════════════════════════════════════════════════════════

class TestDropdownListing:
    def test_list_sorted_and_filtered_by_type(self, client, admin_headers, viewer_headers):
        _create(client, admin_headers, "statuses", "On Hold")
        _create(client, admin_headers, "statuses", "Active")
        _create(client, admin_headers, "priorities", "High")

        all_rows = client.get(BASE, headers=viewer_headers).get_json()["data"]
        assert [(o["type"], o["value"]) for o in all_rows] == [
            ("priorities", "High"), ("statuses", "Active"), ("statuses", "On Hold"),
        ]

        statuses = client.get(f"{BASE}?type=statuses", headers=viewer_headers).get_json()["data"]
        assert [o["value"] for o in statuses] == ["Active", "On Hold"]

    def test_list_rejects_unknown_type(self, client, viewer_headers):
        assert client.get(f"{BASE}?type=colours", headers=viewer_headers).status_code == 400

    def test_list_requires_auth(self, client):
        assert client.get(BASE).status_code == 401

    def test_grouped_has_every_category_and_skips_inactive(self, client, admin_headers):
        _create(client, admin_headers, "statuses", "Active")
        _create(client, admin_headers, "statuses", "Legacy", is_active=False)
        _create(client, admin_headers, "account_managers", "Jane")

        grouped = client.get(f"{BASE}?grouped=true", headers=admin_headers).get_json()["data"]
        assert set(grouped) == {"account_managers", "statuses", "phases", "priorities", "end_months"}
        assert grouped["statuses"] == ["Active"]
        assert grouped["account_managers"] == ["Jane"]
        assert grouped["phases"] == []


# ═══════════════════════════════════════════════════════════════
# ACTIVITY LOG
# ═══════════════════════════════════════════════════════════════

def test_mutations_are_logged(client, admin_user, admin_headers):
    option = _create(client, admin_headers, "statuses", "Active").get_json()["data"]
    client.put(f"{BASE}/{option['id']}", json={"type": "statuses", "value": "Live"}, headers=admin_headers)
    client.delete(f"{BASE}/{option['id']}", headers=admin_headers)

    entries = ActivityLogEntry.query.order_by(ActivityLogEntry.id).all()
    assert [e.action for e in entries] == [
        "CREATE_DROPDOWN_OPTION", "UPDATE_DROPDOWN_OPTION", "DELETE_DROPDOWN_OPTION",
    ]
    assert all(e.user_id == admin_user.id for e in entries)
    assert entries[0].details == "Created statuses option: Active"
    assert entries[2].details == "Deleted statuses option: Live"


def test_failed_create_is_not_logged(client, admin_headers):
    _create(client, admin_headers)
    _create(client, admin_headers)
    assert ActivityLogEntry.query.count() == 1
