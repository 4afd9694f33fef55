"""Simplified project tracker API tests."""

BASE = "/api/v1/simple-projects"


def _create(client, headers, **fields):
    res = client.post(BASE, json={"project": "Tracker", **fields}, headers=headers)
    assert res.status_code == 201, res.get_json()
    return res.get_json()["data"]


def test_create_get_update_delete(client, manager_headers):
    item = _create(client, manager_headers, project="Rollout", month="Oct'26", status="Active")
    assert item["project"] == "Rollout"
    assert item["comments"] is None

    res = client.put(
        f"{BASE}/{item['id']}",
        json={"project": "Rollout", "month": "Nov'26", "status": "Delayed", "comments": "vendor slip"},
        headers=manager_headers,
    )
    assert res.status_code == 200
    assert res.get_json()["data"]["status"] == "Delayed"
    assert res.get_json()["data"]["comments"] == "vendor slip"

    assert client.delete(f"{BASE}/{item['id']}", headers=manager_headers).status_code == 200
    assert client.get(f"{BASE}/{item['id']}", headers=manager_headers).status_code == 404


def test_project_is_required(client, manager_headers):
    res = client.post(BASE, json={"month": "Oct'26"}, headers=manager_headers)
    assert res.status_code == 400
    assert res.get_json()["details"] == [{"field": "project", "reason": "is required"}]


def test_month_length_limit(client, manager_headers):
    res = client.post(BASE, json={"project": "A", "month": "October 2026"}, headers=manager_headers)
    assert res.status_code == 400
    assert res.get_json()["details"][0]["field"] == "month"


def test_viewer_is_read_only(client, manager_headers, viewer_headers):
    item = _create(client, manager_headers)
    assert client.get(f"{BASE}/{item['id']}", headers=viewer_headers).status_code == 200
    assert client.post(BASE, json={"project": "X"}, headers=viewer_headers).status_code == 403
    assert client.delete(f"{BASE}/{item['id']}", headers=viewer_headers).status_code == 403


def test_filters_and_values(client, manager_headers):
    _create(client, manager_headers, project="Portal Rollout", month="Oct'26", status="Active")
    _create(client, manager_headers, project="Billing", month="Oct'26", status="Completed")
    _create(client, manager_headers, project="Portal Upgrade", month="Nov'26", status="Active")

    def names(query):
        data = client.get(f"{BASE}?{query}", headers=manager_headers).get_json()["data"]
        return sorted(p["project"] for p in data)

    assert names("month=Oct'26") == ["Billing", "Portal Rollout"]
    assert names("status=Active") == ["Portal Rollout", "Portal Upgrade"]
    assert names("project=portal&month=Nov'26") == ["Portal Upgrade"]

    values = client.get(f"{BASE}/filters/values", headers=manager_headers).get_json()["data"]
    assert values == {"statuses": ["Active", "Completed"], "months": ["Nov'26", "Oct'26"]}


def test_simple_projects_are_independent_of_board(client, manager_headers):
    _create(client, manager_headers)
    board = client.get("/api/v1/projects", headers=manager_headers).get_json()
    assert board["data"] == []
    assert board["pagination"]["total"] == 0
