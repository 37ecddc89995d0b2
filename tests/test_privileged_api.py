# tests/test_privileged_api.py

"""
Tests for the privileged API: every request re-verifies the caller's
role from the bearer token.
"""

from fastapi.testclient import TestClient

from tests.utils.helpers import ADMIN_ID, INACTIVE_STAFF_ID, OTHER_STAFF_ID, STAFF_ID, bearer


def seed_task(db, **overrides):
    task = {
        "id": "task-1",
        "title": "Call back lead",
        "assigned_to": STAFF_ID,
        "assigned_by": ADMIN_ID,
        "priority": "medium",
        "status": "pending",
        "due_date": "2020-01-01",
        "completed_at": None,
        "created_at": "2019-12-01T00:00:00+00:00",
    }
    task.update(overrides)
    db.seed("staff_tasks", [task])
    return task


# ============================================================
# Authentication / authorization
# ============================================================
def test_missing_token_is_401(client: TestClient, fake_db):
    response = client.get("/admin/tasks")

    assert response.status_code == 401
    assert response.json() == {"error": "Missing authorization header"}


def test_invalid_token_is_401(client: TestClient, fake_db):
    response = client.get("/admin/tasks", headers=bearer("forged"))

    assert response.status_code == 401
    assert "error" in response.json()


def test_staff_cannot_call_admin_endpoints(client: TestClient, fake_db, staff_headers):
    assert client.get("/admin/tasks", headers=staff_headers).status_code == 403
    assert client.get("/admin/leads", headers=staff_headers).status_code == 403
    assert client.post("/admin/properties/p-1/approve", headers=staff_headers).status_code == 403


def test_admin_cannot_use_staff_endpoints(client: TestClient, fake_db, admin_headers):
    assert client.get("/staff/tasks", headers=admin_headers).status_code == 403


def test_inactive_staff_is_forbidden(client: TestClient, fake_db):
    response = client.get("/staff/tasks", headers=bearer("inactive-staff-token"))
    assert response.status_code == 403


def test_role_lookup_failure_is_forbidden(client: TestClient, fake_db, admin_headers):
    fake_db.fail("admins")

    response = client.get("/admin/tasks", headers=admin_headers)

    assert response.status_code == 403


def test_client_supplied_role_metadata_is_ignored(client: TestClient, fake_db):
    fake_db.auth.add_user("sneaky-token", "user-sneaky", "sneaky@example.com", {"role": "admin"})

    response = client.get("/admin/excluded-ids", headers=bearer("sneaky-token"))

    assert response.status_code == 403


# ============================================================
# Admin task management
# ============================================================
def test_admin_creates_task(client: TestClient, fake_db, admin_headers):
    response = client.post(
        "/admin/tasks",
        headers=admin_headers,
        json={"title": "Site visit", "assigned_to": STAFF_ID, "due_date": "2030-01-01"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["priority"] == "medium"
    assert data["assigned_by"] == ADMIN_ID
    assert data["is_overdue"] is False


def test_task_for_inactive_staff_is_rejected(client: TestClient, fake_db, admin_headers):
    response = client.post(
        "/admin/tasks",
        headers=admin_headers,
        json={"title": "Site visit", "assigned_to": INACTIVE_STAFF_ID},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid staff member"}
    assert fake_db.rows("staff_tasks") == []


def test_admin_update_cannot_change_status(client: TestClient, fake_db, admin_headers):
    seed_task(fake_db)

    response = client.put("/admin/tasks/task-1", headers=admin_headers, json={"status": "completed"})

    assert response.status_code == 400
    assert fake_db.rows("staff_tasks")[0]["status"] == "pending"


def test_admin_reassigns_task(client: TestClient, fake_db, admin_headers):
    seed_task(fake_db)

    response = client.put(
        "/admin/tasks/task-1",
        headers=admin_headers,
        json={"assigned_to": OTHER_STAFF_ID, "priority": "high"},
    )

    assert response.status_code == 200
    assert response.json()["assigned_to"] == OTHER_STAFF_ID


def test_admin_lists_tasks_with_summary(client: TestClient, fake_db, admin_headers):
    seed_task(fake_db)
    seed_task(fake_db, id="task-2", assigned_to=OTHER_STAFF_ID, status="completed", completed_at="2020-01-02T00:00:00+00:00")

    response = client.get(f"/admin/tasks?staff_id={STAFF_ID}", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert [t["id"] for t in data["tasks"]] == ["task-1"]
    assert data["summary"]["overdue"] == 1


def test_admin_deletes_task(client: TestClient, fake_db, admin_headers):
    seed_task(fake_db)

    assert client.delete("/admin/tasks/task-1", headers=admin_headers).status_code == 200
    assert client.delete("/admin/tasks/task-1", headers=admin_headers).status_code == 404


def test_admin_lists_active_staff(client: TestClient, fake_db, admin_headers):
    response = client.get("/admin/staff", headers=admin_headers)

    assert response.status_code == 200
    assert {s["id"] for s in response.json()} == {STAFF_ID, OTHER_STAFF_ID}


def test_admin_deactivates_and_reactivates_staff(client: TestClient, fake_db, admin_headers, staff_headers):
    response = client.patch(f"/admin/staff/{STAFF_ID}/active", headers=admin_headers, json={"is_active": False})

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert client.get("/staff/tasks", headers=staff_headers).status_code == 403
    assert STAFF_ID not in {s["id"] for s in client.get("/admin/staff", headers=admin_headers).json()}

    response = client.patch(f"/admin/staff/{STAFF_ID}/active", headers=admin_headers, json={"is_active": True})

    assert response.status_code == 200
    assert client.get("/staff/tasks", headers=staff_headers).status_code == 200


def test_toggling_unknown_staff_is_404(client: TestClient, fake_db, admin_headers):
    response = client.patch("/admin/staff/nobody/active", headers=admin_headers, json={"is_active": True})

    assert response.status_code == 404
    assert response.json() == {"error": "Staff member not found"}


def test_staff_cannot_toggle_activation(client: TestClient, fake_db, staff_headers):
    response = client.patch(f"/admin/staff/{OTHER_STAFF_ID}/active", headers=staff_headers, json={"is_active": False})

    assert response.status_code == 403
    assert next(s for s in fake_db.rows("crm_staff") if s["id"] == OTHER_STAFF_ID)["is_active"] is True


# ============================================================
# Staff task endpoints
# ============================================================
def test_staff_sees_only_own_tasks(client: TestClient, fake_db, staff_headers):
    seed_task(fake_db)
    seed_task(fake_db, id="task-2", assigned_to=OTHER_STAFF_ID)

    response = client.get("/staff/tasks", headers=staff_headers)

    assert response.status_code == 200
    assert [t["id"] for t in response.json()["tasks"]] == ["task-1"]


def test_staff_completes_overdue_task(client: TestClient, fake_db, staff_headers):
    seed_task(fake_db, status="in_progress")

    response = client.put("/staff/tasks/task-1", headers=staff_headers, json={"status": "completed"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert data["completed_at"] is not None
    assert data["is_overdue"] is False


def test_non_assignee_status_update_is_404_and_row_unchanged(client: TestClient, fake_db):
    original = seed_task(fake_db)

    response = client.put(
        "/staff/tasks/task-1",
        headers=bearer("other-staff-token"),
        json={"status": "completed"},
    )

    assert response.status_code == 404
    assert fake_db.rows("staff_tasks")[0] == original


def test_staff_status_must_be_valid(client: TestClient, fake_db, staff_headers):
    seed_task(fake_db)

    response = client.put("/staff/tasks/task-1", headers=staff_headers, json={"status": "done"})

    assert response.status_code == 400


# ============================================================
# Leads / exclusion
# ============================================================
def test_excluded_ids_use_client_keys(client: TestClient, fake_db, admin_headers):
    response = client.get("/admin/excluded-ids", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["adminIds"] == [ADMIN_ID]
    assert set(data["staffIds"]) == {STAFF_ID, OTHER_STAFF_ID, INACTIVE_STAFF_ID}


def test_leads_exclude_internal_accounts(client: TestClient, fake_db, admin_headers):
    fake_db.seed("user_profiles", [{"id": STAFF_ID, "name": "Ravi", "email": "ravi@example.com", "phone": "9000000002"}])

    response = client.get("/admin/leads", headers=admin_headers)

    assert response.status_code == 200
    ids = {lead["id"] for lead in response.json()["leads"]}
    assert STAFF_ID not in ids
    assert response.json()["total"] == len(ids)


def test_leads_fail_closed_when_exclusion_fetch_fails(client: TestClient, fake_db, admin_headers):
    fake_db.fail("crm_staff")

    response = client.get("/admin/leads", headers=admin_headers)

    assert response.status_code == 503
    assert response.json() == {"error": "Failed to load exclusion list"}
