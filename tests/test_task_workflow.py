# tests/test_task_workflow.py

"""
Tests for the staff task workflow engine.
"""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from core.utils import parse_timestamp

from core.errors import InvalidAssignee, NotFoundError, ValidationError
from models.enums import Role, TaskStatus
from models.task import TaskRead
from services import task_workflow
from tests.utils.helpers import ADMIN_ID, INACTIVE_STAFF_ID, OTHER_STAFF_ID, STAFF_ID


NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def seed_task(db, **overrides):
    task = {
        "id": "task-1",
        "title": "Call back lead",
        "description": None,
        "assigned_to": STAFF_ID,
        "assigned_by": ADMIN_ID,
        "priority": "medium",
        "status": "pending",
        "due_date": "2024-06-10",
        "completed_at": None,
        "created_at": "2024-06-01T09:00:00+00:00",
    }
    task.update(overrides)
    db.seed("staff_tasks", [task])
    return task


def stored(db, task_id="task-1"):
    return next(t for t in db.rows("staff_tasks") if t["id"] == task_id)


# ============================================================
# Transitions
# ============================================================
@pytest.mark.parametrize("status", ["pending", "in_progress"])
def test_non_completed_transitions_clear_completed_at(status):
    assert task_workflow.transition(status, NOW) == {"status": status, "completed_at": None}


def test_completing_stamps_completed_at():
    fields = task_workflow.transition(TaskStatus.completed, NOW)
    assert fields == {"status": "completed", "completed_at": NOW.isoformat()}


def test_unknown_status_is_rejected():
    with pytest.raises(ValidationError):
        task_workflow.transition("done", NOW)


# ============================================================
# Overdue
# ============================================================
def test_past_due_open_task_is_overdue():
    assert task_workflow.is_overdue({"due_date": "2024-06-10", "status": "in_progress"}, NOW)


def test_completed_task_is_never_overdue():
    assert not task_workflow.is_overdue({"due_date": "2024-06-10", "status": "completed"}, NOW)


def test_date_only_due_date_is_midnight_utc():
    task = {"due_date": "2024-06-15", "status": "pending"}
    assert task_workflow.is_overdue(task, NOW)
    assert not task_workflow.is_overdue(task, datetime(2024, 6, 14, 23, 59, tzinfo=timezone.utc))


@pytest.mark.parametrize("raw, micro", [
    ("2024-06-10T08:30:00.5+00:00", 500000),
    ("2024-06-10T08:30:00.12345+00:00", 123450),
    ("2024-06-10T08:30:00.1234567Z", 123456),
])
def test_timestamps_with_any_fraction_precision_parse(raw, micro):
    parsed = parse_timestamp(raw)
    assert parsed == datetime(2024, 6, 10, 8, 30, 0, micro, tzinfo=timezone.utc)


def test_task_without_due_date_is_not_overdue():
    assert not task_workflow.is_overdue({"due_date": None, "status": "pending"}, NOW)


def test_summarize_counts_statuses_and_overdue():
    tasks = [
        {"status": "pending", "due_date": "2024-06-01"},
        {"status": "in_progress", "due_date": "2024-07-01"},
        {"status": "completed", "due_date": "2024-06-01"},
        {"status": "pending", "due_date": None},
    ]

    assert task_workflow.summarize(tasks, NOW) == {
        "total": 4,
        "pending": 2,
        "in_progress": 1,
        "completed": 1,
        "overdue": 1,
    }


# ============================================================
# Assignee-only status updates
# ============================================================
def test_assignee_completes_overdue_task(fake_db):
    seed_task(fake_db, status="in_progress")

    task = task_workflow.update_task_status(fake_db, STAFF_ID, "task-1", "completed", NOW)

    assert task["status"] == "completed"
    assert task["completed_at"] == NOW.isoformat()
    assert task["is_overdue"] is False
    assert stored(fake_db)["completed_at"] == NOW.isoformat()


def test_reopening_clears_completed_at(fake_db):
    seed_task(fake_db, status="completed", completed_at="2024-06-11T10:00:00+00:00")

    task = task_workflow.update_task_status(fake_db, STAFF_ID, "task-1", "in_progress", NOW)

    assert task["status"] == "in_progress"
    assert task["completed_at"] is None
    assert task["is_overdue"] is True


def test_non_assignee_gets_not_found_and_row_is_untouched(fake_db):
    original = seed_task(fake_db)

    with pytest.raises(NotFoundError):
        task_workflow.update_task_status(fake_db, OTHER_STAFF_ID, "task-1", "completed", NOW)

    assert stored(fake_db) == original


def test_status_update_is_a_single_conditional_update(fake_db):
    seed_task(fake_db)
    fake_db.calls.clear()

    task_workflow.update_task_status(fake_db, STAFF_ID, "task-1", "in_progress", NOW)

    assert fake_db.calls == [("staff_tasks", "update")]


def test_missing_task_is_not_found(fake_db):
    with pytest.raises(NotFoundError):
        task_workflow.update_task_status(fake_db, STAFF_ID, "nope", "completed", NOW)


# ============================================================
# Admin writes
# ============================================================
def test_create_task_for_active_staff(fake_db):
    task = task_workflow.create_task(fake_db, ADMIN_ID, title="Site visit", assigned_to=STAFF_ID)

    assert task["status"] == "pending"
    assert task["priority"] == "medium"
    assert task["assigned_by"] == ADMIN_ID
    assert task["completed_at"] is None


def test_create_task_for_inactive_staff_is_invalid_assignee(fake_db):
    with pytest.raises(InvalidAssignee):
        task_workflow.create_task(fake_db, ADMIN_ID, title="Site visit", assigned_to=INACTIVE_STAFF_ID)

    assert fake_db.rows("staff_tasks") == []


def test_create_task_for_unknown_staff_is_invalid_assignee(fake_db):
    with pytest.raises(InvalidAssignee):
        task_workflow.create_task(fake_db, ADMIN_ID, title="Site visit", assigned_to="nobody")


def test_create_task_rejects_unknown_priority(fake_db):
    with pytest.raises(ValidationError):
        task_workflow.create_task(fake_db, ADMIN_ID, title="Site visit", assigned_to=STAFF_ID, priority="urgent")


def test_admin_update_refuses_status(fake_db):
    seed_task(fake_db)

    with pytest.raises(ValidationError):
        task_workflow.update_task(fake_db, "task-1", {"status": "completed"})

    assert stored(fake_db)["status"] == "pending"


def test_admin_reassign_validates_new_assignee(fake_db):
    seed_task(fake_db)

    with pytest.raises(InvalidAssignee):
        task_workflow.update_task(fake_db, "task-1", {"assigned_to": INACTIVE_STAFF_ID})

    task = task_workflow.update_task(fake_db, "task-1", {"assigned_to": OTHER_STAFF_ID, "priority": "high"})
    assert task["assigned_to"] == OTHER_STAFF_ID
    assert task["priority"] == "high"


def test_reassigned_task_is_out_of_reach_for_previous_assignee(fake_db):
    seed_task(fake_db)
    task_workflow.update_task(fake_db, "task-1", {"assigned_to": OTHER_STAFF_ID})

    with pytest.raises(NotFoundError):
        task_workflow.update_task_status(fake_db, STAFF_ID, "task-1", "completed", NOW)


def test_delete_task(fake_db):
    seed_task(fake_db)

    task_workflow.delete_task(fake_db, "task-1")

    assert fake_db.rows("staff_tasks") == []
    with pytest.raises(NotFoundError):
        task_workflow.delete_task(fake_db, "task-1")


# ============================================================
# Listing
# ============================================================
def test_staff_list_is_scoped_and_ordered_by_due_date(fake_db):
    seed_task(fake_db, id="t-late", due_date="2024-07-01")
    seed_task(fake_db, id="t-none", due_date=None)
    seed_task(fake_db, id="t-soon", due_date="2024-06-01")
    seed_task(fake_db, id="t-other", assigned_to=OTHER_STAFF_ID)

    tasks = task_workflow.list_tasks(fake_db, STAFF_ID, Role.staff, assigned_to=OTHER_STAFF_ID, now=NOW)

    assert [t["id"] for t in tasks] == ["t-soon", "t-late", "t-none"]
    assert [t["is_overdue"] for t in tasks] == [True, False, False]


def test_admin_list_filters_by_assignee_newest_first(fake_db):
    seed_task(fake_db, id="t-old", created_at="2024-06-01T00:00:00+00:00")
    seed_task(fake_db, id="t-new", created_at="2024-06-05T00:00:00+00:00")
    seed_task(fake_db, id="t-other", assigned_to=OTHER_STAFF_ID)

    tasks = task_workflow.list_tasks(fake_db, ADMIN_ID, Role.admin, assigned_to=STAFF_ID, now=NOW)
    assert [t["id"] for t in tasks] == ["t-new", "t-old"]

    everything = task_workflow.list_tasks(fake_db, ADMIN_ID, Role.admin, now=NOW)
    assert len(everything) == 3


def test_list_filters_by_status(fake_db):
    seed_task(fake_db, id="t-1", status="pending")
    seed_task(fake_db, id="t-2", status="completed")

    tasks = task_workflow.list_tasks(fake_db, STAFF_ID, Role.staff, status="completed", now=NOW)

    assert [t["id"] for t in tasks] == ["t-2"]


def test_task_reads_embed_assignee_and_assigning_admin():
    client = Mock()
    query = client.table.return_value.select.return_value
    query.order.return_value.execute.return_value.data = [{
        "id": "task-1",
        "title": "Call back lead",
        "assigned_to": STAFF_ID,
        "assigned_by": ADMIN_ID,
        "status": "pending",
        "assigned_staff": {"id": STAFF_ID, "name": "Ravi", "email": "ravi@example.com"},
        "assigning_admin": {"id": ADMIN_ID, "name": "Asha Admin", "email": "admin@example.com"},
    }]

    tasks = task_workflow.list_tasks(client, ADMIN_ID, Role.admin, now=NOW)

    client.table.return_value.select.assert_called_once_with(task_workflow.TASK_SELECT)
    assert "assigning_admin:admins!assigned_by(id, name, email)" in task_workflow.TASK_SELECT
    assert TaskRead(**tasks[0]).assigning_admin.name == "Asha Admin"
