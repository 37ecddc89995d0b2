# services/task_workflow.py

"""
Staff task workflow.

    pending ──► in_progress ──► completed
       └────────────────────────────┘

Only the assignee moves a task between statuses. completed_at is set
exactly when status is completed. Overdue is derived at read time.
"""

from datetime import datetime
from typing import Iterable, Optional

from supabase import Client

from core.errors import InvalidAssignee, NotFoundError, ValidationError, handle_supabase_error
from core.logging_config import logger
from core.supabase_helpers import fetch_one, safe_delete, safe_insert, safe_update
from core.utils import parse_timestamp, utc_now
from models.enums import Role, TaskPriority, TaskStatus
from services.role_directory import is_active_staff


TABLE = "staff_tasks"
# Task row with the assignee and the assigning admin embedded
TASK_SELECT = (
    "*, "
    "assigned_staff:crm_staff!assigned_to(id, name, email), "
    "assigning_admin:admins!assigned_by(id, name, email)"
)


# -----------------------------------------------------
# Pure rules
# -----------------------------------------------------
def parse_status(value) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        raise ValidationError("Invalid status value") from None


def parse_priority(value) -> TaskPriority:
    try:
        return TaskPriority(value)
    except ValueError:
        raise ValidationError("Invalid priority value") from None


def transition(status, now: Optional[datetime] = None) -> dict:
    """
    Column values for moving a task to `status`: completing stamps
    completed_at, any other status clears it.
    """
    status = parse_status(status)
    completed_at = (now or utc_now()).isoformat() if status == TaskStatus.completed else None
    return {"status": status.value, "completed_at": completed_at}


def is_overdue(task: dict, now: Optional[datetime] = None) -> bool:
    due = parse_timestamp(task.get("due_date"))
    if due is None or task.get("status") == TaskStatus.completed.value:
        return False
    return due < (now or utc_now())


def with_overdue(task: dict, now: Optional[datetime] = None) -> dict:
    return {**task, "is_overdue": is_overdue(task, now)}


def summarize(tasks: Iterable[dict], now: Optional[datetime] = None) -> dict:
    now = now or utc_now()
    summary = {"total": 0, "pending": 0, "in_progress": 0, "completed": 0, "overdue": 0}
    for task in tasks:
        summary["total"] += 1
        status = task.get("status")
        if status in summary:
            summary[status] += 1
        if is_overdue(task, now):
            summary["overdue"] += 1
    return summary


# -----------------------------------------------------
# Reads
# -----------------------------------------------------
def list_tasks(
    client: Client,
    caller_id: str,
    caller_role: Role,
    *,
    assigned_to: Optional[str] = None,
    status: Optional[str] = None,
    now: Optional[datetime] = None,
) -> list[dict]:
    """
    Admins see every task and may filter by assignee. Staff see only
    their own tasks, whatever assignee filter they pass.
    """
    query = client.table(TABLE).select(TASK_SELECT)

    if caller_role == Role.staff:
        query = query.eq("assigned_to", caller_id)
        query = query.order("due_date", desc=False, nullsfirst=False).order("created_at", desc=True)
    elif caller_role == Role.admin:
        if assigned_to:
            query = query.eq("assigned_to", assigned_to)
        query = query.order("created_at", desc=True)
    else:
        raise ValidationError("Tasks are only available to admins and staff")

    if status:
        query = query.eq("status", parse_status(status).value)

    try:
        result = query.execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load tasks") from e

    return [with_overdue(task, now) for task in result.data or []]


def get_task(client: Client, task_id: str) -> dict:
    task = fetch_one(client, TABLE, {"id": task_id})
    if not task:
        raise NotFoundError("Task not found")
    return task


# -----------------------------------------------------
# Admin writes
# -----------------------------------------------------
def _require_active_staff(client: Client, staff_id: str) -> None:
    if not staff_id or not is_active_staff(client, staff_id):
        raise InvalidAssignee()


def create_task(
    client: Client,
    admin_id: str,
    *,
    title: str,
    assigned_to: str,
    priority=TaskPriority.medium,
    due_date=None,
    description: Optional[str] = None,
) -> dict:
    if not title or not title.strip():
        raise ValidationError("Title and assigned_to are required")

    _require_active_staff(client, assigned_to)

    created = safe_insert(client, TABLE, {
        "title": title,
        "description": description or None,
        "assigned_to": assigned_to,
        "assigned_by": admin_id,
        "priority": parse_priority(priority or TaskPriority.medium).value,
        "status": TaskStatus.pending.value,
        "due_date": due_date,
        "completed_at": None,
    })
    logger.info(f"Admin {admin_id} assigned task {created and created.get('id')} to {assigned_to}")
    return with_overdue(created)


def update_task(client: Client, task_id: str, changes: dict) -> dict:
    """
    Admin edit: title, description, assignee, priority, due date.
    Status changes are not accepted on this path.
    """
    if "status" in changes or "completed_at" in changes:
        raise ValidationError("Task status can only be changed by the assigned staff member")

    allowed = {"title", "description", "assigned_to", "priority", "due_date"}
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(f"Unsupported fields: {', '.join(sorted(unknown))}")

    data = dict(changes)
    if "title" in data and not (data["title"] or "").strip():
        raise ValidationError("Title cannot be empty")
    if "priority" in data:
        data["priority"] = parse_priority(data["priority"]).value
    if "assigned_to" in data:
        _require_active_staff(client, data["assigned_to"])

    if not data:
        return with_overdue(get_task(client, task_id))

    updated = safe_update(client, TABLE, {"id": task_id}, data)
    if not updated:
        raise NotFoundError("Task not found")

    logger.info(f"Task {task_id} updated: {', '.join(sorted(data))}")
    return with_overdue(updated)


def delete_task(client: Client, task_id: str) -> None:
    if not safe_delete(client, TABLE, {"id": task_id}):
        raise NotFoundError("Task not found")
    logger.info(f"Task {task_id} deleted")


# -----------------------------------------------------
# Assignee write
# -----------------------------------------------------
def update_task_status(client: Client, staff_id: str, task_id: str, status, now: Optional[datetime] = None) -> dict:
    """
    Move one of the caller's own tasks to `status`.

    A single UPDATE conditioned on both id and assigned_to: if the task was
    reassigned in the meantime nothing matches, and the caller gets the
    same NotFound as for a task that never existed.
    """
    fields = transition(status, now)

    updated = safe_update(
        client,
        TABLE,
        {"id": task_id, "assigned_to": staff_id},
        fields,
    )
    if not updated:
        raise NotFoundError("Task not found or not assigned to you")

    logger.info(f"Staff {staff_id} moved task {task_id} to {fields['status']}")
    return with_overdue(updated, now)
