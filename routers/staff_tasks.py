# routers/staff_tasks.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.supabase_client import get_supabase_client
from dependencies.auth import AuthContext, require_staff
from models.task import TaskList, TaskRead, TaskStatusUpdate
from services import task_workflow


router = APIRouter(
    prefix="/staff/tasks",
    tags=["Staff Tasks"],
)


# -----------------------------------------------------
# GET /staff/tasks
# Only the caller's own tasks, soonest due first
# -----------------------------------------------------
@router.get("", response_model=TaskList, summary="My assigned tasks")
def my_tasks(
    status: Optional[str] = Query(None, description="pending | in_progress | completed"),
    ctx: AuthContext = Depends(require_staff),
):
    tasks = task_workflow.list_tasks(
        get_supabase_client(),
        ctx.identity_id,
        ctx.role,
        status=status,
    )
    return {"tasks": tasks, "summary": task_workflow.summarize(tasks)}


# -----------------------------------------------------
# PUT /staff/tasks/{task_id}
# Status only; 404 unless the task is assigned to the caller
# -----------------------------------------------------
@router.put("/{task_id}", response_model=TaskRead, summary="Update my task's status")
def update_status(task_id: str, payload: TaskStatusUpdate, ctx: AuthContext = Depends(require_staff)):
    return task_workflow.update_task_status(
        get_supabase_client(),
        ctx.identity_id,
        task_id,
        payload.status,
    )
