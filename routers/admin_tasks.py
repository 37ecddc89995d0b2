# routers/admin_tasks.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.supabase_client import get_supabase_client
from dependencies.auth import AuthContext, require_admin
from models.task import TaskCreate, TaskList, TaskRead, TaskUpdate
from services import task_workflow


router = APIRouter(
    prefix="/admin/tasks",
    tags=["Admin Tasks"],
)


@router.get("", response_model=TaskList, summary="All staff tasks")
def list_tasks(
    staff_id: Optional[str] = Query(None, description="Filter by assignee"),
    status: Optional[str] = Query(None, description="pending | in_progress | completed"),
    ctx: AuthContext = Depends(require_admin),
):
    tasks = task_workflow.list_tasks(
        get_supabase_client(),
        ctx.identity_id,
        ctx.role,
        assigned_to=staff_id,
        status=status,
    )
    return {"tasks": tasks, "summary": task_workflow.summarize(tasks)}


@router.post("", response_model=TaskRead, status_code=201, summary="Assign a task to staff")
def create_task(payload: TaskCreate, ctx: AuthContext = Depends(require_admin)):
    return task_workflow.create_task(
        get_supabase_client(),
        ctx.identity_id,
        title=payload.title,
        assigned_to=payload.assigned_to,
        priority=payload.priority,
        due_date=payload.due_date,
        description=payload.description,
    )


@router.put("/{task_id}", response_model=TaskRead, summary="Edit a task (not its status)")
def update_task(task_id: str, payload: TaskUpdate, ctx: AuthContext = Depends(require_admin)):
    """
    Reassign, reprioritize, reschedule or reword. A status field is
    rejected; only the assignee moves a task through its workflow.
    """
    changes = payload.model_dump(exclude_unset=True, mode="json")
    return task_workflow.update_task(get_supabase_client(), task_id, changes)


@router.delete("/{task_id}", summary="Delete a task")
def delete_task(task_id: str, ctx: AuthContext = Depends(require_admin)):
    task_workflow.delete_task(get_supabase_client(), task_id)
    return {"success": True}
