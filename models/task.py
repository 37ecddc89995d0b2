# models/task.py

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from core.utils import parse_timestamp
from models.enums import TaskPriority, TaskStatus
from models.profile import AdminSummary, StaffSummary


class TaskCreate(BaseModel):
    """Admin assigns a task to an active staff member."""
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    assigned_to: str = Field(..., min_length=1, description="crm_staff id")
    priority: TaskPriority = TaskPriority.medium
    due_date: Optional[date] = None


class TaskUpdate(BaseModel):
    """
    Admin edit: reassign, reprioritize, reschedule.
    No status field: only the assignee moves a task.
    """
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None

    model_config = {"extra": "forbid"}


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskRead(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    assigned_to: str
    assigned_by: Optional[str] = None
    priority: TaskPriority = TaskPriority.medium
    status: TaskStatus = TaskStatus.pending
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Derived at read time, never stored
    is_overdue: bool = False

    # Joined display info
    assigned_staff: Optional[StaffSummary] = None
    assigning_admin: Optional[AdminSummary] = None

    # due_date may be stored as a bare date
    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due_date(cls, v):
        return parse_timestamp(v)


class TaskSummary(BaseModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    overdue: int = 0


class TaskList(BaseModel):
    tasks: list[TaskRead]
    summary: TaskSummary
