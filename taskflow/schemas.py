"""
schemas.py — Declarative request schemas, one per entity.
Every enum/range rule for tasks and todos lives here; routes validate
against these and the test factories build their payloads from them.
"""

from datetime import datetime
from typing import Annotated, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

TaskStatus = Literal["backlog", "in-progress", "in-review", "done"]
TaskPriority = Literal["low", "medium", "high", "urgent"]
TodoPriority = Literal["low", "medium", "high"]
TodoCategory = Literal["personal", "work", "shopping", "health", "other"]
Period = Literal["7d", "30d", "90d", "1y"]
ProductivityType = Literal["tasks", "todos", "both"]

TASK_STATUSES: tuple[str, ...] = get_args(TaskStatus)
TASK_PRIORITIES: tuple[str, ...] = get_args(TaskPriority)
TODO_PRIORITIES: tuple[str, ...] = get_args(TodoPriority)
TODO_CATEGORIES: tuple[str, ...] = get_args(TodoCategory)

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, max_length=50)]
Hours = Annotated[float, Field(ge=0, le=1000)]


class _Schema(BaseModel):
    # camelCase on the wire, snake_case in Python; unknown keys
    # (completedAt, isArchived, ...) are dropped rather than written
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ── Tasks ─────────────────────────────────────────────────────────
class TaskCreate(_Schema):
    title: Title
    description: Optional[str] = Field(default=None, max_length=1000)
    status: TaskStatus = "backlog"
    priority: TaskPriority = "medium"
    tags: list[Tag] = Field(default_factory=list)
    due_date: Optional[datetime] = Field(default=None, alias="dueDate")
    estimated_hours: Optional[Hours] = Field(default=None, alias="estimatedHours")


class TaskUpdate(_Schema):
    title: Optional[Title] = None
    description: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    tags: Optional[list[Tag]] = None
    due_date: Optional[datetime] = Field(default=None, alias="dueDate")
    estimated_hours: Optional[Hours] = Field(default=None, alias="estimatedHours")
    actual_hours: Optional[Hours] = Field(default=None, alias="actualHours")


class TaskStatusUpdate(_Schema):
    status: TaskStatus
    position: Optional[int] = Field(default=None, ge=0)


class TaskMove(_Schema):
    status: TaskStatus
    order: int = Field(default=0, ge=0)


class CommentCreate(_Schema):
    text: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]


class BulkUpdateItem(_Schema):
    id: int
    status: TaskStatus
    order: int = Field(ge=0)


class BulkUpdate(_Schema):
    tasks: list[BulkUpdateItem] = Field(min_length=1)


# ── Todos ─────────────────────────────────────────────────────────
class TodoCreate(_Schema):
    title: Title
    description: Optional[str] = Field(default=None, max_length=500)
    priority: TodoPriority = "medium"
    category: TodoCategory = "personal"
    due_date: Optional[datetime] = Field(default=None, alias="dueDate")


class TodoUpdate(_Schema):
    title: Optional[Title] = None
    description: Optional[str] = Field(default=None, max_length=500)
    priority: Optional[TodoPriority] = None
    category: Optional[TodoCategory] = None
    due_date: Optional[datetime] = Field(default=None, alias="dueDate")


# ── Auth ──────────────────────────────────────────────────────────
class AuthRequest(_Schema):
    username: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=50)]
    password: Annotated[str, StringConstraints(min_length=6, max_length=128)]


class RegisterRequest(AuthRequest):
    name: Optional[str] = Field(default=None, max_length=100)
