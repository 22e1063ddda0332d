# src/taskboard/web/schemas.py

"""Request/response bodies for the REST API.

Request models are deliberately loose (mostly optional / Any): the task
controller owns validation so REST and in-process callers get the same
messages.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..tasks.task_models import Task, TaskPage, TaskStatus


class RegisterRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    message: str
    token: str


class MessageResponse(BaseModel):
    message: str


class TaskWriteRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[str] = None


class TaskStatusRequest(BaseModel):
    status: Any = None


class ReorderRequest(BaseModel):
    ordered_ids: Any = Field(default=None, alias="orderedIds")
    page: Optional[int] = None
    limit: Optional[int] = None


class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    due_date: Optional[datetime] = None
    order: int
    created_at: datetime

    @classmethod
    def from_task(cls, task: Task) -> "TaskOut":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            status=task.status,
            due_date=task.due_date,
            order=task.order,
            created_at=task.created_at,
        )


class TaskPageOut(BaseModel):
    tasks: list[TaskOut]
    total_pages: int = Field(serialization_alias="totalPages")
    current_page: int = Field(serialization_alias="currentPage")

    @classmethod
    def from_page(cls, page: TaskPage) -> "TaskPageOut":
        return cls(
            tasks=[TaskOut.from_task(t) for t in page.tasks],
            total_pages=page.total_pages,
            current_page=page.current_page,
        )
