# src/taskboard/web/routes_tasks.py

"""Task endpoints (all scoped to the bearer token's user)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..core.state import AppState
from ..errors import ValidationError
from .deps import get_state, require_user_id
from .schemas import (
    MessageResponse,
    ReorderRequest,
    TaskOut,
    TaskPageOut,
    TaskStatusRequest,
    TaskWriteRequest,
)

router = APIRouter()


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskWriteRequest,
    user_id: int = Depends(require_user_id),
    state: AppState = Depends(get_state),
) -> TaskOut:
    task = await state.tasks.create(user_id, payload.title, payload.description, payload.due_date)
    return TaskOut.from_task(task)


@router.get("", response_model=TaskPageOut)
async def list_tasks(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    sort_by: Optional[str] = Query(default=None, alias="sortBy"),
    page: int = Query(default=1),
    limit: Optional[int] = Query(default=None),
    search: Optional[str] = Query(default=None),
    user_id: int = Depends(require_user_id),
    state: AppState = Depends(get_state),
) -> TaskPageOut:
    result = state.tasks.list(
        user_id,
        status=status_filter,
        sort_by=sort_by,
        search=search,
        page=page,
        limit=limit,
    )
    return TaskPageOut.from_page(result)


# Registered before "/{task_id}" so "reorder" is never read as an id.
@router.patch("/reorder", response_model=MessageResponse)
async def reorder_tasks(
    payload: ReorderRequest,
    user_id: int = Depends(require_user_id),
    state: AppState = Depends(get_state),
) -> MessageResponse:
    if payload.page is None:
        raise ValidationError("A valid page number is required.")
    await state.tasks.reorder(user_id, payload.ordered_ids, payload.page, payload.limit)
    if not payload.ordered_ids:
        return MessageResponse(message="No tasks to reorder.")
    return MessageResponse(message="Tasks reordered successfully.")


@router.patch("/{task_id}", response_model=MessageResponse)
async def update_task_status(
    task_id: int,
    payload: TaskStatusRequest,
    user_id: int = Depends(require_user_id),
    state: AppState = Depends(get_state),
) -> MessageResponse:
    await state.tasks.update_status(user_id, task_id, payload.status)
    return MessageResponse(message="Task status updated successfully")


@router.put("/{task_id}", response_model=MessageResponse)
async def update_task(
    task_id: int,
    payload: TaskWriteRequest,
    user_id: int = Depends(require_user_id),
    state: AppState = Depends(get_state),
) -> MessageResponse:
    await state.tasks.update(user_id, task_id, payload.title, payload.description, payload.due_date)
    return MessageResponse(message="Task updated successfully")


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: int,
    user_id: int = Depends(require_user_id),
    state: AppState = Depends(get_state),
) -> MessageResponse:
    await state.tasks.delete(user_id, task_id)
    return MessageResponse(message="Task deleted successfully")
