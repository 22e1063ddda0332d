# src/taskboard/tasks/task_api.py

"""
Task lifecycle: the operations behind the REST endpoints.

Every operation is scoped to the authenticated user. Input is validated before
anything is written, and each committed mutation is followed by one
tasks_updated broadcast. Failed operations (validation, not found, store
errors) broadcast nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from ..core.ports import ChangeNotifier
from ..errors import NotFoundOrForbidden, ValidationError
from ..storage.database import Database
from .ordering import OrderingEngine
from .query import QueryComposer, TaskQuery
from .task_models import SortKey, StatusFilter, Task, TaskPage, TaskStatus
from .task_store import TaskStore

logger = logging.getLogger(__name__)


def parse_due_date(raw: Any) -> datetime | None:
    """Accept None/'' (no due date), a datetime, or an ISO-8601 string."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str):
        try:
            return datetime.fromisoformat(raw.strip())
        except ValueError:
            pass
    raise ValidationError("Invalid due date format")


def _require_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title is required")
    return title.strip()


def _clean_description(description: Any) -> str | None:
    if description is None:
        return None
    if not isinstance(description, str):
        raise ValidationError("Description must be text")
    return description or None


def parse_status(raw: Any) -> TaskStatus:
    try:
        return TaskStatus(raw)
    except ValueError:
        raise ValidationError("A valid status is required") from None


def parse_status_filter(raw: str | None) -> StatusFilter | str:
    """Empty means all; an unknown value is kept as-is and yields an empty page."""
    if not raw:
        return StatusFilter.ALL
    try:
        return StatusFilter(raw)
    except ValueError:
        logger.debug("Unknown status filter %r", raw)
        return raw


class TaskController:
    def __init__(
        self,
        db: Database,
        store: TaskStore,
        ordering: OrderingEngine,
        composer: QueryComposer,
        notifier: ChangeNotifier,
        *,
        default_page_size: int = 10,
        reorder_page_size: int = 10,
    ) -> None:
        self._db = db
        self._store = store
        self._ordering = ordering
        self._composer = composer
        self._notifier = notifier
        self._default_page_size = default_page_size
        self._reorder_page_size = reorder_page_size

    async def _changed(self) -> None:
        await self._notifier.broadcast_tasks_updated()

    async def create(
        self,
        user_id: int,
        title: Any,
        description: Any = None,
        due_date: Any = None,
    ) -> Task:
        clean_title = _require_title(title)
        clean_description = _clean_description(description)
        due = parse_due_date(due_date)

        # Reading max(order) and inserting in one transaction keeps two
        # concurrent creates from landing on the same order value.
        with self._db.transaction() as conn:
            order = self._ordering.next_order(user_id, conn=conn)
            task = self._store.add_task(
                user_id=user_id,
                title=clean_title,
                description=clean_description,
                due_date=due,
                order=order,
                conn=conn,
            )

        logger.info("Task created id=%s user=%s order=%s", task.id, user_id, task.order)
        await self._changed()
        return task

    async def update(
        self,
        user_id: int,
        task_id: int,
        title: Any,
        description: Any = None,
        due_date: Any = None,
    ) -> None:
        clean_title = _require_title(title)
        clean_description = _clean_description(description)
        due = parse_due_date(due_date)

        if not self._store.update_task_fields(
            user_id,
            task_id,
            title=clean_title,
            description=clean_description,
            due_date=due,
        ):
            raise NotFoundOrForbidden()

        logger.info("Task updated id=%s user=%s", task_id, user_id)
        await self._changed()

    async def update_status(self, user_id: int, task_id: int, status: Any) -> None:
        new_status = parse_status(status)
        if not self._store.update_task_status(user_id, task_id, new_status):
            raise NotFoundOrForbidden()

        logger.info("Task status id=%s user=%s -> %s", task_id, user_id, new_status.value)
        await self._changed()

    async def delete(self, user_id: int, task_id: int) -> None:
        # Remaining tasks keep their order values; gaps are fine for listing.
        if not self._store.delete_task(user_id, task_id):
            raise NotFoundOrForbidden()

        logger.info("Task deleted id=%s user=%s", task_id, user_id)
        await self._changed()

    async def reorder(
        self,
        user_id: int,
        ordered_ids: Sequence[int],
        page: int,
        page_size: int | None = None,
    ) -> int:
        size = self._reorder_page_size if page_size is None else page_size
        updated = self._ordering.reorder(user_id, ordered_ids, page=page, page_size=size)
        if ordered_ids:
            await self._changed()
        return updated

    def list(
        self,
        user_id: int,
        *,
        status: str | None = None,
        sort_by: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> TaskPage:
        query = TaskQuery(
            status=parse_status_filter(status),
            sort=SortKey.parse(sort_by),
            search=search,
            page=page,
            page_size=self._default_page_size if limit is None else limit,
        )
        return self._composer.list_tasks(user_id, query)

    def get(self, user_id: int, task_id: int) -> Task:
        task = self._store.get_task(user_id, task_id)
        if task is None:
            raise NotFoundOrForbidden()
        return task
