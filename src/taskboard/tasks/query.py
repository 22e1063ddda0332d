# src/taskboard/tasks/query.py

"""
List query composition: status filter, search, sort and pagination.

The plan is built as SQL text plus a parameter list; the count query and the
page query share the same WHERE clause and parameters so `total_pages` always
describes the rows being paged.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

from ..storage.database import Database
from .ordering import page_offset
from .task_models import SortKey, StatusFilter, TaskPage
from .task_store import TASK_COLUMNS, row_to_task

logger = logging.getLogger(__name__)

# Every key except order_asc breaks ties on the manual order.
_ORDER_BY: dict[SortKey, str] = {
    SortKey.ORDER_ASC: '"order" ASC',
    SortKey.CREATED_AT_DESC: 'created_at DESC, "order" ASC',
    SortKey.CREATED_AT_ASC: 'created_at ASC, "order" ASC',
    SortKey.DUE_DATE_DESC: 'due_date DESC, "order" ASC',
    SortKey.DUE_DATE_ASC: 'due_date ASC, "order" ASC',
}


@dataclass(slots=True, frozen=True)
class TaskQuery:
    # A value outside StatusFilter is matched literally (and so matches nothing).
    status: StatusFilter | str = StatusFilter.ALL
    sort: SortKey = SortKey.ORDER_ASC
    search: str | None = None
    page: int = 1
    page_size: int = 10


@dataclass(slots=True)
class QueryPlan:
    where: list[str] = field(default_factory=list)
    params: list[Any] = field(default_factory=list)
    order_by: str = _ORDER_BY[SortKey.ORDER_ASC]
    limit: int = 10
    offset: int = 0

    def count_sql(self) -> str:
        return f"SELECT COUNT(*) AS total FROM tasks WHERE {' AND '.join(self.where)}"

    def page_sql(self) -> str:
        return (
            f"SELECT {TASK_COLUMNS} FROM tasks WHERE {' AND '.join(self.where)} "
            f"ORDER BY {self.order_by} LIMIT ? OFFSET ?"
        )

    def page_params(self) -> list[Any]:
        return [*self.params, self.limit, self.offset]


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_plan(user_id: int, query: TaskQuery) -> QueryPlan:
    offset = page_offset(query.page, query.page_size)

    plan = QueryPlan(limit=query.page_size, offset=offset)
    plan.where.append("user_id = ?")
    plan.params.append(int(user_id))

    if query.status != StatusFilter.ALL:
        plan.where.append("status = ?")
        plan.params.append(str(query.status))

    term = (query.search or "").strip()
    if term:
        # casefold() is registered per connection by Database; it folds non-ASCII too.
        plan.where.append(
            "(casefold(title) LIKE casefold(?) ESCAPE '\\'"
            " OR casefold(COALESCE(description, '')) LIKE casefold(?) ESCAPE '\\')"
        )
        pattern = f"%{_escape_like(term)}%"
        plan.params.extend([pattern, pattern])

    plan.order_by = _ORDER_BY.get(query.sort, _ORDER_BY[SortKey.ORDER_ASC])
    return plan


class QueryComposer:
    def __init__(self, db: Database) -> None:
        self._db = db

    def list_tasks(self, user_id: int, query: TaskQuery) -> TaskPage:
        plan = build_plan(user_id, query)

        row = self._db.fetch_one(plan.count_sql(), plan.params)
        total = int(row["total"]) if row else 0
        rows = self._db.fetch_all(plan.page_sql(), plan.page_params())

        total_pages = max(1, math.ceil(total / query.page_size))
        logger.debug(
            "Listed tasks user=%s status=%s sort=%s page=%s/%s matched=%s",
            user_id,
            query.status,
            query.sort.value,
            query.page,
            total_pages,
            total,
        )
        return TaskPage(
            tasks=[row_to_task(r) for r in rows],
            total_pages=total_pages,
            current_page=query.page,
        )
