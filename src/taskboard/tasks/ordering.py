# src/taskboard/tasks/ordering.py

"""
Per-user manual ordering.

New tasks go to the end (max(order) + 1, or 0 for an empty list). Drag-reorder
rewrites one page window at a time: the ids the client sends are the desired
order of that page, so position i gets `(page - 1) * page_size + i`. Other
pages are not renumbered.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Sequence

from ..errors import ValidationError
from ..storage.database import Database

logger = logging.getLogger(__name__)


def page_offset(page: int, page_size: int, *, message: str = "Invalid pagination parameters.") -> int:
    if not _positive_int(page) or not _positive_int(page_size):
        raise ValidationError(message)
    return (page - 1) * page_size


def _positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


class OrderingEngine:
    def __init__(self, db: Database) -> None:
        self._db = db

    def next_order(self, user_id: int, *, conn: sqlite3.Connection | None = None) -> int:
        sql = 'SELECT MAX("order") AS max_order FROM tasks WHERE user_id = ?'
        params = (int(user_id),)
        row = self._db.fetch_one(sql, params) if conn is None else conn.execute(sql, params).fetchone()
        if row is None or row["max_order"] is None:
            return 0
        return int(row["max_order"]) + 1

    def reorder(
        self,
        user_id: int,
        ordered_ids: Sequence[int],
        *,
        page: int,
        page_size: int,
    ) -> int:
        """
        Assign `offset + position` to every listed id owned by `user_id`.

        All updates share one transaction: a failure on any id rolls back the
        whole batch (PersistenceError). Ids the user does not own match no row
        and are skipped without error. Returns the number of rows updated.
        """
        if not isinstance(ordered_ids, (list, tuple)):
            raise ValidationError("An array of ordered task IDs is required.")
        offset = page_offset(page, page_size, message="A valid page number is required.")
        if not ordered_ids:
            return 0

        updated = 0
        with self._db.transaction() as conn:
            for position, task_id in enumerate(ordered_ids):
                cur = conn.execute(
                    'UPDATE tasks SET "order" = ? WHERE id = ? AND user_id = ?',
                    (offset + position, task_id, int(user_id)),
                )
                updated += cur.rowcount

        skipped = len(ordered_ids) - updated
        if skipped:
            logger.info("Reorder skipped %d unowned/missing ids user=%s", skipped, user_id)
        logger.info(
            "Reordered %d tasks user=%s page=%s offset=%s", updated, user_id, page, offset
        )
        return updated
