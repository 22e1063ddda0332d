# src/taskboard/tasks/task_store.py

"""
Task rows: insert, ownership-scoped updates/deletes and the reminder queries.

Every user-facing statement carries `user_id = ?` next to `id = ?`, so a foreign
id behaves exactly like a missing one (zero affected rows).
"""

from __future__ import annotations

import logging
import sqlite3
import time
from datetime import datetime, timezone
from typing import Any

from ..storage.database import Database
from .task_models import Task, TaskStatus, from_ts, to_ts

logger = logging.getLogger(__name__)

TASK_COLUMNS = 'id, user_id, title, description, status, due_date, "order", created_at, notification_sent'

# Row ids are signed 64-bit; anything outside cannot name a row.
MAX_ROW_ID = 2**63 - 1


def is_row_id(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value <= MAX_ROW_ID


def row_to_task(row: sqlite3.Row) -> Task:
    return Task(
        id=int(row["id"]),
        user_id=int(row["user_id"]),
        title=str(row["title"] or ""),
        description=row["description"],
        status=TaskStatus.from_db(row["status"]),
        due_date=from_ts(row["due_date"]),
        order=int(row["order"] or 0),
        created_at=datetime.fromtimestamp(float(row["created_at"] or 0.0), tz=timezone.utc),
        notification_sent=bool(row["notification_sent"]),
    )


class TaskStore:
    def __init__(self, db: Database) -> None:
        self._db = db

    def count_tasks(self) -> int:
        row = self._db.fetch_one("SELECT COUNT(*) AS n FROM tasks")
        return int(row["n"]) if row else 0

    def get_task(self, user_id: int, task_id: int) -> Task | None:
        if not is_row_id(task_id):
            return None
        row = self._db.fetch_one(
            f"SELECT {TASK_COLUMNS} FROM tasks WHERE id = ? AND user_id = ?",
            (int(task_id), int(user_id)),
        )
        return row_to_task(row) if row else None

    def add_task(
        self,
        *,
        user_id: int,
        title: str,
        order: int,
        description: str | None = None,
        due_date: datetime | None = None,
        conn: sqlite3.Connection | None = None,
    ) -> Task:
        """
        Insert a pending, not-yet-notified task.

        Pass `conn` to run inside a caller's transaction (the order value is
        usually read in the same one).
        """
        now = time.time()
        sql = """
            INSERT INTO tasks(user_id, title, description, status, due_date, "order", created_at, notification_sent)
            VALUES (?, ?, ?, ?, ?, ?, ?, 0)
        """
        params: tuple[Any, ...] = (
            int(user_id),
            title,
            description,
            TaskStatus.PENDING.value,
            to_ts(due_date),
            int(order),
            now,
        )
        if conn is None:
            task_id = self._db.insert(sql, params)
        else:
            cur = conn.execute(sql, params)
            if cur.lastrowid is None:
                raise RuntimeError("SQLite did not return lastrowid for tasks insert")
            task_id = int(cur.lastrowid)

        logger.debug("Task row inserted id=%s user=%s order=%s", task_id, user_id, order)
        return Task(
            id=task_id,
            user_id=int(user_id),
            title=title,
            description=description,
            status=TaskStatus.PENDING,
            due_date=from_ts(to_ts(due_date)),
            order=int(order),
            created_at=datetime.fromtimestamp(now, tz=timezone.utc),
            notification_sent=False,
        )

    def update_task_fields(
        self,
        user_id: int,
        task_id: int,
        *,
        title: str,
        description: str | None,
        due_date: datetime | None,
    ) -> bool:
        """Full replace of the editable fields; always re-arms the due-soon reminder."""
        if not is_row_id(task_id):
            return False
        n = self._db.execute(
            """
            UPDATE tasks
            SET title = ?, description = ?, due_date = ?, notification_sent = 0
            WHERE id = ? AND user_id = ?
            """,
            (title, description, to_ts(due_date), int(task_id), int(user_id)),
        )
        return n > 0

    def update_task_status(self, user_id: int, task_id: int, status: TaskStatus) -> bool:
        if not is_row_id(task_id):
            return False
        n = self._db.execute(
            "UPDATE tasks SET status = ? WHERE id = ? AND user_id = ?",
            (status.value, int(task_id), int(user_id)),
        )
        return n > 0

    def delete_task(self, user_id: int, task_id: int) -> bool:
        if not is_row_id(task_id):
            return False
        n = self._db.execute(
            "DELETE FROM tasks WHERE id = ? AND user_id = ?",
            (int(task_id), int(user_id)),
        )
        return n > 0

    # ---- reminder sweep ----

    def list_due_soon(self, *, start_ts: float, end_ts: float, limit: int = 100) -> list[Task]:
        """
        Unnotified, unfinished tasks due within [start_ts, end_ts].

        Rows leave this result on their own once the window passes or the task
        is completed.
        """
        rows = self._db.fetch_all(
            f"""
            SELECT {TASK_COLUMNS}
            FROM tasks
            WHERE due_date BETWEEN ? AND ?
              AND status != 'completed'
              AND notification_sent = 0
            ORDER BY due_date ASC, id ASC
                LIMIT ?
            """,
            (float(start_ts), float(end_ts), int(limit)),
        )
        return [row_to_task(r) for r in rows]

    def mark_notified(self, task_id: int) -> bool:
        n = self._db.execute(
            "UPDATE tasks SET notification_sent = 1 WHERE id = ?",
            (int(task_id),),
        )
        return n > 0
