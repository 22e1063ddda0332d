# src/taskboard/storage/database.py

"""
SQLite persistence adapter.

Everything above this module talks to the store through parameterized SQL:
- autocommit helpers (execute / insert / fetch_one / fetch_all)
- transaction() for multi-statement units that must commit or roll back together

The schema is created if missing and migrated additively:
- use PRAGMA table_info to detect missing columns
- add columns with ALTER TABLE only when needed

Thread-safety:
- each call opens its own SQLite connection
"""

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

from ..errors import PersistenceError

logger = logging.getLogger(__name__)

Params = Sequence[Any]

# OverflowError: an int parameter outside SQLite's signed 64-bit range.
_DB_ERRORS = (sqlite3.Error, OverflowError)


def _casefold(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


_TASK_COLUMNS: dict[str, str] = {
    "user_id": "INTEGER NOT NULL DEFAULT 0",
    "title": "TEXT NOT NULL DEFAULT ''",
    "description": "TEXT",
    "status": "TEXT NOT NULL DEFAULT 'pending'",
    "due_date": "REAL",
    '"order"': "INTEGER NOT NULL DEFAULT 0",
    "created_at": "REAL NOT NULL DEFAULT 0",
    "notification_sent": "INTEGER NOT NULL DEFAULT 0",
}


class Database:
    def __init__(self, db_path: str | Path = "taskboard.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("Database ready db=%s", self._db_path)

    @property
    def path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Shutdown hook (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        # isolation_level=None: we issue BEGIN/COMMIT ourselves in transaction().
        conn = sqlite3.connect(str(self._db_path), timeout=30.0, isolation_level=None)
        conn.row_factory = sqlite3.Row
        # Built-in lower() only folds ASCII.
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    username TEXT NOT NULL UNIQUE,
                    email TEXT NOT NULL UNIQUE,
                    password_hash TEXT NOT NULL,
                    created_at REAL NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT,
                    status TEXT NOT NULL DEFAULT 'pending',
                    due_date REAL,
                    "order" INTEGER NOT NULL DEFAULT 0,
                    created_at REAL NOT NULL,
                    notification_sent INTEGER NOT NULL DEFAULT 0
                )
                """
            )

            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}
            for name, decl in _TASK_COLUMNS.items():
                if name.strip('"') in cols:
                    continue
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("Database migration: added column tasks.%s", name)

            cur.execute('CREATE INDEX IF NOT EXISTS idx_tasks_user_order ON tasks(user_id, "order")')
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_due_status ON tasks(status, due_date)")
        finally:
            conn.close()

    # ---- public API ----

    @contextlib.contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Yield a connection inside BEGIN IMMEDIATE.

        Commits on clean exit. Any exception rolls the whole unit back; sqlite
        errors and out-of-range parameters surface as PersistenceError, other
        exceptions propagate as-is.
        """
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                conn.execute("COMMIT")
            except BaseException:
                with contextlib.suppress(sqlite3.Error):
                    conn.execute("ROLLBACK")
                logger.warning("Transaction rolled back db=%s", self._db_path)
                raise
        except _DB_ERRORS as e:
            raise PersistenceError(f"Database error: {e}") from e
        finally:
            conn.close()

    def execute(self, sql: str, params: Params = ()) -> int:
        """Run one statement in autocommit mode; returns the affected row count."""
        conn = self._get_conn()
        try:
            cur = conn.execute(sql, tuple(params))
            return int(cur.rowcount)
        except _DB_ERRORS as e:
            raise PersistenceError(f"Database error: {e}") from e
        finally:
            conn.close()

    def insert(self, sql: str, params: Params = ()) -> int:
        conn = self._get_conn()
        try:
            cur = conn.execute(sql, tuple(params))
            rowid = cur.lastrowid
            if rowid is None:
                raise PersistenceError("SQLite did not return lastrowid for insert")
            return int(rowid)
        except _DB_ERRORS as e:
            raise PersistenceError(f"Database error: {e}") from e
        finally:
            conn.close()

    def fetch_one(self, sql: str, params: Params = ()) -> sqlite3.Row | None:
        conn = self._get_conn()
        try:
            return conn.execute(sql, tuple(params)).fetchone()
        except _DB_ERRORS as e:
            raise PersistenceError(f"Database error: {e}") from e
        finally:
            conn.close()

    def fetch_all(self, sql: str, params: Params = ()) -> list[sqlite3.Row]:
        conn = self._get_conn()
        try:
            return list(conn.execute(sql, tuple(params)).fetchall())
        except _DB_ERRORS as e:
            raise PersistenceError(f"Database error: {e}") from e
        finally:
            conn.close()
