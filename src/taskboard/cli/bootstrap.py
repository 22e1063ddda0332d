# src/taskboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (store, ordering, fanout, controller),
- tears the in-memory pieces down again on shutdown.
"""

from __future__ import annotations

import logging

from ..auth.credentials import TokenService
from ..auth.user_store import UserStore
from ..config import get_settings
from ..core.state import AppState
from ..notify.fanout import NotificationFanout
from ..notify.registry import ConnectionRegistry
from ..storage.database import Database
from ..tasks.ordering import OrderingEngine
from ..tasks.query import QueryComposer
from ..tasks.task_api import TaskController
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    db = Database(settings.db_path)
    tokens = TokenService(settings.jwt_secret, ttl_seconds=settings.jwt_ttl_seconds)
    registry = ConnectionRegistry()
    fanout = NotificationFanout(registry, tokens.verify)

    task_store = TaskStore(db)
    ordering = OrderingEngine(db)
    composer = QueryComposer(db)

    state = AppState(
        settings=settings,
        db=db,
        tokens=tokens,
        users=UserStore(db, tokens, bcrypt_rounds=settings.bcrypt_rounds),
        task_store=task_store,
        ordering=ordering,
        composer=composer,
        registry=registry,
        fanout=fanout,
        tasks=TaskController(
            db,
            task_store,
            ordering,
            composer,
            fanout,
            default_page_size=settings.default_page_size,
            reorder_page_size=settings.reorder_page_size,
        ),
    )
    logger.info("State ready db=%s tasks=%s", settings.db_path, task_store.count_tasks())
    return state


def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.fanout.close()
    except Exception:
        logger.exception("Failed to close notification fanout.")

    try:
        state.db.close()
    except Exception:
        logger.debug("Database close failed.", exc_info=True)
