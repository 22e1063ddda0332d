# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard.cli.bootstrap import create_initial_state
from taskboard.core.state import AppState
from taskboard.storage.database import Database

from .fakes import RecordingSink


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with create_initial_state() and the web app.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskboard-test",
        log_level="DEBUG",
        host="127.0.0.1",
        port=0,
        cors_origins=["http://localhost:5173"],
        jwt_secret="test-secret",
        jwt_ttl_seconds=3600,
        # Cheap hashes keep auth tests fast.
        bcrypt_rounds=4,
        data_dir=tmp_path,
        db_path=tmp_path / "taskboard.sqlite3",
        default_page_size=10,
        reorder_page_size=10,
        # Long interval: tests drive sweeps explicitly.
        reminder_interval_seconds=3600.0,
        reminder_window_hours=24.0,
        reminder_batch_limit=100,
    )


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """
    AppState wired exactly like production.

    NOTE: We keep the real SQLite store here because ordering and query
    correctness is what we want to test.
    """
    return create_initial_state(settings=settings)


@pytest.fixture()
def db(state: AppState) -> Database:
    return state.db


@pytest.fixture()
def sink(state: AppState) -> RecordingSink:
    """A live (unauthenticated) connection attached to the fanout."""
    s = RecordingSink()
    s.connection_id = state.fanout.attach(s)
    return s
