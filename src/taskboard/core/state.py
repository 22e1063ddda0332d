# src/taskboard/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..auth.credentials import TokenService
from ..auth.user_store import UserStore
from ..notify.fanout import NotificationFanout
from ..notify.registry import ConnectionRegistry
from ..storage.database import Database
from ..tasks.ordering import OrderingEngine
from ..tasks.query import QueryComposer
from ..tasks.task_api import TaskController
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    """
    Everything a running server shares.

    Built once by cli.bootstrap.create_initial_state() (or by tests with their
    own settings); the web app reads it from app.state.
    """

    # Settings object (real Settings or a SimpleNamespace in tests).
    settings: Any

    db: Database
    tokens: TokenService
    users: UserStore
    task_store: TaskStore
    ordering: OrderingEngine
    composer: QueryComposer
    registry: ConnectionRegistry
    fanout: NotificationFanout
    tasks: TaskController
