# src/taskboard/notify/fanout.py

"""
Real-time event fanout.

Two event kinds:
- tasks_updated: broadcast to every open connection after any task mutation.
  It carries no payload; clients re-fetch their own (user-scoped) view.
- task_due_soon: unicast to the one connection registered for the task owner.

Architecture:
    TaskController / reminder sweep -> NotificationFanout -> EventSink (WebSocket)

A failing send only costs that connection: it is detached and logged, other
recipients and the triggering mutation are unaffected.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from typing import Any

from ..core.ports import EventSink
from ..errors import AuthError
from ..tasks.task_models import Task
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)

EVENT_TASKS_UPDATED = "tasks_updated"
EVENT_TASK_DUE_SOON = "task_due_soon"

TokenVerifier = Callable[[str], int]


def due_soon_payload(task: Task) -> dict[str, Any]:
    return {
        "title": task.title,
        "due_date": task.due_date.isoformat() if task.due_date else None,
    }


class NotificationFanout:
    def __init__(self, registry: ConnectionRegistry, verify_token: TokenVerifier) -> None:
        self._registry = registry
        self._verify_token = verify_token
        self._connections: dict[str, EventSink] = {}

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    def connection_count(self) -> int:
        return len(self._connections)

    # ---- connection lifecycle ----

    def attach(self, sink: EventSink) -> str:
        connection_id = uuid.uuid4().hex
        self._connections[connection_id] = sink
        logger.debug("Connection attached id=%s (total=%d)", connection_id, len(self._connections))
        return connection_id

    def detach(self, connection_id: str) -> None:
        self._connections.pop(connection_id, None)
        user_id = self._registry.unregister_connection(connection_id)
        if user_id is not None:
            logger.info("Removed user %s from connection registry (conn=%s)", user_id, connection_id)
        logger.debug("Connection detached id=%s (total=%d)", connection_id, len(self._connections))

    def authenticate(self, connection_id: str, token: str | None) -> int | None:
        """
        Bind the connection to the token's user for due-soon delivery.

        A bad token is not fatal: the connection stays open (and keeps getting
        broadcasts), it just is not registered. Returns the user id or None.
        """
        if connection_id not in self._connections:
            logger.warning("Authenticate for unknown connection id=%s", connection_id)
            return None
        try:
            user_id = self._verify_token(token or "")
        except AuthError as e:
            logger.info("Connection %s failed authentication: %s", connection_id, e.message)
            return None

        self._registry.register(user_id, connection_id)
        logger.info("Connection %s authenticated for user %s", connection_id, user_id)
        return user_id

    def close(self) -> None:
        self._connections.clear()
        self._registry.clear()

    # ---- delivery ----

    async def _send(self, connection_id: str, sink: EventSink, event: str, data: Any) -> bool:
        try:
            await sink.send_event(event, data)
            return True
        except Exception:
            logger.exception("Send %s failed conn=%s; detaching", event, connection_id)
            self.detach(connection_id)
            return False

    async def broadcast_tasks_updated(self) -> int:
        """Send tasks_updated to every connection; returns how many sends succeeded."""
        targets = list(self._connections.items())
        if not targets:
            return 0
        results = await asyncio.gather(
            *(self._send(cid, sink, EVENT_TASKS_UPDATED, None) for cid, sink in targets)
        )
        delivered = sum(1 for ok in results if ok)
        logger.debug("Broadcast %s to %d/%d connections", EVENT_TASKS_UPDATED, delivered, len(targets))
        return delivered

    def has_live_connection(self, user_id: int) -> bool:
        connection_id = self._registry.connection_for(user_id)
        return connection_id is not None and connection_id in self._connections

    async def notify_due_soon(self, task: Task) -> bool:
        """
        Push task_due_soon to the owner's registered connection.

        Returns True only if a send completed; False when the owner has no live
        connection (an expected condition, retried by the next sweep) or the
        send failed.
        """
        connection_id = self._registry.connection_for(task.user_id)
        if connection_id is None:
            return False
        sink = self._connections.get(connection_id)
        if sink is None:
            self._registry.unregister_connection(connection_id)
            return False
        return await self._send(connection_id, sink, EVENT_TASK_DUE_SOON, due_soon_payload(task))
