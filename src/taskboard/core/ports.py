# src/taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the socket transport and the store swappable and makes testing easier.
"""

from typing import Any, Awaitable, Protocol


class EventSink(Protocol):
    """
    Transport-side port: one live real-time connection.

    The transport decides how an event is framed on the wire; the core only
    names the event and hands over a JSON-compatible payload.
    """

    def send_event(self, event: str, data: Any = None) -> Awaitable[None]: ...


class DueSoonNotifier(Protocol):
    """What the reminder sweep needs from the fanout."""

    def has_live_connection(self, user_id: int) -> bool: ...

    def notify_due_soon(self, task: Any) -> Awaitable[bool]: ...


class ChangeNotifier(Protocol):
    """What the task controller needs from the fanout."""

    def broadcast_tasks_updated(self) -> Awaitable[int]: ...


class DueTaskRepo(Protocol):
    # Reminder sweep API
    def list_due_soon(self, *, start_ts: float, end_ts: float, limit: int = 100) -> list[Any]: ...
    def mark_notified(self, task_id: int) -> bool: ...
