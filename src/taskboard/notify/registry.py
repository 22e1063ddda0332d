# src/taskboard/notify/registry.py

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """
    Which live connection receives a user's due-soon reminders.

    One entry per user; the most recent successful authentication wins and
    earlier connections silently stop receiving unicasts. Nothing is persisted:
    the registry lives as long as the process (see AppState / app lifespan).

    Mutated by authenticate/disconnect events and read by the reminder sweep.
    The lock makes it safe when handlers run on worker threads as well as on
    the event loop.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_user: dict[int, str] = {}

    def register(self, user_id: int, connection_id: str) -> str | None:
        """Record `connection_id` for `user_id`; returns the connection it replaced."""
        with self._lock:
            previous = self._by_user.get(user_id)
            self._by_user[user_id] = connection_id
        if previous and previous != connection_id:
            logger.debug("User %s moved reminders from %s to %s", user_id, previous, connection_id)
        return previous

    def unregister_connection(self, connection_id: str) -> int | None:
        """Drop the entry pointing at `connection_id`, if any; returns its user id."""
        with self._lock:
            for user_id, conn_id in self._by_user.items():
                if conn_id == connection_id:
                    del self._by_user[user_id]
                    return user_id
        return None

    def connection_for(self, user_id: int) -> str | None:
        with self._lock:
            return self._by_user.get(user_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_user)

    def clear(self) -> None:
        with self._lock:
            self._by_user.clear()
