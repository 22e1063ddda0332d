# src/taskboard/errors.py

"""
Error taxonomy shared by every layer.

Each error carries the HTTP status the web layer answers with, so services can
raise without knowing about FastAPI and routes never map errors by hand.
"""

from __future__ import annotations


class TaskboardError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskboardError):
    """Malformed or missing input."""

    status_code = 400
    default_message = "Invalid request"


class AuthError(TaskboardError):
    """Missing, invalid or expired credential."""

    status_code = 401
    default_message = "Not authorized"


class NotFoundOrForbidden(TaskboardError):
    """
    Row absent or owned by someone else.

    Both cases share one message so callers cannot probe for foreign ids.
    """

    status_code = 404
    default_message = "Task not found or user not authorized"


class ConflictError(TaskboardError):
    status_code = 409
    default_message = "Resource already exists"


class PersistenceError(TaskboardError):
    """Store or transaction failure (the transaction has been rolled back)."""

    status_code = 500
    default_message = "Database error"
