# src/taskboard/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum


class TaskStatus(StrEnum):
    """Free enumeration: any status may follow any other."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.PENDING


class StatusFilter(StrEnum):
    ALL = "all"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class SortKey(StrEnum):
    ORDER_ASC = "order_asc"
    CREATED_AT_DESC = "createdAt_desc"
    CREATED_AT_ASC = "createdAt_asc"
    DUE_DATE_DESC = "dueDate_desc"
    DUE_DATE_ASC = "dueDate_asc"

    @classmethod
    def parse(cls, raw: str | None) -> SortKey:
        """Unknown or absent keys fall back to the manual order."""
        if not raw:
            return cls.ORDER_ASC
        try:
            return cls(raw)
        except ValueError:
            return cls.ORDER_ASC


@dataclass(slots=True)
class Task:
    id: int
    user_id: int
    title: str
    description: str | None
    status: TaskStatus
    due_date: datetime | None
    order: int
    created_at: datetime
    notification_sent: bool = False


@dataclass(slots=True)
class TaskPage:
    tasks: list[Task] = field(default_factory=list)
    total_pages: int = 1
    current_page: int = 1


# ---- timestamp helpers (the store keeps UTC epoch seconds) ----

def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC; aware ones are converted."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_ts(dt: datetime | None) -> float | None:
    if dt is None:
        return None
    return as_utc(dt).timestamp()


def from_ts(ts: float | None) -> datetime | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(float(ts), tz=timezone.utc)
