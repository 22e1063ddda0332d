# tests/test_task_scheduler.py

from __future__ import annotations

import asyncio
import time
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from taskboard.core.state import AppState
from taskboard.notify.fanout import EVENT_TASK_DUE_SOON
from taskboard.tasks.task_models import Task, TaskStatus, from_ts, to_ts
from taskboard.tasks.task_scheduler import run_reminder_scheduler, sweep_due_soon

from .fakes import RecordingSink

HOUR = 3600.0


class FakeDueRepo:
    """
    In-memory DueTaskRepo used for scheduler unit tests.

    This avoids SQLite and makes tests purely about sweep logic:
    the time window, the completed/notified gates and flagging.
    """

    def __init__(self, tasks: list[Task]) -> None:
        self.tasks = {t.id: t for t in tasks}
        self.marked: list[int] = []

    def list_due_soon(self, *, start_ts: float, end_ts: float, limit: int = 100):
        out: list[Task] = []
        for t in self.tasks.values():
            due = to_ts(t.due_date)
            if (
                due is not None
                and start_ts <= due <= end_ts
                and t.status != TaskStatus.COMPLETED
                and not t.notification_sent
            ):
                out.append(t)
        out.sort(key=lambda x: (to_ts(x.due_date), x.id))
        return out[:limit]

    def mark_notified(self, task_id: int) -> bool:
        self.marked.append(task_id)
        self.tasks[task_id] = replace(self.tasks[task_id], notification_sent=True)
        return True


class FakeNotifier:
    def __init__(self, connected: set[int], *, deliver: bool = True) -> None:
        self.connected = connected
        self.deliver = deliver
        self.pushed: list[int] = []

    def has_live_connection(self, user_id: int) -> bool:
        return user_id in self.connected

    async def notify_due_soon(self, task) -> bool:
        self.pushed.append(task.id)
        return self.deliver


def _task(task_id: int, *, user_id: int = 1, due_in: float | None, now: float, **kw) -> Task:
    return Task(
        id=task_id,
        user_id=user_id,
        title=f"task {task_id}",
        description=None,
        status=kw.get("status", TaskStatus.PENDING),
        due_date=None if due_in is None else from_ts(now + due_in),
        order=task_id,
        created_at=datetime.fromtimestamp(now - 60, tz=timezone.utc),
        notification_sent=kw.get("notification_sent", False),
    )


@pytest.mark.asyncio
async def test_sweep_respects_window_and_gates() -> None:
    now = time.time()
    repo = FakeDueRepo(
        [
            _task(1, due_in=HOUR, now=now),
            _task(2, due_in=25 * HOUR, now=now),
            _task(3, due_in=-HOUR, now=now),
            _task(4, due_in=HOUR, now=now, status=TaskStatus.COMPLETED),
            _task(5, due_in=HOUR, now=now, notification_sent=True),
            _task(6, due_in=None, now=now),
        ]
    )
    notifier = FakeNotifier({1})

    sent = await sweep_due_soon(repo, notifier, now_ts=now)

    assert sent == 1
    assert notifier.pushed == [1]
    assert repo.marked == [1]


@pytest.mark.asyncio
async def test_sweep_skips_disconnected_owner_and_retries_later() -> None:
    now = time.time()
    repo = FakeDueRepo([_task(1, user_id=7, due_in=HOUR, now=now)])
    notifier = FakeNotifier(set())

    assert await sweep_due_soon(repo, notifier, now_ts=now) == 0
    assert notifier.pushed == []
    assert repo.marked == []

    notifier.connected.add(7)
    assert await sweep_due_soon(repo, notifier, now_ts=now + 60) == 1
    assert repo.marked == [1]


@pytest.mark.asyncio
async def test_failed_push_leaves_task_unflagged() -> None:
    now = time.time()
    repo = FakeDueRepo([_task(1, due_in=HOUR, now=now)])
    notifier = FakeNotifier({1}, deliver=False)

    assert await sweep_due_soon(repo, notifier, now_ts=now) == 0
    assert notifier.pushed == [1]
    assert repo.marked == []


@pytest.mark.asyncio
async def test_due_soon_fires_exactly_once_end_to_end(state: AppState) -> None:
    """Real store + real fanout: one sweep pushes once, the next pushes nothing."""
    now = time.time()
    task = await state.tasks.create(1, "Submit taxes", None, datetime.fromtimestamp(now + HOUR, tz=timezone.utc))
    await state.tasks.create(2, "Someone else's", None, datetime.fromtimestamp(now + HOUR, tz=timezone.utc))

    sink = RecordingSink()
    cid = state.fanout.attach(sink)
    state.registry.register(1, cid)

    assert await sweep_due_soon(state.task_store, state.fanout, now_ts=now) == 1
    assert state.tasks.get(1, task.id).notification_sent is True
    assert [e.event for e in sink.events(EVENT_TASK_DUE_SOON)] == [EVENT_TASK_DUE_SOON]
    assert sink.events(EVENT_TASK_DUE_SOON)[0].data["title"] == "Submit taxes"

    assert await sweep_due_soon(state.task_store, state.fanout, now_ts=now + 60) == 0
    assert len(sink.events(EVENT_TASK_DUE_SOON)) == 1


@pytest.mark.asyncio
async def test_editing_a_notified_task_rearms_the_reminder(state: AppState) -> None:
    now = time.time()
    due = datetime.fromtimestamp(now + HOUR, tz=timezone.utc)
    task = await state.tasks.create(1, "Dentist", None, due)

    sink = RecordingSink()
    state.registry.register(1, state.fanout.attach(sink))

    await sweep_due_soon(state.task_store, state.fanout, now_ts=now)
    await state.tasks.update(1, task.id, "Dentist (moved)", None, datetime.fromtimestamp(now + 2 * HOUR, tz=timezone.utc))
    await sweep_due_soon(state.task_store, state.fanout, now_ts=now)

    titles = [e.data["title"] for e in sink.events(EVENT_TASK_DUE_SOON)]
    assert titles == ["Dentist", "Dentist (moved)"]


@pytest.mark.asyncio
async def test_scheduler_loop_sweeps_until_cancelled() -> None:
    now = time.time()
    repo = FakeDueRepo([_task(1, due_in=HOUR, now=now)])
    notifier = FakeNotifier({1})

    runner = asyncio.create_task(
        run_reminder_scheduler(
            repo,
            notifier,
            interval_seconds=0.01,
            window_seconds=24 * HOUR,
            batch_limit=10,
        )
    )

    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    # Several sweeps ran, but the task was pushed only once.
    assert notifier.pushed == [1]
    assert repo.marked == [1]
