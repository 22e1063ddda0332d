# src/taskboard/tasks/task_scheduler.py

from __future__ import annotations

"""
Due-soon reminder scheduler.

A small polling loop that, every interval:
- fetches unfinished, unnotified tasks due within the reminder window,
- pushes task_due_soon to the owner's live connection (if any),
- flags the task as notified once the push went out.

Owners without a live connection are skipped and left unflagged, so a later
sweep retries while the task is still inside the window. Connection lookup and
framing belong to the fanout, not the scheduler.
"""

import asyncio
import logging
import time

from ..core.ports import DueSoonNotifier, DueTaskRepo

logger = logging.getLogger(__name__)


async def sweep_due_soon(
        task_store: DueTaskRepo,
        notifier: DueSoonNotifier,
        *,
        now_ts: float | None = None,
        window_seconds: float = 24 * 3600.0,
        batch_limit: int = 100,
) -> int:
    """Run one sweep; returns the number of reminders delivered."""
    if now_ts is None:
        now_ts = time.time()

    tasks = task_store.list_due_soon(
        start_ts=now_ts,
        end_ts=now_ts + float(window_seconds),
        limit=int(batch_limit),
    )
    if tasks:
        logger.info("Found %d tasks due soon.", len(tasks))

    sent = 0
    for task in tasks:
        if not notifier.has_live_connection(task.user_id):
            logger.debug("No live connection for user %s; task %s stays queued", task.user_id, task.id)
            continue

        try:
            delivered = await notifier.notify_due_soon(task)
        except Exception:
            logger.exception("notify_due_soon failed task_id=%s", task.id)
            continue

        if not delivered:
            continue

        try:
            task_store.mark_notified(task.id)
        except Exception:
            logger.exception("mark_notified failed task_id=%s", task.id)
            continue

        sent += 1
        logger.info('Sent due-soon notification for task "%s" to user %s', task.title, task.user_id)

    return sent


async def run_reminder_scheduler(
        task_store: DueTaskRepo,
        notifier: DueSoonNotifier,
        *,
        interval_seconds: float = 300.0,
        window_seconds: float = 24 * 3600.0,
        batch_limit: int = 100,
) -> None:
    """
    Simple polling scheduler around sweep_due_soon().

    A failing sweep is logged and the loop carries on with the next interval.
    To stop the scheduler, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))
    logger.info(
        "Reminder scheduler started interval=%ss window=%ss", sleep_s, window_seconds
    )

    while True:
        try:
            await sweep_due_soon(
                task_store,
                notifier,
                window_seconds=window_seconds,
                batch_limit=batch_limit,
            )
        except Exception:
            logger.exception("Reminder sweep failed")

        await asyncio.sleep(sleep_s)
