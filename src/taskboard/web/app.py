# src/taskboard/web/app.py

"""FastAPI application factory."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..cli.bootstrap import create_initial_state, shutdown_state
from ..core.state import AppState
from ..errors import TaskboardError
from ..tasks.task_scheduler import run_reminder_scheduler
from . import realtime, routes_auth, routes_tasks

logger = logging.getLogger(__name__)


async def _taskboard_error_handler(request: Request, exc: TaskboardError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        # Store details stay in the log.
        return JSONResponse(status_code=exc.status_code, content={"message": exc.default_message})
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"Invalid value for {where}" if where else "Invalid request"
    return JSONResponse(status_code=400, content={"message": message})


def create_app(state: AppState | None = None) -> FastAPI:
    """
    Build the app around `state` (created from env settings if omitted).

    The lifespan runs the reminder scheduler as a background task and tears
    the in-memory state down on shutdown.
    """
    if state is None:
        state = create_initial_state()
    settings = state.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Starting %s...", settings.app_name)
        scheduler = asyncio.create_task(
            run_reminder_scheduler(
                state.task_store,
                state.fanout,
                interval_seconds=settings.reminder_interval_seconds,
                window_seconds=settings.reminder_window_hours * 3600.0,
                batch_limit=settings.reminder_batch_limit,
            ),
            name="reminder-scheduler",
        )
        try:
            yield
        finally:
            scheduler.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await scheduler
            shutdown_state(state)
            logger.info("Shut down %s.", settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        description="Task management API with real-time updates",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.taskboard = state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TaskboardError, _taskboard_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]

    app.include_router(routes_auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(routes_tasks.router, prefix="/api/tasks", tags=["tasks"])
    app.include_router(realtime.router)

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        return {"message": "Hello from the Task Management API!"}

    return app
