# src/taskboard/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then serves the FastAPI app (REST +
WebSocket + reminder scheduler) with uvicorn until interrupted.
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..logging_setup import setup_logging
from ..web.app import create_app

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None, settings) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="taskboard", description="Run the task management server.")
    parser.add_argument("--host", default=settings.host, help="bind address (default: %(default)s)")
    parser.add_argument("--port", type=int, default=settings.port, help="bind port (default: %(default)s)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    settings = get_settings()
    args = _parse_args(argv, settings)

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)
    app = create_app(state)

    logger.info("Serving on http://%s:%s", args.host, args.port)
    # log_config=None keeps the handlers installed by setup_logging().
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
