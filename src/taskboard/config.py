# src/taskboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (a dev JWT secret is used if unset).
- Components take settings by injection; get_settings() is only for entrypoints.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ENV_PREFIX = "TASKBOARD"

logger = logging.getLogger(__name__)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except ImportError:
        return
    load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %s", name, raw, default)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r, using %s", name, raw, default)
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- HTTP ----
    host: str
    port: int
    cors_origins: list[str]

    # ---- Credentials ----
    jwt_secret: str
    jwt_ttl_seconds: int
    bcrypt_rounds: int

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path

    # ---- Listing / ordering ----
    default_page_size: int
    reorder_page_size: int

    # ---- Reminders ----
    reminder_interval_seconds: float
    reminder_window_hours: float
    reminder_batch_limit: int

    @staticmethod
    def from_env() -> "Settings":
        _load_dotenv_if_available()

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskboard"))

        jwt_secret = _env(_k("JWT_SECRET"), "")
        if not jwt_secret:
            jwt_secret = "dev-secret"
            logger.warning("%s is not set; using an insecure development secret", _k("JWT_SECRET"))

        return Settings(
            app_name=_env(_k("APP_NAME"), "taskboard"),
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            host=_env(_k("HOST"), "127.0.0.1"),
            port=_env_int(_k("PORT"), 5001),
            cors_origins=_env_list(_k("CORS_ORIGINS"), ["http://localhost:5173"]),
            jwt_secret=jwt_secret,
            jwt_ttl_seconds=_env_int(_k("JWT_TTL_SECONDS"), 3600),
            bcrypt_rounds=_env_int(_k("BCRYPT_ROUNDS"), 12),
            data_dir=data_dir,
            db_path=_env_path(_k("DB_PATH"), data_dir / "taskboard.sqlite3"),
            default_page_size=_env_int(_k("DEFAULT_PAGE_SIZE"), 10),
            reorder_page_size=_env_int(_k("REORDER_PAGE_SIZE"), 10),
            reminder_interval_seconds=_env_float(_k("REMINDER_INTERVAL_SECONDS"), 300.0),
            reminder_window_hours=_env_float(_k("REMINDER_WINDOW_HOURS"), 24.0),
            reminder_batch_limit=_env_int(_k("REMINDER_BATCH_LIMIT"), 100),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
