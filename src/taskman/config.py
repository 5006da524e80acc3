# src/taskman/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing is read at import time; get_settings() builds the object on first use.

Environment variables (all optional):
  TASKMAN_APP_NAME           display name (default: taskman)
  TASKMAN_LOG_LEVEL          console log level (default: WARNING)
  TASKMAN_LOG_TO_FILE        also write DEBUG logs to <data_dir>/taskman.log (default: false)
  TASKMAN_DATA_DIR           local data directory (default: .local/taskman)
  TASKMAN_TASKS_FILE         task snapshot path (default: tasks.json)
  TASKMAN_EXPORT_DIR         directory for generated export files (default: exports)
  TASKMAN_DEFAULT_PRIORITY   priority for `add` without --priority (default: 3)
  TASKMAN_DATE_FORMAT        strftime format for due dates in listings (default: %Y-%m-%d)
  TASKMAN_SHOW_COMPLETED     `list` shows completed tasks unless --pending (default: true)
  TASKMAN_UPCOMING_DAYS      look-ahead window for `stats` (default: 7)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from .tasks.task_models import DEFAULT_PRIORITY, is_valid_priority

ENV_PREFIX = "TASKMAN"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


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
    log_to_file: bool

    # ---- Local paths ----
    data_dir: Path
    tasks_file_path: Path
    export_dir: Path

    # ---- Behaviour ----
    default_priority: int
    date_format: str
    show_completed_by_default: bool
    upcoming_days: int

    @staticmethod
    def from_env(*, dotenv: bool = True) -> "Settings":
        if dotenv:
            # Look for .env from the working directory up, not from the package location.
            load_dotenv(find_dotenv(usecwd=True), override=False)

        app_name = _env(_k("APP_NAME"), "taskman").strip() or "taskman"
        log_level = _env(_k("LOG_LEVEL"), "WARNING").strip().upper() or "WARNING"
        log_to_file = _env_bool(_k("LOG_TO_FILE"), False)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskman"))
        tasks_file_path = _env_path(_k("TASKS_FILE"), Path("tasks.json"))
        export_dir = _env_path(_k("EXPORT_DIR"), Path("exports"))

        default_priority = _env_int(_k("DEFAULT_PRIORITY"), DEFAULT_PRIORITY)
        if not is_valid_priority(default_priority):
            default_priority = DEFAULT_PRIORITY

        date_format = _env(_k("DATE_FORMAT"), "%Y-%m-%d") or "%Y-%m-%d"
        show_completed_by_default = _env_bool(_k("SHOW_COMPLETED"), True)
        upcoming_days = max(0, _env_int(_k("UPCOMING_DAYS"), 7))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_to_file=log_to_file,
            data_dir=data_dir,
            tasks_file_path=tasks_file_path,
            export_dir=export_dir,
            default_priority=default_priority,
            date_format=date_format,
            show_completed_by_default=show_completed_by_default,
            upcoming_days=upcoming_days,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
