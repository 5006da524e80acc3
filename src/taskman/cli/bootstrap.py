# src/taskman/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- wires the JSON snapshot store into the task service,
- returns an AppState for the command handlers.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_service import TaskService
from ..tasks.task_store import JsonTaskStore

logger = logging.getLogger(__name__)


def create_initial_state(*, settings=None, tasks_file: str | Path | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    If settings is None, falls back to get_settings(). tasks_file overrides settings.tasks_file_path.
    """
    if settings is None:
        settings = get_settings()

    path = Path(tasks_file) if tasks_file is not None else Path(settings.tasks_file_path)
    store = JsonTaskStore(path)
    logger.debug("Using task file %s", path)

    return AppState(settings=settings, tasks=TaskService(store))
