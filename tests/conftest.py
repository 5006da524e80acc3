# tests/conftest.py

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskman.tasks.task_models import Task
from taskman.tasks.task_service import TaskService
from taskman.tasks.task_store import JsonTaskStore

from fakes import MemoryTaskRepo


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the CLI and bootstrap.

    Built directly instead of from the environment.
    """
    return SimpleNamespace(
        app_name="taskman",
        log_level="WARNING",
        log_to_file=False,
        data_dir=tmp_path / "data",
        tasks_file_path=tmp_path / "tasks.json",
        export_dir=tmp_path / "exports",
        default_priority=3,
        date_format="%Y-%m-%d",
        show_completed_by_default=True,
        upcoming_days=7,
    )


@pytest.fixture()
def repo() -> MemoryTaskRepo:
    return MemoryTaskRepo()


@pytest.fixture()
def service(repo: MemoryTaskRepo) -> TaskService:
    svc = TaskService(repo)
    svc.load()
    return svc


@pytest.fixture()
def file_service(tmp_path: Path) -> TaskService:
    """TaskService backed by a real JSON file in tmp_path."""
    svc = TaskService(JsonTaskStore(tmp_path / "tasks.json"))
    svc.load()
    return svc


@pytest.fixture()
def sample_tasks() -> list[Task]:
    return [
        Task(
            id=1,
            description="Buy groceries",
            priority=4,
            tags=["shopping", "personal"],
            created_at=datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc),
        ),
        Task(
            id=2,
            description="Write report",
            priority=5,
            is_completed=True,
            tags=["work"],
            created_at=datetime(2024, 1, 2, 14, 30, 0, tzinfo=timezone.utc),
            due_date=date(2024, 1, 15),
        ),
        Task(
            id=3,
            description="Call dentist",
            priority=3,
            tags=[],
            created_at=datetime(2024, 1, 3, 9, 15, 0, tzinfo=timezone.utc),
        ),
    ]


@pytest.fixture(autouse=True)
def restore_root_logging():
    """main() reconfigures the root logger; put pytest's handlers back afterwards."""
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield
    for h in list(root.handlers):
        if h not in saved_handlers:
            root.removeHandler(h)
            h.close()
    for h in saved_handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(saved_level)
    logging.captureWarnings(False)
