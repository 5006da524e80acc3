# tests/fakes.py

from __future__ import annotations

from taskman.tasks.task_errors import PersistenceError
from taskman.tasks.task_models import Task


class MemoryTaskRepo:
    """
    In-memory TaskRepo for service unit tests.

    Stores copies so the service cannot mutate what was "persisted".
    """

    def __init__(self, tasks: list[Task] | None = None) -> None:
        self.stored = None if tasks is None else [t.copy() for t in tasks]
        self.saves = 0

    def load(self) -> list[Task] | None:
        if self.stored is None:
            return None
        return [t.copy() for t in self.stored]

    def save(self, tasks: list[Task]) -> None:
        self.stored = [t.copy() for t in tasks]
        self.saves += 1


class BrokenTaskRepo(MemoryTaskRepo):
    """Repo whose snapshot is unreadable."""

    def load(self) -> list[Task] | None:
        raise PersistenceError("snapshot is corrupt")
