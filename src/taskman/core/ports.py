# src/taskman/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The collection service depends on a Protocol rather than the concrete JSON store,
so tests can hand it an in-memory repo.
"""

from typing import Protocol

from ..tasks.task_models import Task


class TaskRepo(Protocol):
    """Whole-collection snapshot persistence."""

    def load(self) -> list[Task] | None:
        """Return the stored tasks, or None when nothing has been stored yet."""
        ...

    def save(self, tasks: list[Task]) -> None: ...
