# tasks/task_service.py

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from datetime import date

from ..core.ports import TaskRepo
from .task_errors import PersistenceError, ValidationError
from .task_models import (
    DEFAULT_PRIORITY,
    MAX_PRIORITY,
    MIN_PRIORITY,
    Task,
    is_valid_priority,
    utc_now,
)

logger = logging.getLogger(__name__)


def _validate_description(description: str | None) -> str:
    if description is None or not description.strip():
        raise ValidationError("Task description cannot be empty.")
    return description.strip()


def _validate_priority(priority: int) -> int:
    if not is_valid_priority(priority):
        raise ValidationError(f"Priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}.")
    return priority


def _clean_tags(tags: Iterable[str] | None) -> list[str]:
    if not tags:
        return []
    return [t.strip() for t in tags if t and t.strip()]


class TaskService:
    """
    In-memory task collection backed by a snapshot repo.

    The service is the only writer of the list. Callers get the live Task objects
    from queries but must mutate them through the service; statistics and export
    work on snapshot() copies.

    Ids:
    - next id = max(existing) + 1, or 1 for an empty collection
    - a high-water mark keeps ids from being reused within one service lifetime,
      even when the highest id is removed

    Thread-safety:
    - every public method takes the same re-entrant lock
    """

    def __init__(self, repo: TaskRepo) -> None:
        self._repo = repo
        self._tasks: list[Task] = []
        self._next_id = 1
        self._lock = threading.RLock()

    # ---- persistence ----

    def load(self) -> None:
        with self._lock:
            try:
                loaded = self._repo.load()
            except PersistenceError:
                self._tasks = []
                self._next_id = 1
                logger.error("Failed to load tasks; starting from an empty list.")
                raise

            if loaded is None:
                self._tasks = []
                logger.info("No existing task file found. Starting with empty task list.")
            else:
                self._tasks = list(loaded)
                logger.info("Loaded %d tasks", len(self._tasks))
            self._next_id = self._max_id() + 1

    def save(self) -> None:
        with self._lock:
            try:
                self._repo.save(self._tasks)
            except PersistenceError:
                logger.error("Failed to save %d tasks", len(self._tasks))
                raise
            logger.info("Saved %d tasks", len(self._tasks))

    # ---- helpers ----

    def _max_id(self) -> int:
        return max((t.id for t in self._tasks), default=0)

    def _allocate_id(self) -> int:
        nid = max(self._next_id, self._max_id() + 1)
        self._next_id = nid + 1
        return nid

    def _find(self, task_id: int) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    # ---- mutations ----

    def add(
        self,
        description: str,
        priority: int = DEFAULT_PRIORITY,
        due_date: date | None = None,
        tags: Iterable[str] | None = None,
    ) -> Task:
        text = _validate_description(description)
        _validate_priority(priority)

        with self._lock:
            task = Task(
                id=self._allocate_id(),
                description=text,
                priority=priority,
                created_at=utc_now(),
                due_date=due_date,
                tags=_clean_tags(tags),
            )
            self._tasks.append(task)
        logger.info("Added task #%s: %s", task.id, task.description)
        return task

    def remove(self, task_id: int) -> bool:
        with self._lock:
            task = self._find(task_id)
            if task is None:
                logger.info("Task #%s not found for removal", task_id)
                return False
            self._tasks.remove(task)
        logger.info("Removed task #%s", task_id)
        return True

    def complete(self, task_id: int) -> bool:
        with self._lock:
            task = self._find(task_id)
            if task is None:
                logger.info("Task #%s not found for completion", task_id)
                return False
            task.is_completed = True
        logger.info("Completed task #%s: %s", task.id, task.description)
        return True

    def update_description(self, task_id: int, new_description: str) -> bool:
        text = _validate_description(new_description)

        with self._lock:
            task = self._find(task_id)
            if task is None:
                logger.info("Task #%s not found for update", task_id)
                return False
            old = task.description
            task.description = text
        logger.info("Updated task #%s from %r to %r", task_id, old, text)
        return True

    def update_priority(self, task_id: int, priority: int) -> bool:
        _validate_priority(priority)

        with self._lock:
            task = self._find(task_id)
            if task is None:
                logger.info("Task #%s not found for priority update", task_id)
                return False
            task.priority = priority
        logger.info("Updated task #%s priority to %s", task_id, priority)
        return True

    def clear_completed(self) -> int:
        with self._lock:
            before = len(self._tasks)
            self._tasks = [t for t in self._tasks if not t.is_completed]
            removed = before - len(self._tasks)
        logger.info("Cleared %d completed tasks", removed)
        return removed

    def import_tasks(self, tasks: Iterable[Task], *, replace: bool = False) -> int:
        """
        Bring decoded tasks into the collection.

        replace=False: append each task under a freshly allocated id.
        replace=True:  swap the whole collection (imported ids must be unique).
        """
        incoming = [t.copy() for t in tasks]

        with self._lock:
            if replace:
                ids = [t.id for t in incoming]
                if len(ids) != len(set(ids)):
                    raise ValidationError("Imported tasks contain duplicate ids.")
                self._tasks = incoming
                self._next_id = self._max_id() + 1
            else:
                for t in incoming:
                    t.id = self._allocate_id()
                    self._tasks.append(t)

        logger.info("Imported %d tasks (replace=%s)", len(incoming), replace)
        return len(incoming)

    # ---- queries ----

    def get_all(self, include_completed: bool = True) -> list[Task]:
        with self._lock:
            if include_completed:
                return sorted(
                    self._tasks,
                    key=lambda t: (t.is_completed, -t.priority, t.created_at),
                )
            return sorted(
                (t for t in self._tasks if not t.is_completed),
                key=lambda t: (-t.priority, t.created_at),
            )

    def get_by_id(self, task_id: int) -> Task | None:
        with self._lock:
            return self._find(task_id)

    def search(self, query: str) -> list[Task]:
        """Case-insensitive substring match on description or any tag."""
        if not query or not query.strip():
            return []
        needle = query.casefold()
        with self._lock:
            return [
                t
                for t in self._tasks
                if needle in t.description.casefold() or any(needle in tag.casefold() for tag in t.tags)
            ]

    def get_by_tag(self, tag: str) -> list[Task]:
        """Case-insensitive exact tag match."""
        if not tag or not tag.strip():
            return []
        with self._lock:
            return [t for t in self._tasks if t.has_tag(tag)]

    def snapshot(self) -> list[Task]:
        with self._lock:
            return [t.copy() for t in self._tasks]

    def count(self) -> int:
        with self._lock:
            return len(self._tasks)
