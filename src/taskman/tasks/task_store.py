# tasks/task_store.py

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from .task_errors import FormatError, PersistenceError
from .task_models import Task, task_from_record, task_to_record

logger = logging.getLogger(__name__)


class JsonTaskStore:
    """
    JSON snapshot store.

    The whole collection is read and written as one document:
    - a missing file means "no tasks yet" (load returns None)
    - writes go to a sibling .tmp file and are moved into place with os.replace

    There is no cross-process locking; concurrent writers race and the last one wins.
    """

    def __init__(self, path: str | Path = "tasks.json") -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> list[Task] | None:
        if not self._path.exists():
            return None

        try:
            raw = self._path.read_text("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Cannot read task file {self._path}: {exc}") from exc

        if not raw.strip():
            logger.debug("Task file %s is empty; treating as no tasks.", self._path)
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Task file {self._path} is not valid JSON: {exc}") from exc

        if not isinstance(data, list):
            raise PersistenceError(f"Task file {self._path} must contain a JSON list of tasks")

        try:
            tasks = [task_from_record(r) for r in data]
        except FormatError as exc:
            raise PersistenceError(f"Task file {self._path} is malformed: {exc}") from exc

        seen: set[int] = set()
        for t in tasks:
            if t.id in seen:
                raise PersistenceError(f"Task file {self._path} contains duplicate id {t.id}")
            seen.add(t.id)

        logger.debug("Read %d task records from %s", len(tasks), self._path)
        return tasks

    def save(self, tasks: list[Task]) -> None:
        payload = json.dumps([task_to_record(t) for t in tasks], ensure_ascii=False, indent=2)
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload + "\n", "utf-8")
            os.replace(tmp, self._path)
        except OSError as exc:
            tmp.unlink(missing_ok=True)
            raise PersistenceError(f"Cannot write task file {self._path}: {exc}") from exc
        logger.debug("Wrote %d task records to %s", len(tasks), self._path)
