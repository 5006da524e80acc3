# tasks/task_export.py

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from datetime import datetime
from enum import StrEnum
from pathlib import Path

from .task_errors import FormatError, NotFoundError
from .task_models import PRIORITY_GLYPH, Task, task_from_record, task_to_record

logger = logging.getLogger(__name__)

CSV_HEADER = "Id,Description,IsCompleted,Priority,CreatedAt,DueDate,Tags"
CALENDAR_GLYPH = "\U0001f4c5"


class ExportFormat(StrEnum):
    CSV = "csv"
    MARKDOWN = "markdown"
    JSON = "json"

    @property
    def extension(self) -> str:
        return "md" if self is ExportFormat.MARKDOWN else self.value

    @classmethod
    def parse(cls, raw: str) -> ExportFormat:
        key = (raw or "").strip().lower()
        if key == "md":
            return cls.MARKDOWN
        try:
            return cls(key)
        except ValueError:
            raise FormatError(f"Unknown export format: {raw!r} (use csv, markdown or json)") from None


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def to_csv(tasks: Iterable[Task]) -> str:
    lines = [CSV_HEADER]
    for t in tasks:
        due = t.due_date.strftime("%Y-%m-%d") if t.due_date else ""
        lines.append(
            ",".join(
                [
                    str(t.id),
                    _quote(t.description),
                    "Yes" if t.is_completed else "No",
                    str(t.priority),
                    t.created_at.strftime("%Y-%m-%d %H:%M:%S"),
                    due,
                    _quote("|".join(t.tags)),
                ]
            )
        )
    return "\n".join(lines) + "\n"


def _md_tags(task: Task) -> str:
    if not task.tags:
        return ""
    return " " + " ".join(f"`{tag}`" for tag in task.tags)


def to_markdown(tasks: Iterable[Task], exported_at: datetime | None = None) -> str:
    items = list(tasks)
    if exported_at is None:
        exported_at = datetime.now()

    # sorted() is stable: equal priorities keep collection order
    pending = sorted((t for t in items if not t.is_completed), key=lambda t: t.priority, reverse=True)
    completed = sorted((t for t in items if t.is_completed), key=lambda t: t.id)

    out = ["# Task List", "", f"*Exported on {exported_at:%Y-%m-%d %H:%M:%S}*", ""]

    if pending:
        out += ["## Pending Tasks", ""]
        for t in pending:
            stars = PRIORITY_GLYPH * t.priority
            due = f" {CALENDAR_GLYPH} {t.due_date:%Y-%m-%d}" if t.due_date else ""
            out.append(f"- [ ] **#{t.id}** {t.description} {stars}{due}{_md_tags(t)}")
        out.append("")

    if completed:
        out += ["## Completed Tasks", ""]
        for t in completed:
            out.append(f"- [x] **#{t.id}** {t.description}{_md_tags(t)}")
        out.append("")

    out.append("---")
    out.append(f"*Total: {len(items)} tasks ({len(pending)} pending, {len(completed)} completed)*")
    return "\n".join(out) + "\n"


def to_json(tasks: Iterable[Task]) -> str:
    return json.dumps([task_to_record(t) for t in tasks], ensure_ascii=False, indent=2)


def from_json(text: str) -> list[Task]:
    try:
        data = json.loads(text)
    except (TypeError, json.JSONDecodeError) as exc:
        raise FormatError(f"Invalid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise FormatError("Expected a JSON list of task records")
    return [task_from_record(r) for r in data]


def read_json_file(path: str | Path) -> list[Task]:
    p = Path(path)
    if not p.exists():
        raise NotFoundError(f"Import file not found: {p}")
    try:
        text = p.read_text("utf-8")
    except UnicodeDecodeError as exc:
        raise FormatError(f"Import file {p} is not valid UTF-8: {exc}") from exc
    tasks = from_json(text)
    logger.info("Imported %d tasks from JSON: %s", len(tasks), p)
    return tasks


def render(tasks: Iterable[Task], fmt: ExportFormat) -> str:
    if fmt is ExportFormat.CSV:
        return to_csv(tasks)
    if fmt is ExportFormat.MARKDOWN:
        return to_markdown(tasks)
    return to_json(tasks)


def default_export_filename(fmt: ExportFormat, now: datetime | None = None) -> str:
    if now is None:
        now = datetime.now()
    return f"tasks-export-{now:%Y%m%d-%H%M%S}.{fmt.extension}"


def write_export(tasks: Iterable[Task], fmt: ExportFormat, path: str | Path) -> Path:
    items = list(tasks)
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(render(items, fmt), "utf-8")
    logger.info("Exported %d tasks to %s: %s", len(items), fmt.value, p)
    return p
