# tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from .task_errors import FormatError

MIN_PRIORITY = 1
MAX_PRIORITY = 5
DEFAULT_PRIORITY = 3

PRIORITY_GLYPH = "★"  # black star
DONE_GLYPH = "✓"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_priority(value: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and MIN_PRIORITY <= value <= MAX_PRIORITY


@dataclass(slots=True)
class Task:
    id: int
    description: str
    is_completed: bool = False
    priority: int = DEFAULT_PRIORITY
    created_at: datetime = field(default_factory=utc_now)
    due_date: date | None = None
    tags: list[str] = field(default_factory=list)

    def copy(self) -> Task:
        return Task(
            id=self.id,
            description=self.description,
            is_completed=self.is_completed,
            priority=self.priority,
            created_at=self.created_at,
            due_date=self.due_date,
            tags=list(self.tags),
        )

    def has_tag(self, tag: str) -> bool:
        needle = tag.casefold()
        return any(t.casefold() == needle for t in self.tags)

    def format(self, date_format: str = "%Y-%m-%d") -> str:
        """One-line console rendering: `[✓] [3] Write report ★★★★★ (Due: 2024-01-15) [work]`."""
        status = DONE_GLYPH if self.is_completed else " "
        stars = PRIORITY_GLYPH * self.priority
        due = f" (Due: {self.due_date.strftime(date_format)})" if self.due_date else ""
        tags = f" [{', '.join(self.tags)}]" if self.tags else ""
        return f"[{status}] [{self.id}] {self.description} {stars}{due}{tags}"

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True, slots=True)
class TaskStatistics:
    total_tasks: int = 0
    completed_tasks: int = 0
    pending_tasks: int = 0
    overdue_tasks: int = 0
    due_today: int = 0
    due_this_week: int = 0
    average_priority: float = 0.0
    total_tags: int = 0

    @property
    def completion_rate(self) -> float:
        if self.total_tasks == 0:
            return 0.0
        return self.completed_tasks * 100.0 / self.total_tasks


# ---- snapshot records ----
#
# One JSON object per task, PascalCase keys:
#   Id, Description, IsCompleted, Priority, CreatedAt, DueDate, Tags
# Decoding is lenient about key case and date shapes; encoding is canonical.

RECORD_KEYS = ("Id", "Description", "IsCompleted", "Priority", "CreatedAt", "DueDate", "Tags")


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "Id": task.id,
        "Description": task.description,
        "IsCompleted": task.is_completed,
        "Priority": task.priority,
        "CreatedAt": task.created_at.isoformat(),
        "DueDate": task.due_date.isoformat() if task.due_date else None,
        "Tags": list(task.tags),
    }


def _parse_created_at(raw: Any) -> datetime:
    if not isinstance(raw, str):
        raise FormatError(f"CreatedAt must be a string, got {type(raw).__name__}")
    try:
        dt = datetime.fromisoformat(raw.strip())
    except ValueError as exc:
        raise FormatError(f"Invalid CreatedAt timestamp: {raw!r}") from exc
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _parse_due_date(raw: Any) -> date | None:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise FormatError(f"DueDate must be a string or null, got {type(raw).__name__}")
    text = raw.strip()
    if not text:
        return None
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        # full timestamps are accepted; time of day is ignored
        return datetime.fromisoformat(text).date()
    except ValueError as exc:
        raise FormatError(f"Invalid DueDate: {raw!r}") from exc


def task_from_record(record: Any) -> Task:
    """Decode one snapshot record. Raises FormatError on anything malformed."""
    if not isinstance(record, dict):
        raise FormatError(f"Task record must be an object, got {type(record).__name__}")

    # Key lookup is case-insensitive.
    data = {str(k).lower(): v for k, v in record.items()}

    task_id = data.get("id")
    if not isinstance(task_id, int) or isinstance(task_id, bool):
        raise FormatError(f"Task record has missing or non-integer Id: {task_id!r}")

    description = data.get("description")
    if not isinstance(description, str) or not description.strip():
        raise FormatError(f"Task #{task_id} has an empty or missing Description")

    is_completed = data.get("iscompleted", False)
    if not isinstance(is_completed, bool):
        raise FormatError(f"Task #{task_id} has non-boolean IsCompleted: {is_completed!r}")

    priority = data.get("priority", DEFAULT_PRIORITY)
    if not is_valid_priority(priority):
        raise FormatError(f"Task #{task_id} has invalid Priority: {priority!r}")

    raw_created = data.get("createdat")
    created_at = utc_now() if raw_created is None else _parse_created_at(raw_created)

    tags = data.get("tags")
    if tags is None:
        tags = []
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise FormatError(f"Task #{task_id} has invalid Tags: {tags!r}")

    return Task(
        id=task_id,
        description=description,
        is_completed=is_completed,
        priority=priority,
        created_at=created_at,
        due_date=_parse_due_date(data.get("duedate")),
        tags=list(tags),
    )
