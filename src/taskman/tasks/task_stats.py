# tasks/task_stats.py

"""
Read-only statistics over a task snapshot.

All date comparisons are date-only. "today" defaults to the current UTC date;
pass it explicitly for deterministic results.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, timedelta

from .task_models import Task, TaskStatistics, utc_now

logger = logging.getLogger(__name__)

WEEK_DAYS = 7


def utc_today() -> date:
    return utc_now().date()


def _pending(tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if not t.is_completed]


def _due_between(task: Task, start: date, end: date) -> bool:
    return task.due_date is not None and start <= task.due_date <= end


def compute_statistics(tasks: Iterable[Task], today: date | None = None) -> TaskStatistics:
    items = list(tasks)
    if today is None:
        today = utc_today()
    week_end = today + timedelta(days=WEEK_DAYS)

    pending = _pending(items)
    completed = len(items) - len(pending)

    overdue = sum(1 for t in pending if t.due_date is not None and t.due_date < today)
    due_today = sum(1 for t in pending if t.due_date == today)
    due_week = sum(1 for t in pending if _due_between(t, today, week_end))

    avg_priority = sum(t.priority for t in pending) / len(pending) if pending else 0.0
    distinct_tags = {tag for t in items for tag in t.tags}

    stats = TaskStatistics(
        total_tasks=len(items),
        completed_tasks=completed,
        pending_tasks=len(pending),
        overdue_tasks=overdue,
        due_today=due_today,
        due_this_week=due_week,
        average_priority=avg_priority,
        total_tags=len(distinct_tags),
    )
    logger.debug("Computed statistics for %d tasks (today=%s)", len(items), today)
    return stats


def group_by_priority(tasks: Iterable[Task]) -> dict[int, int]:
    """Pending task counts per priority, highest priority first."""
    counts: dict[int, int] = {}
    for t in _pending(tasks):
        counts[t.priority] = counts.get(t.priority, 0) + 1
    return {p: counts[p] for p in sorted(counts, reverse=True)}


def group_by_tag(tasks: Iterable[Task]) -> dict[str, int]:
    """
    Tag usage counts across all tasks (completed included).

    Tags are grouped case-insensitively; the first spelling seen names the group.
    Most used first; ties keep first-seen order.
    """
    names: dict[str, str] = {}
    counts: dict[str, int] = {}
    for t in tasks:
        for tag in t.tags:
            key = tag.casefold()
            if key not in names:
                names[key] = tag
                counts[key] = 0
            counts[key] += 1
    ordered = sorted(counts, key=lambda k: counts[k], reverse=True)
    return {names[k]: counts[k] for k in ordered}


def get_overdue(tasks: Iterable[Task], today: date | None = None) -> list[Task]:
    if today is None:
        today = utc_today()
    overdue = [t for t in _pending(tasks) if t.due_date is not None and t.due_date < today]
    return sorted(overdue, key=lambda t: t.due_date or today)


def get_upcoming(tasks: Iterable[Task], days: int = WEEK_DAYS, today: date | None = None) -> list[Task]:
    if today is None:
        today = utc_today()
    end = today + timedelta(days=days)
    upcoming = [t for t in _pending(tasks) if _due_between(t, today, end)]
    return sorted(upcoming, key=lambda t: t.due_date or today)
