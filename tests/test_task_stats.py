# tests/test_task_stats.py

from __future__ import annotations

from datetime import date, timedelta

from taskman.tasks.task_models import Task
from taskman.tasks.task_stats import (
    compute_statistics,
    get_overdue,
    get_upcoming,
    group_by_priority,
    group_by_tag,
)

TODAY = date(2024, 3, 10)


def _task(task_id: int, *, priority: int = 3, done: bool = False, due: date | None = None, tags=None) -> Task:
    return Task(
        id=task_id,
        description=f"Task {task_id}",
        priority=priority,
        is_completed=done,
        due_date=due,
        tags=list(tags or []),
    )


def test_statistics_on_empty_list() -> None:
    stats = compute_statistics([], today=TODAY)

    assert stats.total_tasks == 0
    assert stats.pending_tasks == 0
    assert stats.completed_tasks == 0
    assert stats.completion_rate == 0.0
    assert stats.average_priority == 0.0
    assert stats.total_tags == 0


def test_overdue_and_due_today_counts() -> None:
    tasks = [
        _task(1, due=TODAY - timedelta(days=1)),
        _task(2, due=TODAY),
        _task(3, due=TODAY - timedelta(days=5), done=True),
    ]

    stats = compute_statistics(tasks, today=TODAY)
    assert stats.overdue_tasks == 1
    assert stats.due_today == 1

    overdue = get_overdue(tasks, today=TODAY)
    assert [t.id for t in overdue] == [1]


def test_counts_rates_and_averages() -> None:
    tasks = [
        _task(1, priority=5, tags=["work", "urgent"]),
        _task(2, priority=2, tags=["Work"]),
        _task(3, priority=4, done=True, tags=["home"]),
        _task(4, priority=1, done=True),
    ]

    stats = compute_statistics(tasks, today=TODAY)
    assert stats.total_tasks == 4
    assert stats.completed_tasks == 2
    assert stats.pending_tasks == 2
    assert stats.completion_rate == 50.0
    assert stats.average_priority == 3.5
    # distinct tags are case-sensitive: work, urgent, Work, home
    assert stats.total_tags == 4


def test_due_this_week_includes_today_and_day_seven() -> None:
    tasks = [
        _task(1, due=TODAY),
        _task(2, due=TODAY + timedelta(days=7)),
        _task(3, due=TODAY + timedelta(days=8)),
        _task(4, due=TODAY - timedelta(days=1)),
        _task(5, due=TODAY + timedelta(days=3), done=True),
        _task(6),
    ]

    stats = compute_statistics(tasks, today=TODAY)
    assert stats.due_this_week == 2


def test_group_by_priority_counts_pending_only_highest_first() -> None:
    tasks = [
        _task(1, priority=2),
        _task(2, priority=5),
        _task(3, priority=2),
        _task(4, priority=5, done=True),
        _task(5, priority=3),
    ]

    grouped = group_by_priority(tasks)
    assert grouped == {5: 1, 3: 1, 2: 2}
    assert list(grouped) == [5, 3, 2]


def test_group_by_tag_is_case_insensitive_and_most_used_first() -> None:
    tasks = [
        _task(1, tags=["home"]),
        _task(2, tags=["Work", "urgent"]),
        _task(3, tags=["work"], done=True),
        _task(4, tags=["WORK", "urgent"]),
    ]

    grouped = group_by_tag(tasks)
    assert grouped == {"Work": 3, "urgent": 2, "home": 1}
    assert list(grouped) == ["Work", "urgent", "home"]


def test_upcoming_sorted_by_due_date_within_window() -> None:
    tasks = [
        _task(1, due=TODAY + timedelta(days=3)),
        _task(2, due=TODAY),
        _task(3, due=TODAY + timedelta(days=10)),
        _task(4, due=TODAY + timedelta(days=1), done=True),
        _task(5, due=TODAY - timedelta(days=1)),
    ]

    assert [t.id for t in get_upcoming(tasks, today=TODAY)] == [2, 1]
    assert [t.id for t in get_upcoming(tasks, days=10, today=TODAY)] == [2, 1, 3]
    assert [t.id for t in get_upcoming(tasks, days=0, today=TODAY)] == [2]


def test_overdue_sorted_oldest_first() -> None:
    tasks = [
        _task(1, due=TODAY - timedelta(days=1)),
        _task(2, due=TODAY - timedelta(days=10)),
        _task(3, due=TODAY - timedelta(days=3)),
    ]

    assert [t.id for t in get_overdue(tasks, today=TODAY)] == [2, 3, 1]
