# tests/test_task_store.py

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from taskman.tasks.task_errors import PersistenceError
from taskman.tasks.task_models import Task
from taskman.tasks.task_service import TaskService
from taskman.tasks.task_store import JsonTaskStore


def test_missing_file_loads_as_none(tmp_path: Path) -> None:
    store = JsonTaskStore(tmp_path / "nope.json")
    assert store.load() is None


def test_save_writes_pascal_case_records(tmp_path: Path, sample_tasks: list[Task]) -> None:
    path = tmp_path / "sub" / "tasks.json"
    JsonTaskStore(path).save(sample_tasks)

    data = json.loads(path.read_text("utf-8"))
    assert [r["Id"] for r in data] == [1, 2, 3]
    assert set(data[0]) == {"Id", "Description", "IsCompleted", "Priority", "CreatedAt", "DueDate", "Tags"}
    assert data[0]["DueDate"] is None
    assert data[1]["DueDate"] == "2024-01-15"
    assert data[1]["IsCompleted"] is True
    assert not (tmp_path / "sub" / "tasks.json.tmp").exists()


def test_round_trip_preserves_records(tmp_path: Path, sample_tasks: list[Task]) -> None:
    store = JsonTaskStore(tmp_path / "tasks.json")
    store.save(sample_tasks)
    assert store.load() == sample_tasks


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        '{"Id": 1}',
        '[{"Description": "no id"}]',
        '[{"Id": 1, "Description": ""}]',
        '[{"Id": 1, "Description": "x", "Priority": 9}]',
        '[{"Id": 1, "Description": "a"}, {"Id": 1, "Description": "b"}]',
    ],
)
def test_malformed_file_raises_persistence_error(tmp_path: Path, content: str) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(content, "utf-8")

    with pytest.raises(PersistenceError):
        JsonTaskStore(path).load()


def test_service_round_trip_through_file(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    svc = TaskService(JsonTaskStore(path))
    svc.load()
    t1 = svc.add("Buy groceries", 4, tags=["shopping", "personal"])
    t2 = svc.add("Write report", 5, due_date=date(2024, 1, 15), tags=["work"])
    t3 = svc.add("Call dentist", 3)
    svc.complete(t1.id)
    svc.save()

    reloaded = TaskService(JsonTaskStore(path))
    reloaded.load()
    assert reloaded.snapshot() == svc.snapshot()

    reloaded.remove(t3.id)
    reloaded.save()

    final = TaskService(JsonTaskStore(path))
    final.load()
    tasks = final.get_all()
    assert len(tasks) == 2
    assert any(t.id == t1.id and t.is_completed for t in tasks)
    assert any(t.id == t2.id and not t.is_completed for t in tasks)


def test_service_load_of_corrupt_file_leaves_empty_list(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    path.write_text("[oops", "utf-8")
    svc = TaskService(JsonTaskStore(path))

    with pytest.raises(PersistenceError):
        svc.load()
    assert svc.get_all() == []


def test_save_into_unwritable_location_raises(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", "utf-8")
    store = JsonTaskStore(blocker / "tasks.json")

    with pytest.raises(PersistenceError):
        store.save([Task(id=1, description="a")])


@pytest.mark.parametrize("content", [b'[{"Id": 1, "Description": "\xff\xfe"}]', b"\xff[]"])
def test_non_utf8_file_raises_persistence_error(tmp_path: Path, content: bytes) -> None:
    path = tmp_path / "tasks.json"
    path.write_bytes(content)

    with pytest.raises(PersistenceError):
        JsonTaskStore(path).load()


def test_failed_replace_removes_temp_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "tasks.json"

    def fail_replace(src, dst):
        raise OSError("replace failed")

    monkeypatch.setattr("taskman.tasks.task_store.os.replace", fail_replace)

    with pytest.raises(PersistenceError):
        JsonTaskStore(path).save([Task(id=1, description="a")])
    assert not (tmp_path / "tasks.json.tmp").exists()
    assert not path.exists()
