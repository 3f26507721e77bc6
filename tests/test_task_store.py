# tests/test_task_store.py

from __future__ import annotations

import sqlite3
import threading
import time
from dataclasses import replace
from pathlib import Path

import pytest

from tasklist.tasks.live_query import LiveQuery
from tasklist.tasks.task_models import Task, TaskPriority
from tasklist.tasks.task_store import SCHEMA_VERSION, StorageError, TaskStore

from .fakes import Recorder


WAIT = 10.0


def _ids(tasks: list[Task]) -> list[int]:
    return [t.id for t in tasks]


def test_insert_get_update_delete(store: TaskStore) -> None:
    task_id = store.insert(Task(title="Buy milk", description="2 liters"))
    assert task_id > 0

    got = store.get_by_id(task_id)
    assert got is not None
    assert got.title == "Buy milk"
    assert got.description == "2 liters"
    assert got.is_completed is False
    assert got.priority is TaskPriority.LOW

    store.update(replace(got, title="Buy oat milk", priority=TaskPriority.HIGH, is_completed=True))
    got2 = store.get_by_id(task_id)
    assert got2 is not None
    assert got2.title == "Buy oat milk"
    assert got2.priority is TaskPriority.HIGH
    assert got2.is_completed is True
    assert got2.created_at == got.created_at

    store.delete(got2)
    assert store.get_by_id(task_id) is None
    assert store.count_tasks() == 0


def test_ids_strictly_increase_even_after_delete(store: TaskStore) -> None:
    a = store.insert(Task(title="a"))
    b = store.insert(Task(title="b"))
    assert b > a

    store.delete_all()
    c = store.insert(Task(title="c"))
    assert c > b


def test_update_keeps_created_at(store: TaskStore) -> None:
    task_id = store.insert(Task(title="x", created_at=1_000))
    store.update(Task(id=task_id, title="y", created_at=999_999))
    got = store.get_by_id(task_id)
    assert got is not None
    assert got.title == "y"
    assert got.created_at == 1_000


def test_update_unknown_id_is_a_noop(store: TaskStore) -> None:
    store.insert(Task(title="kept"))
    store.update(Task(id=4242, title="ghost"))
    assert store.count_tasks() == 1
    assert store.get_by_id(4242) is None


def test_insert_with_existing_id_replaces_row(store: TaskStore) -> None:
    task_id = store.insert(Task(title="old"))
    assert store.insert(Task(id=task_id, title="new")) == task_id
    assert store.count_tasks() == 1
    got = store.get_by_id(task_id)
    assert got is not None and got.title == "new"


def test_observe_all_orders_newest_first(store: TaskStore) -> None:
    old = store.insert(Task(title="old", created_at=1_000))
    new = store.insert(Task(title="new", created_at=2_000))
    # Same created_at as "new": later insert wins the tie.
    tie = store.insert(Task(title="tie", created_at=2_000))

    assert _ids(store.observe_all().current()) == [tie, new, old]


def test_order_follows_created_at_not_insert_order(store: TaskStore) -> None:
    # Wall-clock stamps: a task stamped before an earlier one sorts below it.
    first = store.insert(Task(title="stamped later", created_at=5_000))
    second = store.insert(Task(title="stamped earlier", created_at=4_000))

    assert _ids(store.list_all()) == [first, second]


def test_filtered_queries(store: TaskStore) -> None:
    low = store.insert(Task(title="low", created_at=1))
    high = store.insert(Task(title="high", priority=TaskPriority.HIGH, created_at=2))
    done = store.insert(Task(title="done", is_completed=True, priority=TaskPriority.HIGH, created_at=3))

    assert _ids(store.observe_by_status(True).current()) == [done]
    assert _ids(store.observe_by_status(False).current()) == [high, low]
    assert _ids(store.observe_by_priority(TaskPriority.HIGH).current()) == [done, high]
    assert store.observe_by_priority(TaskPriority.MEDIUM).current() == []


def test_live_query_emits_on_subscribe_and_after_each_write(store: TaskStore) -> None:
    rec = Recorder()
    sub = store.observe_all().subscribe(rec)
    assert rec.values == [[]]

    a = store.insert(Task(title="a", created_at=1))
    b = store.insert(Task(title="b", created_at=2))
    assert _ids(rec.last) == [b, a]

    store.update(replace(rec.last[1], is_completed=True))
    assert rec.last[1].is_completed is True

    assert store.delete_completed() == 1
    assert _ids(rec.last) == [b]

    n_before = len(rec.values)
    sub.cancel()
    store.insert(Task(title="c"))
    assert len(rec.values) == n_before
    assert store.changes.listener_count() == 0


def test_filtered_live_query_tracks_status(store: TaskStore) -> None:
    rec = Recorder()
    store.observe_by_status(True).subscribe(rec)
    task_id = store.insert(Task(title="t"))
    assert rec.last == []

    got = store.get_by_id(task_id)
    assert got is not None
    store.update(replace(got, is_completed=True))
    assert _ids(rec.last) == [task_id]


def test_overlapping_writers_deliver_the_newest_snapshot_last(store: TaskStore) -> None:
    paused = threading.Event()
    resume = threading.Event()

    def query() -> list[Task]:
        snapshot = store.list_all()
        if threading.current_thread().name == "writer-a":
            paused.set()
            resume.wait(WAIT)
        return snapshot

    rec = Recorder()
    LiveQuery(query, store.changes, name="paused").subscribe(rec)

    writer_a = threading.Thread(target=store.insert, args=(Task(title="first"),), name="writer-a")
    writer_a.start()
    assert paused.wait(WAIT)

    writer_b = threading.Thread(target=store.insert, args=(Task(title="second"),), name="writer-b")
    writer_b.start()
    deadline = time.monotonic() + WAIT
    while store.count_tasks() < 2 and time.monotonic() < deadline:
        time.sleep(0.01)

    resume.set()
    writer_a.join(WAIT)
    writer_b.join(WAIT)

    assert _ids(rec.last) == _ids(store.list_all()) == [2, 1]


def test_concurrent_writers_end_consistent(store: TaskStore) -> None:
    rec = Recorder()
    store.observe_all().subscribe(rec)

    def write(prefix: str) -> None:
        for i in range(20):
            store.insert(Task(title=f"{prefix} {i}"))

    threads = [threading.Thread(target=write, args=(p,)) for p in ("a", "b")]
    for t in threads:
        t.start()
    for t in threads:
        t.join(WAIT)

    assert _ids(rec.last) == _ids(store.list_all())
    assert len(rec.last) == 40


def test_delete_completed_removes_exactly_completed(store: TaskStore) -> None:
    keep = [store.insert(Task(title=f"open {i}")) for i in range(3)]
    for i in range(2):
        store.insert(Task(title=f"done {i}", is_completed=True))

    assert store.delete_completed() == 2
    assert sorted(_ids(store.observe_all().current())) == keep
    assert store.delete_completed() == 0


def test_delete_all_empties_table(store: TaskStore) -> None:
    ids = [store.insert(Task(title=t)) for t in ("a", "b", "c")]
    rec = Recorder()
    store.observe_all().subscribe(rec)

    store.delete_all()
    assert rec.last == []
    assert all(store.get_by_id(i) is None for i in ids)


def test_broken_listener_does_not_fail_the_write(store: TaskStore) -> None:
    def boom(_tasks) -> None:
        raise RuntimeError("observer bug")

    # The initial emission happens inside subscribe(), so subscribe first with a
    # working callback and then break it.
    calls = {"n": 0}

    def flaky(tasks) -> None:
        calls["n"] += 1
        if calls["n"] > 1:
            boom(tasks)

    store.observe_all().subscribe(flaky)
    task_id = store.insert(Task(title="still stored"))
    assert store.get_by_id(task_id) is not None
    assert calls["n"] == 2


def test_not_null_violation_is_storage_error(store: TaskStore) -> None:
    with pytest.raises(StorageError):
        store.insert(Task(title=None))  # type: ignore[arg-type]
    assert store.count_tasks() == 0


def test_unusable_path_is_storage_error(tmp_path: Path) -> None:
    # A directory is not a database file.
    with pytest.raises(StorageError):
        TaskStore(tmp_path, seed_on_create=False)


def test_seeded_once_on_first_creation(tmp_path: Path) -> None:
    db = tmp_path / "seeded.sqlite3"
    store = TaskStore(db)
    titles = {t.title for t in store.observe_all().current()}
    assert titles == {"Grocery shopping", "Study for exam", "Exercise"}

    # Reopening an existing database does not seed again.
    again = TaskStore(db)
    assert again.count_tasks() == 3

    priorities = {t.title: t.priority for t in again.observe_all().current()}
    assert priorities["Study for exam"] is TaskPriority.HIGH
    assert priorities["Grocery shopping"] is TaskPriority.MEDIUM


def test_schema_version_mismatch_recreates_table(tmp_path: Path) -> None:
    db = tmp_path / "old.sqlite3"
    store = TaskStore(db, seed_on_create=False)
    store.insert(Task(title="from an older schema"))

    conn = sqlite3.connect(str(db))
    conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION + 1}")
    conn.commit()
    conn.close()

    reopened = TaskStore(db)
    # Destroyed, recreated, and not re-seeded.
    assert reopened.count_tasks() == 0
    conn = sqlite3.connect(str(db))
    (version,) = conn.execute("PRAGMA user_version").fetchone()
    conn.close()
    assert version == SCHEMA_VERSION
