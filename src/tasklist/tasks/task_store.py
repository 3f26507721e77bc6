# src/tasklist/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .live_query import ChangeBus, LiveQuery
from .task_models import Task, TaskPriority

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

_ORDER_NEWEST_FIRST = "ORDER BY created_at DESC, id DESC"


class StorageError(Exception):
    """Raised when the SQLite medium fails (I/O, constraint, locked, disk full...)."""


def _seed_tasks() -> list[Task]:
    return [
        Task(title="Grocery shopping", description="Milk, bread, butter", priority=TaskPriority.MEDIUM),
        Task(title="Study for exam", description="Chapters 1-5", priority=TaskPriority.HIGH),
        Task(title="Exercise", description="30 minute walk", priority=TaskPriority.LOW),
    ]


class TaskStore:
    """
    SQLite task store.

    Schema policy (demo-grade, not for production data):
    - version lives in PRAGMA user_version,
    - a database with a different version gets its table dropped and recreated,
    - a brand-new database is seeded with a few example tasks.

    Thread-safety:
    - each method opens its own SQLite connection
    - writes are serialized by a store-level lock

    Every committed write notifies the change bus, which drives the live queries.
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3", *, seed_on_create: bool = True) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._write_lock = threading.Lock()
        self._changes = ChangeBus()

        created = self._ensure_schema()
        if created and seed_on_create:
            self.insert_many(_seed_tasks())
            logger.info("TaskStore seeded with example tasks")

        try:
            total = self.count_tasks()
        except StorageError:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    @property
    def db_path(self) -> Path:
        return self._db_path

    @property
    def changes(self) -> ChangeBus:
        return self._changes

    def close(self) -> None:
        """Drop live query listeners (connections are per call, nothing else to close)."""
        self._changes.clear()

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        except sqlite3.Error as e:
            raise StorageError(f"cannot open {self._db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> bool:
        """Create (or destructively recreate) the table. Returns True on first-ever creation."""
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            (version,) = cur.execute("PRAGMA user_version").fetchone()
            exists = (
                cur.execute(
                    "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'tasks'"
                ).fetchone()
                is not None
            )

            if exists and int(version) == SCHEMA_VERSION:
                return False

            if exists:
                logger.warning(
                    "TaskStore schema version %s != %s; dropping and recreating tasks table",
                    version,
                    SCHEMA_VERSION,
                )
                cur.execute("DROP TABLE tasks")

            cur.execute(
                """
                CREATE TABLE tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    description TEXT,
                    is_completed INTEGER NOT NULL DEFAULT 0,
                    priority INTEGER NOT NULL DEFAULT 0,
                    created_at INTEGER NOT NULL
                )
                """
            )
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_created ON tasks(created_at)")
            # PRAGMA does not accept bound parameters.
            cur.execute(f"PRAGMA user_version = {int(SCHEMA_VERSION)}")
            conn.commit()
            return not exists and int(version) == 0
        except sqlite3.Error as e:
            raise StorageError(f"schema setup failed: {e}") from e
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            title=str(row["title"] or ""),
            description=row["description"],
            is_completed=bool(row["is_completed"]),
            priority=TaskPriority.from_db(row["priority"]),
            created_at=int(row["created_at"] or 0),
        )

    @staticmethod
    def _task_params(task: Task) -> tuple[Any, ...]:
        return (
            task.title,
            task.description,
            1 if task.is_completed else 0,
            int(task.priority),
            int(task.created_at),
        )

    def _select(self, where: str = "", params: Iterable[Any] = ()) -> list[Task]:
        sql = f"SELECT * FROM tasks {where} {_ORDER_NEWEST_FIRST}"
        conn = self._get_conn()
        try:
            rows = conn.execute(sql, tuple(params)).fetchall()
            return [self._row_to_task(r) for r in rows]
        except sqlite3.Error as e:
            raise StorageError(f"query failed: {e}") from e
        finally:
            conn.close()

    def _write(self, sql: str, params: Iterable[Any] = ()) -> sqlite3.Cursor:
        """Run one write statement in its own transaction, then notify observers."""
        with self._write_lock:
            conn = self._get_conn()
            try:
                cur = conn.execute(sql, tuple(params))
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise StorageError(str(e)) from e
            finally:
                conn.close()
        self._changes.notify()
        return cur

    # ---- public API: reads ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)
        except sqlite3.Error as e:
            raise StorageError(f"count failed: {e}") from e
        finally:
            conn.close()

    def get_by_id(self, task_id: int) -> Task | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
            return self._row_to_task(row) if row else None
        except sqlite3.Error as e:
            raise StorageError(f"get_by_id failed: {e}") from e
        finally:
            conn.close()

    def list_all(self) -> list[Task]:
        return self._select()

    def list_by_status(self, is_completed: bool) -> list[Task]:
        return self._select("WHERE is_completed = ?", (1 if is_completed else 0,))

    def list_by_priority(self, priority: TaskPriority) -> list[Task]:
        return self._select("WHERE priority = ?", (int(priority),))

    # ---- public API: live queries ----

    def observe_all(self) -> LiveQuery[list[Task]]:
        return LiveQuery(self.list_all, self._changes, name="all")

    def observe_by_status(self, is_completed: bool) -> LiveQuery[list[Task]]:
        return LiveQuery(
            lambda: self.list_by_status(is_completed),
            self._changes,
            name=f"status={'done' if is_completed else 'active'}",
        )

    def observe_by_priority(self, priority: TaskPriority) -> LiveQuery[list[Task]]:
        priority = TaskPriority(priority)
        return LiveQuery(
            lambda: self.list_by_priority(priority),
            self._changes,
            name=f"priority={priority.label.lower()}",
        )

    # ---- public API: writes ----

    def insert(self, task: Task) -> int:
        """
        Store a task and return its id.

        id == 0 -> a fresh id is assigned (AUTOINCREMENT: never reused).
        id != 0 -> the row with that id is replaced.
        """
        if task.id:
            cur = self._write(
                """
                INSERT OR REPLACE INTO tasks(id, title, description, is_completed, priority, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (int(task.id), *self._task_params(task)),
            )
        else:
            cur = self._write(
                """
                INSERT INTO tasks(title, description, is_completed, priority, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                self._task_params(task),
            )

        rowid = cur.lastrowid
        if rowid is None:
            raise StorageError("SQLite did not return lastrowid for tasks insert")
        task_id = int(rowid)
        logger.debug("Task inserted id=%s priority=%s", task_id, task.priority.label)
        return task_id

    def insert_many(self, tasks: Iterable[Task]) -> list[int]:
        ids: list[int] = []
        with self._write_lock:
            conn = self._get_conn()
            try:
                for task in tasks:
                    cur = conn.execute(
                        """
                        INSERT INTO tasks(title, description, is_completed, priority, created_at)
                        VALUES (?, ?, ?, ?, ?)
                        """,
                        self._task_params(task),
                    )
                    ids.append(int(cur.lastrowid or 0))
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise StorageError(str(e)) from e
            finally:
                conn.close()
        self._changes.notify()
        return ids

    def update(self, task: Task) -> None:
        """Replace the row with task.id. created_at is left untouched. Unknown id is a no-op."""
        cur = self._write(
            """
            UPDATE tasks
            SET title = ?, description = ?, is_completed = ?, priority = ?
            WHERE id = ?
            """,
            (task.title, task.description, 1 if task.is_completed else 0, int(task.priority), int(task.id)),
        )
        if cur.rowcount == 0:
            logger.debug("Task update ignored: no row with id=%s", task.id)

    def delete(self, task: Task) -> None:
        cur = self._write("DELETE FROM tasks WHERE id = ?", (int(task.id),))
        logger.debug("Task delete id=%s removed=%s", task.id, cur.rowcount)

    def delete_completed(self) -> int:
        cur = self._write("DELETE FROM tasks WHERE is_completed = 1")
        removed = max(0, int(cur.rowcount))
        logger.debug("Completed tasks deleted count=%s", removed)
        return removed

    def delete_all(self) -> None:
        cur = self._write("DELETE FROM tasks")
        logger.debug("All tasks deleted count=%s", cur.rowcount)
