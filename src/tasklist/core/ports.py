# src/tasklist/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The repository depends on a storage Protocol and the view model on a
repository Protocol, so tests can swap either for an in-memory fake.
"""

from typing import Any, Protocol


class TaskDao(Protocol):
    """Storage port (implemented by tasks.task_store.TaskStore)."""

    def insert(self, task: Any) -> int: ...
    def update(self, task: Any) -> None: ...
    def delete(self, task: Any) -> None: ...
    def delete_completed(self) -> int: ...
    def delete_all(self) -> None: ...

    def get_by_id(self, task_id: int) -> Any | None: ...
    def count_tasks(self) -> int: ...

    # Live queries (tasks.live_query.LiveQuery)
    def observe_all(self) -> Any: ...
    def observe_by_status(self, is_completed: bool) -> Any: ...
    def observe_by_priority(self, priority: Any) -> Any: ...


class TaskRepo(Protocol):
    """Repository port used by the view model and the console commands."""

    all_tasks: Any

    def tasks_by_status(self, is_completed: bool) -> Any: ...
    def tasks_by_priority(self, priority: Any) -> Any: ...
    def get_by_id(self, task_id: int) -> Any | None: ...
    def count(self) -> int: ...

    def insert(self, task: Any) -> int: ...
    def update(self, task: Any) -> None: ...
    def delete(self, task: Any) -> None: ...
    def delete_completed(self) -> int: ...
    def delete_all(self) -> None: ...
