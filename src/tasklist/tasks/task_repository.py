# src/tasklist/tasks/task_repository.py

from __future__ import annotations

import logging

from ..core.ports import TaskDao
from .live_query import LiveQuery
from .task_models import Task, TaskPriority

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Single error kind for failed writes, whatever the storage failure was."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TaskRepository:
    """
    Thin layer between the view model and the store.

    Reads and live queries pass through unchanged. insert/update/delete
    collapse any failure into RepositoryError with a readable message.
    """

    def __init__(self, store: TaskDao) -> None:
        self._store = store
        self.all_tasks: LiveQuery[list[Task]] = store.observe_all()

    def tasks_by_status(self, is_completed: bool) -> LiveQuery[list[Task]]:
        return self._store.observe_by_status(is_completed)

    def tasks_by_priority(self, priority: TaskPriority) -> LiveQuery[list[Task]]:
        return self._store.observe_by_priority(priority)

    def get_by_id(self, task_id: int) -> Task | None:
        return self._store.get_by_id(task_id)

    def count(self) -> int:
        return self._store.count_tasks()

    def insert(self, task: Task) -> int:
        try:
            return self._store.insert(task)
        except Exception as e:
            logger.warning("insert failed title=%r: %s", task.title, e)
            raise RepositoryError(f"Error inserting task: {e}") from e

    def update(self, task: Task) -> None:
        try:
            self._store.update(task)
        except Exception as e:
            logger.warning("update failed id=%s: %s", task.id, e)
            raise RepositoryError(f"Error updating task: {e}") from e

    def delete(self, task: Task) -> None:
        try:
            self._store.delete(task)
        except Exception as e:
            logger.warning("delete failed id=%s: %s", task.id, e)
            raise RepositoryError(f"Error deleting task: {e}") from e

    def delete_completed(self) -> int:
        return self._store.delete_completed()

    def delete_all(self) -> None:
        self._store.delete_all()
