# src/tasklist/ui/task_view_model.py

from __future__ import annotations

"""
Presentation state for the task list.

Intents (insert/update/delete/toggle/delete-completed) run on a single worker
thread owned by the view model and report their outcome through two signals,
last_error and last_success. Nothing is raised back to the caller.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace

from ..core.observable import SharedState, StateValue
from ..core.ports import TaskRepo
from ..tasks.task_models import Task
from ..tasks.task_repository import RepositoryError

logger = logging.getLogger(__name__)

MSG_TITLE_REQUIRED = "Title must not be empty"
MSG_ADDED = "Task added"
MSG_UPDATED = "Task updated"
MSG_DELETED = "Task deleted"


class _ValidationError(ValueError):
    pass


class TaskViewModel:
    def __init__(self, repository: TaskRepo, *, stop_timeout: float = 5.0) -> None:
        self._repository = repository

        self.tasks: SharedState[list[Task]] = SharedState(
            repository.all_tasks,
            [],
            stop_timeout=stop_timeout,
        )
        self.last_error: StateValue[str | None] = StateValue(None)
        self.last_success: StateValue[str | None] = StateValue(None)

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tasklist-vm")
        self._closed = False
        self._lifecycle_lock = threading.Lock()

    # ---- plumbing ----

    def _submit(self, name: str, job: Callable[[], None]) -> Future[None]:
        with self._lifecycle_lock:
            if not self._closed:
                return self._executor.submit(job)
        logger.warning("TaskViewModel is closed; dropping intent %s", name)
        fut: Future[None] = Future()
        fut.cancel()
        return fut

    def _fail(self, message: str) -> None:
        self.last_error.set(message)

    def _ok(self, message: str) -> None:
        self.last_success.set(message)

    # ---- intents ----

    def insert(self, task: Task) -> Future[None]:
        def job() -> None:
            try:
                if not task.title or not task.title.strip():
                    raise _ValidationError(MSG_TITLE_REQUIRED)
                task_id = self._repository.insert(task)
                logger.info("Task added id=%s", task_id)
                self._ok(MSG_ADDED)
            except _ValidationError as e:
                logger.info("Insert rejected: %s", e)
                self._fail(str(e))
            except RepositoryError as e:
                self._fail(e.message)
            except Exception as e:
                logger.exception("Unexpected error while inserting a task")
                self._fail(f"Unknown error: {e}")

        return self._submit("insert", job)

    def update(self, task: Task) -> Future[None]:
        def job() -> None:
            try:
                self._repository.update(task)
                self._ok(MSG_UPDATED)
            except RepositoryError as e:
                self._fail(e.message)
            except Exception as e:
                logger.exception("Unexpected error while updating task id=%s", task.id)
                self._fail(f"Error while updating: {e}")

        return self._submit("update", job)

    def delete(self, task: Task) -> Future[None]:
        def job() -> None:
            try:
                self._repository.delete(task)
                self._ok(MSG_DELETED)
            except RepositoryError as e:
                self._fail(e.message)
            except Exception as e:
                logger.exception("Unexpected error while deleting task id=%s", task.id)
                self._fail(f"Error while deleting: {e}")

        return self._submit("delete", job)

    def toggle_complete(self, task: Task) -> Future[None]:
        """Flip is_completed. Silent on success."""

        def job() -> None:
            try:
                self._repository.update(replace(task, is_completed=not task.is_completed))
            except Exception as e:
                logger.warning("toggle_complete failed id=%s: %s", task.id, e)
                self._fail(f"Error: {e}")

        return self._submit("toggle_complete", job)

    def delete_completed(self) -> Future[None]:
        def job() -> None:
            try:
                count = self._repository.delete_completed()
                self._ok(f"Deleted {count} completed tasks")
            except Exception as e:
                logger.exception("Unexpected error while deleting completed tasks")
                self._fail(f"Error while deleting: {e}")

        return self._submit("delete_completed", job)

    def clear_error(self) -> None:
        self.last_error.set(None)

    def clear_success(self) -> None:
        self.last_success.set(None)

    # ---- lifecycle ----

    def close(self) -> None:
        """Cancel queued intents, let a running one finish, stop observing the store."""
        with self._lifecycle_lock:
            if self._closed:
                return
            self._closed = True
            self._executor.shutdown(wait=False, cancel_futures=True)
        self.tasks.close()
        logger.debug("TaskViewModel closed")
