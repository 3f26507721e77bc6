# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from tasklist.cli.bootstrap import create_initial_state, shutdown_state
from tasklist.core.state import AppState
from tasklist.tasks.task_repository import TaskRepository
from tasklist.tasks.task_store import TaskStore
from tasklist.ui.task_view_model import TaskViewModel


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the composition root.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="tasklist-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        tasks_db_path=tmp_path / "data" / "tasks.sqlite3",
        # Empty store by default; seeding has its own tests.
        seed_on_create=False,
        # Stop the shared query as soon as the last observer leaves.
        stop_timeout_seconds=0.0,
    )


@pytest.fixture()
def store(tmp_path: Path) -> TaskStore:
    return TaskStore(tmp_path / "tasks.sqlite3", seed_on_create=False)


@pytest.fixture()
def repository(store: TaskStore) -> TaskRepository:
    return TaskRepository(store)


@pytest.fixture()
def view_model(repository: TaskRepository):
    vm = TaskViewModel(repository, stop_timeout=0.0)
    yield vm
    vm.close()


@pytest.fixture()
def state(settings: SimpleNamespace):
    """
    AppState wired by the real composition root.

    NOTE: the store is real SQLite in tmp_path because its behavior is part of
    what we want to test.
    """
    app_state: AppState = create_initial_state(settings=settings)
    yield app_state
    shutdown_state(app_state)
