# tests/test_bootstrap.py

from __future__ import annotations

from types import SimpleNamespace

from tasklist.cli.bootstrap import create_initial_state, shutdown_state
from tasklist.tasks.task_models import Task


def test_composition_root_wires_one_store(settings: SimpleNamespace) -> None:
    state = create_initial_state(settings=settings)
    try:
        assert settings.data_dir.is_dir()
        assert state.task_store.db_path == settings.tasks_db_path
        assert state.repository.count() == 0

        state.view_model.insert(Task(title="wired")).result(10)
        assert state.task_store.count_tasks() == 1
    finally:
        shutdown_state(state)

    # Teardown is idempotent and drops listeners.
    shutdown_state(state)
    assert state.task_store.changes.listener_count() == 0


def test_first_run_is_seeded(settings: SimpleNamespace) -> None:
    settings.seed_on_create = True
    state = create_initial_state(settings=settings)
    try:
        assert state.repository.count() == 3
    finally:
        shutdown_state(state)
