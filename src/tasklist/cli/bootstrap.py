# src/tasklist/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once (or takes injected ones),
- ensures local (gitignored) directories exist,
- builds store -> repository -> view model explicitly and hands them to AppState.

There is no global store handle: whoever owns the AppState owns the store.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_repository import TaskRepository
from ..tasks.task_store import TaskStore
from ..ui.task_view_model import TaskViewModel

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = TaskStore(
        settings.tasks_db_path,
        seed_on_create=bool(getattr(settings, "seed_on_create", True)),
    )
    repository = TaskRepository(store)
    view_model = TaskViewModel(
        repository,
        stop_timeout=float(getattr(settings, "stop_timeout_seconds", 5.0)),
    )

    logger.debug("AppState wired db=%s", settings.tasks_db_path)
    return AppState(
        settings=settings,
        task_store=store,
        repository=repository,
        view_model=view_model,
    )


def shutdown_state(state: AppState) -> None:
    """Best-effort teardown (no exceptions should escape)."""
    try:
        state.view_model.close()
    except Exception:
        logger.exception("View model close failed.")

    try:
        state.task_store.close()
    except Exception:
        logger.debug("Task store close failed.", exc_info=True)
