# src/tasklist/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.task_repository import TaskRepository
from ..tasks.task_store import TaskStore
from ..ui.task_view_model import TaskViewModel


@dataclass
class AppState:
    # Settings are kept on the state so commands can read paths/app name.
    settings: object

    task_store: TaskStore
    repository: TaskRepository
    view_model: TaskViewModel
