# src/tasklist/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from concurrent.futures import CancelledError, Future
from typing import cast

from ..core.state import AppState
from ..tasks.task_models import Task, TaskPriority
from ..ui.render import format_task_details, format_task_list

CommandEmitter = Callable[[str], None]
CommandConfirm = Callable[[str], bool]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler4 = Callable[
    [AppState, list[str], CommandEmitter | None, CommandConfirm | None], str
]
CommandHandler = CommandHandler2 | CommandHandler4

# How long a command waits for its intent to be applied before giving up on the redraw.
INTENT_WAIT_SECONDS = 30.0

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
        confirm: CommandConfirm | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 4

        if nparams >= 4:
            h4 = cast(CommandHandler4, handler)
            return h4(state, args, emit, confirm)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  /exit - Quit.")
        return "\n".join(lines)


registry = CommandRegistry()


def _parse_id(args: list[str]) -> int | None:
    if not args:
        return None
    try:
        return int(args[0].lstrip("#"))
    except ValueError:
        return None


def _lookup(state: AppState, args: list[str], usage: str) -> Task | str:
    task_id = _parse_id(args)
    if task_id is None:
        return usage
    task = state.repository.get_by_id(task_id)
    if task is None:
        return f"No task with id {task_id}."
    return task


def _wait(fut: Future[None]) -> bool:
    try:
        fut.result(timeout=INTENT_WAIT_SECONDS)
        return True
    except CancelledError:
        return False
    except TimeoutError:
        logger.warning("Intent still running after %.0fs", INTENT_WAIT_SECONDS)
        return False


def _current_list(state: AppState) -> str:
    return format_task_list(state.view_model.tasks.value)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    app_name = str(getattr(state.settings, "app_name", "tasklist"))
    return (
        f"{app_name} status:\n"
        f"  Database: {state.task_store.db_path}\n"
        f"  Tasks stored: {state.repository.count()}"
    )


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list           -> all tasks, newest first
    /list active    -> not completed
    /list done      -> completed
    /list low|medium|high
    """
    if not args or args[0].lower() == "all":
        return _current_list(state)

    sub = args[0].lower()
    if sub in ("active", "open"):
        return format_task_list(state.repository.tasks_by_status(False).current(), heading="Active tasks")
    if sub in ("done", "completed"):
        return format_task_list(state.repository.tasks_by_status(True).current(), heading="Completed tasks")

    try:
        priority = TaskPriority.parse(sub)
    except (KeyError, ValueError):
        return "Usage: /list [all|active|done|low|medium|high]"
    return format_task_list(
        state.repository.tasks_by_priority(priority).current(),
        heading=f"{priority.label} priority tasks",
    )


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title>
    /add <title> | <description>
    """
    raw = " ".join(args)
    title, _, description = raw.partition("|")
    task = Task(
        title=title.strip(),
        description=description.strip() or None,
        priority=TaskPriority.LOW,
    )
    _wait(state.view_model.insert(task))
    return _current_list(state)


def cmd_show(state: AppState, args: list[str]) -> str:
    found = _lookup(state, args, "Usage: /show <id>")
    if isinstance(found, str):
        return found
    return format_task_details(found)


def cmd_toggle(state: AppState, args: list[str]) -> str:
    found = _lookup(state, args, "Usage: /done <id>")
    if isinstance(found, str):
        return found
    _wait(state.view_model.toggle_complete(found))
    return _current_list(state)


def cmd_delete(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None = None,
    confirm: CommandConfirm | None = None,
) -> str:
    found = _lookup(state, args, "Usage: /delete <id>")
    if isinstance(found, str):
        return found
    if confirm is not None and not confirm(f"Delete '{found.title}'?"):
        return "Cancelled."
    _wait(state.view_model.delete(found))
    return _current_list(state)


def cmd_clear_done(
    state: AppState,
    args: list[str],
    emit: CommandEmitter | None = None,
    confirm: CommandConfirm | None = None,
) -> str:
    if confirm is not None and not confirm("Delete all completed tasks?"):
        return "Cancelled."
    _wait(state.view_model.delete_completed())
    return _current_list(state)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "list", cmd_list, help_text="Show tasks: /list [all|active|done|low|medium|high].", aliases=["ls"]
)
registry.register("add", cmd_add, help_text="Add a task: /add <title> [| <description>].")
registry.register("show", cmd_show, help_text="Show task details: /show <id>.")
registry.register("done", cmd_toggle, help_text="Toggle completion: /done <id>.", aliases=["toggle"])
registry.register("delete", cmd_delete, help_text="Delete a task (asks first): /delete <id>.", aliases=["rm"])
registry.register("clear-done", cmd_clear_done, help_text="Delete all completed tasks (asks first).")
registry.register("status", cmd_status, help_text="Show database path and task count.")
