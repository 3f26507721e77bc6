# src/tasklist/ui/render.py

from __future__ import annotations

from datetime import datetime

from ..tasks.task_models import Task

EMPTY_LIST_TEXT = "No tasks yet. Use /add <title> to create one."
NO_DESCRIPTION = "No description"


def _created_local(task: Task) -> str:
    return datetime.fromtimestamp(task.created_at / 1000).astimezone().strftime("%Y-%m-%d %H:%M")


def format_task_line(task: Task) -> str:
    mark = "[x]" if task.is_completed else "[ ]"
    line = f"  {mark} #{task.id:<4} {task.title}  ({task.priority.label})"
    if task.description:
        line += f"\n           {task.description}"
    return line


def format_task_list(tasks: list[Task], *, heading: str = "Tasks") -> str:
    if not tasks:
        return EMPTY_LIST_TEXT
    lines = [f"{heading} ({len(tasks)}):"]
    lines.extend(format_task_line(t) for t in tasks)
    return "\n".join(lines)


def format_task_details(task: Task) -> str:
    status = "Completed" if task.is_completed else "Active"
    return (
        f"Task #{task.id}\n"
        f"  Title: {task.title}\n"
        f"  Description: {task.description or NO_DESCRIPTION}\n"
        f"  Priority: {task.priority.label}\n"
        f"  Status: {status}\n"
        f"  Created: {_created_local(task)}"
    )
