# src/tasklist/tasks/task_models.py

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import IntEnum


def now_ms() -> int:
    """Wall-clock epoch milliseconds; not monotonic across clock adjustments."""
    return time.time_ns() // 1_000_000


class TaskPriority(IntEnum):
    """
    Task priority.

    Stored as its integer value (0=low, 1=medium, 2=high).
    """

    LOW = 0
    MEDIUM = 1
    HIGH = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_db(cls, raw: int | None) -> TaskPriority:
        if raw is None:
            return cls.LOW
        try:
            return cls(int(raw))
        except Exception:
            return cls.LOW

    @classmethod
    def parse(cls, text: str) -> TaskPriority:
        """Accept a name ("high") or a number ("2")."""
        s = (text or "").strip()
        if s.isdigit():
            return cls(int(s))
        return cls[s.upper()]


@dataclass(slots=True)
class Task:
    title: str
    description: str | None = None
    is_completed: bool = False
    priority: TaskPriority = TaskPriority.LOW
    created_at: int = field(default_factory=now_ms)

    # 0 = not stored yet; the store assigns a fresh id on insert.
    id: int = 0
