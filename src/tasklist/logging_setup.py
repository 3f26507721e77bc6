# src/tasklist/logging_setup.py

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "tasklist.log"

# Intent outcomes already reach the user as notifications.
WORKER_THREAD_PREFIX = "tasklist-vm"

_PLUMBING_LOGGERS = (
    "tasklist.tasks.live_query",
    "tasklist.tasks.task_store",
    "tasklist.core.observable",
)


def resolve_level(level: str | int | None, default: int = logging.WARNING) -> int:
    """Accept "info", "WARNING", "10" or an int; anything else gives `default`."""
    if isinstance(level, int):
        return level
    text = str(level or "").strip()
    if text.isdigit():
        return int(text)
    value = logging.getLevelName(text.upper())
    return value if isinstance(value, int) else default


class _ConsoleNoiseFilter(logging.Filter):
    """
    The console shares the terminal with the task list and the prompt, so only
    let through what the user should act on:
    - store / live-query / observer records only at WARNING+
    - records from the intent worker only at WARNING+
    - anything outside tasklist (including py.warnings) only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if not name.startswith("tasklist."):
            return record.levelno >= logging.ERROR

        if name in _PLUMBING_LOGGERS or (record.threadName or "").startswith(WORKER_THREAD_PREFIX):
            return record.levelno >= logging.WARNING

        return True


def setup_logging(
    *,
    log_dir: str | Path = ".local/tasklist",
    console_level: str | int = logging.WARNING,
    file_level: str | int = logging.DEBUG,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> Path:
    """
    Console: short lines on stderr, filtered.
    File: everything at `file_level`, with thread names, rotated by size.

    Call once at startup. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(resolve_level(console_level))
    ch.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    fh.setLevel(resolve_level(file_level, logging.DEBUG))
    fh.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(fh)

    logging.captureWarnings(True)
    return log_file
