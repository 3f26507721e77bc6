# src/tasklist/tasks/live_query.py

from __future__ import annotations

"""
Live queries over the task table.

The store owns a ChangeBus and notifies it after every committed write.
A LiveQuery re-runs its SQL on each notification and pushes the whole
snapshot to its subscriber (no incremental deltas).
"""

import logging
import threading
from collections.abc import Callable
from typing import Generic, TypeVar

from ..core.observable import Subscription

logger = logging.getLogger(__name__)

T = TypeVar("T")

ChangeListener = Callable[[], None]


class ChangeBus:
    """Publish/subscribe channel driven by the store after each commit."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: dict[int, ChangeListener] = {}
        self._next_key = 0

    def add_listener(self, listener: ChangeListener) -> Callable[[], None]:
        with self._lock:
            key = self._next_key
            self._next_key += 1
            self._listeners[key] = listener

        def remove() -> None:
            with self._lock:
                self._listeners.pop(key, None)

        return remove

    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners.values())

        for listener in listeners:
            try:
                listener()
            except Exception:
                # A broken observer must not fail the write that triggered it.
                logger.exception("Change listener failed")

    def clear(self) -> None:
        with self._lock:
            self._listeners.clear()


class LiveQuery(Generic[T]):
    """
    A subscribable query.

    subscribe(callback):
    - emits the current snapshot immediately,
    - re-emits the full snapshot after every committed write,
    - until the returned Subscription is cancelled.
    """

    def __init__(self, query: Callable[[], T], changes: ChangeBus, *, name: str = "query") -> None:
        self._query = query
        self._changes = changes
        self.name = name

    def current(self) -> T:
        """Run the query once, without subscribing."""
        return self._query()

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        # One lock per subscription around query and delivery: the last snapshot
        # delivered is never older than the last commit.
        deliver_lock = threading.RLock()
        sub: Subscription | None = None

        def on_change() -> None:
            with deliver_lock:
                if sub is not None and not sub.active:
                    return
                callback(self._query())

        # Register before the first read so a write landing in between is not missed.
        remove = self._changes.add_listener(on_change)
        sub = Subscription(remove)
        try:
            on_change()
        except Exception:
            sub.cancel()
            raise
        logger.debug("LiveQuery subscribed name=%s", self.name)
        return sub

    def __repr__(self) -> str:
        return f"LiveQuery({self.name!r})"
