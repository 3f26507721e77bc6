# src/tasklist/core/observable.py

"""
Small observable primitives used between the store and the view.

- Subscription: handle returned by every subscribe(); cancel() is idempotent.
- StateValue: holds a current value, replays it to new observers and
  notifies on change. Equal values are conflated (no notification).
- SharedState: a StateValue fed by one upstream source that is only kept
  subscribed while somebody observes it, plus a grace period.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, Generic, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Subscription:
    def __init__(self, on_cancel: Callable[[], None] | None = None) -> None:
        self._on_cancel = on_cancel
        self._lock = threading.Lock()
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
            on_cancel, self._on_cancel = self._on_cancel, None
        if on_cancel is not None:
            on_cancel()


class Source(Protocol[T_co]):
    def subscribe(self, callback: Callable[[Any], None]) -> Subscription: ...


class StateValue(Generic[T]):
    def __init__(self, initial: T) -> None:
        self._value = initial
        self._version = 0
        # Held while delivering; reentrant so an observer may set() again.
        self._lock = threading.RLock()
        self._observers: dict[int, Callable[[T], None]] = {}
        self._next_key = 0

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        with self._lock:
            if value == self._value:
                return
            self._value = value
            self._version += 1
            version = self._version

            for cb in list(self._observers.values()):
                if self._version != version:
                    # A nested set() already delivered a newer value.
                    return
                self._deliver(cb, value)

    def subscribe(self, callback: Callable[[T], None], *, replay: bool = True) -> Subscription:
        with self._lock:
            key = self._next_key
            self._next_key += 1
            self._observers[key] = callback
            if replay:
                self._deliver(callback, self._value)

        def remove() -> None:
            with self._lock:
                self._observers.pop(key, None)

        return Subscription(remove)

    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    @staticmethod
    def _deliver(callback: Callable[[T], None], value: T) -> None:
        try:
            callback(value)
        except Exception:
            logger.exception("State observer failed")


class SharedState(Generic[T]):
    """
    Share one upstream subscription among any number of observers.

    The upstream is subscribed when the first observer attaches. When the last
    observer detaches, it stays subscribed for `stop_timeout` seconds; an observer
    attaching inside that window gets the cached snapshot and no new upstream
    query is started. The last value is kept after the upstream stops.
    """

    def __init__(
        self,
        upstream: Source[T],
        initial: T,
        *,
        stop_timeout: float = 5.0,
        timer_factory: Callable[[float, Callable[[], None]], Any] = threading.Timer,
    ) -> None:
        self._upstream = upstream
        self._state: StateValue[T] = StateValue(initial)
        self._stop_timeout = max(0.0, float(stop_timeout))
        self._timer_factory = timer_factory

        self._lock = threading.RLock()
        self._observers = 0
        self._upstream_sub: Subscription | None = None
        self._stop_timer: Any = None
        self._generation = 0
        self._closed = False

    @property
    def value(self) -> T:
        return self._state.value

    @property
    def upstream_active(self) -> bool:
        with self._lock:
            return self._upstream_sub is not None

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        with self._lock:
            if self._closed:
                raise RuntimeError("SharedState is closed")
            self._cancel_stop_timer()
            if self._upstream_sub is None:
                logger.debug("SharedState starting upstream %r", self._upstream)
                self._upstream_sub = self._upstream.subscribe(self._state.set)
            self._observers += 1

        inner = self._state.subscribe(callback)

        def release() -> None:
            inner.cancel()
            self._release()

        return Subscription(release)

    def _release(self) -> None:
        with self._lock:
            self._observers -= 1
            if self._observers > 0 or self._upstream_sub is None:
                return
            if self._stop_timeout <= 0:
                self._stop_upstream()
                return
            self._generation += 1
            generation = self._generation
            timer = self._timer_factory(self._stop_timeout, lambda: self._stop_if_idle(generation))
            if hasattr(timer, "daemon"):
                timer.daemon = True
            self._stop_timer = timer
            timer.start()

    def _stop_if_idle(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._stop_timer = None
            if self._observers == 0:
                self._stop_upstream()

    def _stop_upstream(self) -> None:
        sub, self._upstream_sub = self._upstream_sub, None
        if sub is not None:
            sub.cancel()
            logger.debug("SharedState stopped upstream %r", self._upstream)

    def _cancel_stop_timer(self) -> None:
        timer, self._stop_timer = self._stop_timer, None
        self._generation += 1
        if timer is not None:
            timer.cancel()

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._cancel_stop_timer()
            self._stop_upstream()
