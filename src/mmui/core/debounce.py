"""Debounced remote queries with last-write-wins resolution.

Typing into a filter (for example a batch's include expression) should not
send one query per keystroke. Every input bumps a version counter and
schedules a check after a quiescence window; when the check fires it only
proceeds if no newer input arrived in the meantime. When the query resolves,
its result is kept only if its version is still the latest input version,
so a slow response for an old input can never overwrite a newer one.

Timers are never cancelled: staleness is decided by comparing versions,
which keeps the behavior deterministic under test. There is no timeout: if
a query never resolves the state stays loading.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Generic, Protocol, TypeVar

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 0.5

V = TypeVar("V")
R = TypeVar("R")


class Timer(Protocol):
    def start(self) -> None:
        ...


TimerFactory = Callable[[float, Callable[[], None]], Timer]


def _thread_timer(interval: float, callback: Callable[[], None]) -> Timer:
    timer = threading.Timer(interval, callback)
    timer.daemon = True
    return timer


@dataclass(frozen=True)
class QueryState(Generic[V, R]):
    """
    Snapshot of a debounced query.

    Attributes:
        version: Latest input version (0 before any input).
        value: Latest input value.
        loading: True between committing an input and accepting its result.
        result: Last accepted result.
        error: Message of the last accepted failure, if any.
    """

    version: int = 0
    value: V | None = None
    loading: bool = False
    result: R | None = None
    error: str | None = None


class DebouncedQuery(Generic[V, R]):
    """Coalesces rapid inputs into a single fetch of the latest value."""

    def __init__(
        self,
        fetch: Callable[[V], R],
        *,
        window: float = DEFAULT_WINDOW_SECONDS,
        executor: Executor | None = None,
        timer_factory: TimerFactory = _thread_timer,
        on_change: Callable[[QueryState[V, R]], None] | None = None,
    ):
        self._fetch = fetch
        self._window = window
        self._executor = executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="mmui-query"
        )
        self._timer_factory = timer_factory
        self._on_change = on_change
        self._lock = threading.Lock()
        self._state: QueryState[V, R] = QueryState()
        self._closed = False

    def snapshot(self) -> QueryState[V, R]:
        with self._lock:
            return self._state

    def submit(self, value: V) -> int:
        """Record a new input and schedule its fetch; returns the input version."""
        with self._lock:
            version = self._state.version + 1
            self._state = QueryState(
                version=version,
                value=value,
                loading=self._state.loading,
                result=self._state.result,
                error=self._state.error,
            )
        self._timer_factory(self._window, lambda: self._fire(version)).start()
        return version

    def _fire(self, version: int) -> None:
        with self._lock:
            if self._closed:
                logger.debug("Ignored query input v%d after shutdown", version)
                return
            if version != self._state.version:
                logger.debug("Coalesced query input v%d (latest v%d)", version, self._state.version)
                return
            value = self._state.value
            self._state = QueryState(
                version=version,
                value=value,
                loading=True,
                result=self._state.result,
                error=None,
            )
        self._notify()
        try:
            future = self._executor.submit(self._fetch, value)
        except RuntimeError:
            # shutdown() raced this fire
            with self._lock:
                closed = self._closed
            if closed:
                logger.debug("Ignored query input v%d after shutdown", version)
                return
            raise
        future.add_done_callback(lambda f: self._resolve(version, f))

    def _resolve(self, version: int, future: Future[Any]) -> None:
        exc = future.exception()
        with self._lock:
            if version != self._state.version:
                logger.debug("Dropped stale query result v%d (latest v%d)", version, self._state.version)
                return
            if exc is not None:
                self._state = QueryState(
                    version=version, value=self._state.value, loading=False, error=str(exc)
                )
            else:
                self._state = QueryState(
                    version=version, value=self._state.value, loading=False, result=future.result()
                )
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.snapshot())

    def clear(self) -> int:
        """Forget the current input; pending fires and results become stale."""
        with self._lock:
            version = self._state.version + 1
            self._state = QueryState(version=version)
        self._notify()
        return version

    def shutdown(self, wait: bool = True) -> None:
        """Stop dispatching fetches; timers that fire later are ignored."""
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)
