"""Guarded execution of lifecycle requests.

A lifecycle request (start a batch, cancel a queue entry, ...) is sent to
the daemon in the background so the caller never blocks on the network.
Before a request goes out the lifecycle gate is checked again against the
latest known status, and at most one request per entity may be in flight;
a request that fails either check is dropped silently, without a network
call. When a request completes, the in-flight flag is cleared, the affected
list query is invalidated so views refetch, and a success or error message
is sent to the notifier.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, Protocol

from mmui.core.lifecycle import Action, LifecycleStatus, permitted
from mmui.core.models import Batch, QueueEntry

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Surface for user-visible outcome messages."""

    def success(self, msg: str) -> None:
        ...

    def error(self, msg: str) -> None:
        ...


class LifecycleAPI(Protocol):
    """REST operations the action runner can request."""

    def start_batch(self, name: str) -> None:
        ...

    def stop_batch(self, name: str) -> None:
        ...

    def reset_batch(self, name: str) -> None:
        ...

    def cancel_queue_entry(self, uuid: str) -> None:
        ...

    def retry_queue_entry(self, uuid: str) -> None:
        ...

    def delete_queue_entry(self, uuid: str) -> None:
        ...


class ActionRunner:
    """Runs lifecycle requests in the background, one at a time per entity."""

    def __init__(
        self,
        notifier: Notifier,
        invalidate: Callable[[str], None],
        executor: Executor | None = None,
    ):
        self._notifier = notifier
        self._invalidate = invalidate
        self._executor = executor or ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="mmui-action"
        )
        self._in_flight: set[str] = set()
        self._lock = threading.Lock()

    def in_flight(self, entity_key: str) -> bool:
        """Return True while a request for the entity is pending."""
        with self._lock:
            return entity_key in self._in_flight

    def submit(
        self,
        entity_key: str,
        status: LifecycleStatus | None,
        action: Action,
        call: Callable[[], object],
        *,
        query_key: str,
        success_message: str,
        error_message: str,
    ) -> Future[bool] | None:
        """
        Send a lifecycle request unless it is not permitted or one is pending.

        Args:
            entity_key: Identity of the entity (batch name, instance UUID).
            status: Latest known status of the entity.
            action: The requested action, re-checked against status.
            call: Performs the request; raising means the request failed.
            query_key: Cached query to invalidate after success.
            success_message: Notification sent after success.
            error_message: Prefix of the notification sent after failure.

        Returns:
            A future resolving to True on success and False on failure, or
            None if the request was suppressed.
        """
        if not permitted(status, action):
            logger.debug("Suppressed %s for %s: not permitted in status %s", action.value, entity_key, status)
            return None

        with self._lock:
            if entity_key in self._in_flight:
                logger.debug("Suppressed %s for %s: operation in flight", action.value, entity_key)
                return None
            self._in_flight.add(entity_key)

        try:
            return self._executor.submit(
                self._run, entity_key, call, query_key, success_message, error_message
            )
        except RuntimeError:
            self._release(entity_key)
            raise

    def _release(self, entity_key: str) -> None:
        with self._lock:
            self._in_flight.discard(entity_key)

    def _run(
        self,
        entity_key: str,
        call: Callable[[], object],
        query_key: str,
        success_message: str,
        error_message: str,
    ) -> bool:
        try:
            call()
        except Exception as exc:  # surface as a notification; callers keep running
            self._release(entity_key)
            logger.warning("%s: %s", error_message, exc)
            self._notifier.error(f"{error_message}. {exc}")
            return False

        self._release(entity_key)
        self._invalidate(query_key)
        self._notifier.success(success_message)
        return True

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


_BATCH_REQUESTS: dict[Action, tuple[str, str, str]] = {
    # action: (API method, past tense, gerund)
    Action.START: ("start_batch", "started", "starting"),
    Action.STOP: ("stop_batch", "stopped", "stopping"),
    Action.RESET: ("reset_batch", "reset", "resetting"),
}

_QUEUE_REQUESTS: dict[Action, tuple[str, str, str]] = {
    Action.CANCEL: ("cancel_queue_entry", "canceled", "cancelation"),
    Action.RETRY: ("retry_queue_entry", "retried", "retry"),
    Action.DELETE: ("delete_queue_entry", "deleted", "deletion"),
}


def request_batch_action(
    runner: ActionRunner, api: LifecycleAPI, batch: Batch, action: Action
) -> Future[bool] | None:
    """Request start, stop or reset of a batch."""
    if action not in _BATCH_REQUESTS:
        raise ValueError(f"'{action.value}' is not a batch action")
    method, done, doing = _BATCH_REQUESTS[action]
    return runner.submit(
        batch.name,
        batch.status,
        action,
        lambda: getattr(api, method)(batch.name),
        query_key="batches",
        success_message=f"Batch {batch.name} {done}",
        error_message=f"Error when {doing} batch {batch.name}",
    )


def request_queue_action(
    runner: ActionRunner, api: LifecycleAPI, entry: QueueEntry, action: Action
) -> Future[bool] | None:
    """Request cancel, retry or delete of a queue entry."""
    if action not in _QUEUE_REQUESTS:
        raise ValueError(f"'{action.value}' is not a queue entry action")
    method, done, noun = _QUEUE_REQUESTS[action]
    return runner.submit(
        entry.instance_uuid,
        entry.migration_status,
        action,
        lambda: getattr(api, method)(entry.instance_uuid),
        query_key="queue",
        success_message=f"Queue entry {entry.instance_uuid} {done}",
        error_message=f"Error during queue entry {noun}",
    )
