"""Lifecycle statuses and the actions they permit.

Batches and queue entries are long-running entities whose status is owned
by the migration daemon. The console never changes a status itself; it only
requests a transition (start, stop, cancel, ...) and shows whatever the
daemon reports afterwards. The predicates in this module decide which of
those requests make sense for the status currently known, both to enable
controls and to re-check right before a request is sent.

Every status family is its own closed enumeration. Values the daemon sends
that are not part of the enumeration decode to None, which permits nothing.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Protocol

if TYPE_CHECKING:
    from mmui.core.models import Batch, QueueEntry


class Action(str, Enum):
    """Lifecycle operations that can be requested from the daemon."""

    START = "start"
    STOP = "stop"
    RESET = "reset"
    CANCEL = "cancel"
    RETRY = "retry"
    DELETE = "delete"


class LifecycleStatus(Protocol):
    """Interface shared by all status enumerations."""

    def permitted_actions(self) -> frozenset[Action]:
        """Return the actions that may be requested in this status."""
        ...


class BatchStatus(str, Enum):
    """
    Status of a migration batch.

    The daemon encodes these as integers (1 = Defined ... 6 = Error, with
    0 meaning Unknown) on the wire; the string values are their display names.
    """

    DEFINED = "Defined"
    QUEUED = "Queued"
    RUNNING = "Running"
    STOPPED = "Stopped"
    FINISHED = "Finished"
    ERROR = "Error"

    def permitted_actions(self) -> frozenset[Action]:
        return _BATCH_PERMISSIONS[self]


class MigrationStatus(str, Enum):
    """Status of a single queued instance migration, as reported verbatim."""

    BLOCKED = "Blocked"
    WAITING = "Waiting"
    CREATING = "Creating new VM"
    BACKGROUND_IMPORT = "Performing background import tasks"
    IDLE = "Idle"
    FINAL_IMPORT = "Performing final import tasks"
    POST_IMPORT = "Performing post-import tasks"
    FINISHED = "Finished"
    ERROR = "Error"
    CANCELED = "Canceled"

    def permitted_actions(self) -> frozenset[Action]:
        actions = {Action.RETRY} if self is MigrationStatus.CANCELED else {Action.CANCEL}
        if self in (MigrationStatus.ERROR, MigrationStatus.FINISHED):
            actions.add(Action.DELETE)
        return frozenset(actions)


_BATCH_PERMISSIONS: dict[BatchStatus, frozenset[Action]] = {
    BatchStatus.DEFINED: frozenset({Action.START}),
    BatchStatus.QUEUED: frozenset({Action.STOP}),
    BatchStatus.RUNNING: frozenset({Action.STOP, Action.RESET}),
    BatchStatus.STOPPED: frozenset({Action.START}),
    BatchStatus.FINISHED: frozenset(),
    BatchStatus.ERROR: frozenset({Action.START}),
}

# Wire order of the daemon's integer batch status; index 0 is Unknown.
_BATCH_STATUS_BY_CODE: tuple[BatchStatus | None, ...] = (
    None,
    BatchStatus.DEFINED,
    BatchStatus.QUEUED,
    BatchStatus.RUNNING,
    BatchStatus.STOPPED,
    BatchStatus.FINISHED,
    BatchStatus.ERROR,
)

BATCH_ACTIONS = (Action.START, Action.STOP, Action.RESET)
QUEUE_ACTIONS = (Action.CANCEL, Action.RETRY, Action.DELETE)


def parse_batch_status(value: Any) -> BatchStatus | None:
    """
    Decode a batch status from its integer code or its display name.

    Returns:
        The matching BatchStatus, or None for Unknown and unrecognized values.
    """
    if isinstance(value, BatchStatus):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        if 0 <= value < len(_BATCH_STATUS_BY_CODE):
            return _BATCH_STATUS_BY_CODE[value]
        return None
    if isinstance(value, str):
        try:
            return BatchStatus(value)
        except ValueError:
            return None
    return None


def parse_migration_status(value: Any) -> MigrationStatus | None:
    """Decode a queue entry status string; unrecognized values return None."""
    if isinstance(value, MigrationStatus):
        return value
    if not isinstance(value, str):
        return None
    try:
        return MigrationStatus(value)
    except ValueError:
        return None


def permitted(status: LifecycleStatus | None, action: Action) -> bool:
    """Return True if the action may be requested for an entity in this status."""
    if status is None:
        return False
    permitted_actions = getattr(status, "permitted_actions", None)
    if permitted_actions is None:
        return False
    return action in permitted_actions()


def action_states(
    status: LifecycleStatus | None,
    actions: Iterable[Action],
    *,
    in_flight: bool = False,
) -> dict[Action, bool]:
    """
    Return the enablement of each action control for an entity.

    All controls are disabled while an operation for the entity is in flight.
    """
    return {action: (not in_flight) and permitted(status, action) for action in actions}


def can_start_batch(batch: Batch) -> bool:
    return permitted(batch.status, Action.START)


def can_stop_batch(batch: Batch) -> bool:
    return permitted(batch.status, Action.STOP)


def can_reset_batch(batch: Batch) -> bool:
    return permitted(batch.status, Action.RESET)


def can_cancel_queue_entry(entry: QueueEntry) -> bool:
    return permitted(entry.migration_status, Action.CANCEL)


def can_retry_queue_entry(entry: QueueEntry) -> bool:
    return permitted(entry.migration_status, Action.RETRY)


def can_delete_queue_entry(entry: QueueEntry) -> bool:
    return permitted(entry.migration_status, Action.DELETE)
