import pytest

from mmui.core.lifecycle import (
    BATCH_ACTIONS,
    QUEUE_ACTIONS,
    Action,
    BatchStatus,
    MigrationStatus,
    action_states,
    can_cancel_queue_entry,
    can_delete_queue_entry,
    can_reset_batch,
    can_retry_queue_entry,
    can_start_batch,
    can_stop_batch,
    parse_batch_status,
    parse_migration_status,
    permitted,
)
from mmui.core.models import Batch, QueueEntry


@pytest.mark.parametrize(
    ("status", "allowed"),
    [
        (BatchStatus.DEFINED, {Action.START}),
        (BatchStatus.QUEUED, {Action.STOP}),
        (BatchStatus.RUNNING, {Action.STOP, Action.RESET}),
        (BatchStatus.STOPPED, {Action.START}),
        (BatchStatus.FINISHED, set()),
        (BatchStatus.ERROR, {Action.START}),
    ],
)
def test_batch_permissions(status, allowed):
    for action in BATCH_ACTIONS:
        assert permitted(status, action) is (action in allowed), action


@pytest.mark.parametrize(
    ("status", "allowed"),
    [
        (MigrationStatus.BLOCKED, {Action.CANCEL}),
        (MigrationStatus.WAITING, {Action.CANCEL}),
        (MigrationStatus.CREATING, {Action.CANCEL}),
        (MigrationStatus.BACKGROUND_IMPORT, {Action.CANCEL}),
        (MigrationStatus.IDLE, {Action.CANCEL}),
        (MigrationStatus.FINAL_IMPORT, {Action.CANCEL}),
        (MigrationStatus.POST_IMPORT, {Action.CANCEL}),
        (MigrationStatus.FINISHED, {Action.CANCEL, Action.DELETE}),
        (MigrationStatus.ERROR, {Action.CANCEL, Action.DELETE}),
        (MigrationStatus.CANCELED, {Action.RETRY}),
    ],
)
def test_queue_permissions(status, allowed):
    for action in QUEUE_ACTIONS:
        assert permitted(status, action) is (action in allowed), action


def test_batch_status_never_permits_queue_actions():
    for action in QUEUE_ACTIONS:
        assert not permitted(BatchStatus.RUNNING, action)


def test_unknown_status_permits_nothing():
    for action in Action:
        assert permitted(None, action) is False


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0, None),
        (1, BatchStatus.DEFINED),
        (3, BatchStatus.RUNNING),
        (6, BatchStatus.ERROR),
        (7, None),
        (-1, None),
        ("Running", BatchStatus.RUNNING),
        ("Unknown", None),
        ("running", None),
        (True, None),
        (None, None),
        (BatchStatus.STOPPED, BatchStatus.STOPPED),
    ],
)
def test_parse_batch_status(value, expected):
    assert parse_batch_status(value) is expected


def test_parse_migration_status_uses_verbatim_text():
    assert parse_migration_status("Creating new VM") is MigrationStatus.CREATING
    assert parse_migration_status("Performing final import tasks") is MigrationStatus.FINAL_IMPORT
    assert parse_migration_status("Canceled") is MigrationStatus.CANCELED


@pytest.mark.parametrize("value", ["Worker tasks complete", "canceled", "", None, 3])
def test_parse_migration_status_rejects_unknown_values(value):
    assert parse_migration_status(value) is None


def test_action_states_disabled_while_in_flight():
    assert action_states(BatchStatus.RUNNING, BATCH_ACTIONS) == {
        Action.START: False,
        Action.STOP: True,
        Action.RESET: True,
    }
    assert not any(action_states(BatchStatus.RUNNING, BATCH_ACTIONS, in_flight=True).values())


def test_entity_predicates():
    running = Batch(name="b1", status=BatchStatus.RUNNING)
    canceled = QueueEntry(instance_uuid="u1", migration_status=MigrationStatus.CANCELED)
    failed = QueueEntry(instance_uuid="u2", migration_status=MigrationStatus.ERROR)

    assert not can_start_batch(running)
    assert can_stop_batch(running)
    assert can_reset_batch(running)

    assert not can_cancel_queue_entry(canceled)
    assert can_retry_queue_entry(canceled)
    assert not can_delete_queue_entry(canceled)

    assert can_cancel_queue_entry(failed)
    assert not can_retry_queue_entry(failed)
    assert can_delete_queue_entry(failed)
