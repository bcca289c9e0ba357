from mmui.core.lifecycle import Action, BatchStatus, MigrationStatus
from mmui.core.models import (
    NIC,
    Batch,
    Disk,
    Instance,
    InstanceOverride,
    Network,
    NetworkPlacement,
    QueueEntry,
    Source,
    Target,
)
from mmui.core.overrides import SUPERSEDED
from mmui.core.table import TableState, set_sort, visible_rows
from mmui.core.views import (
    BATCH_HEADERS,
    INSTANCE_HEADERS,
    NETWORK_HEADERS,
    QUEUE_HEADERS,
    ActionControls,
    batch_overview,
    batches_table,
    disks_table,
    instance_overview,
    instances_table,
    network_overview,
    networks_table,
    nics_table,
    queue_table,
    sources_table,
    targets_table,
)

_UPDATED = "2025-04-17T07:38:46Z"


def _instances() -> list[Instance]:
    return [
        Instance(uuid="a", cpus=2, memory=4 * 1024**3),
        Instance(
            uuid="b",
            cpus=4,
            memory=2 * 1024**3,
            overrides=InstanceOverride(last_update=_UPDATED, cpus=1, memory=0),
        ),
        Instance(
            uuid="c",
            cpus=8,
            memory=1024**3,
            overrides=InstanceOverride(last_update="0001-01-01T00:00:00Z", cpus=16),
        ),
    ]


def test_instances_table_sorts_by_effective_cpu():
    table = instances_table(_instances())
    cpu = INSTANCE_HEADERS.index("CPU")

    rows = visible_rows(table, set_sort(TableState(), cpu))

    # "b" is overridden down to 1; "c" carries an empty placeholder record.
    assert [r[0].renderable for r in rows] == ["b", "a", "c"]


def test_instances_table_renders_original_and_override():
    table = instances_table(_instances())
    cpu = INSTANCE_HEADERS.index("CPU")
    memory = INSTANCE_HEADERS.index("Memory")

    overridden = table.rows[1]
    assert str(overridden[cpu].renderable) == "4 1"
    assert overridden[cpu].renderable.superseded is True
    # A memory override of 0 means "not overridden".
    assert str(overridden[memory].renderable) == "2.00 GiB"
    assert overridden[memory].sort_key == 2 * 1024**3

    placeholder = table.rows[2]
    assert str(placeholder[cpu].renderable) == "8"


def test_instances_table_marks_excluded_rows():
    excluded = Instance(uuid="x", overrides=InstanceOverride(disable_migration=True))

    table = instances_table([excluded, Instance(uuid="y")])

    assert {c.style_class for c in table.rows[0]} == {SUPERSEDED}
    assert {c.style_class for c in table.rows[1]} == {None}


def test_batches_table_action_controls():
    table = batches_table(
        [
            Batch(name="b1", status=BatchStatus.RUNNING),
            Batch(name="b2", status=BatchStatus.DEFINED),
            Batch(name="b3", status=BatchStatus.RUNNING),
        ],
        in_flight=["b3"],
    )
    actions = BATCH_HEADERS.index("Actions")

    assert [str(r[actions].renderable) for r in table.rows] == ["stop, reset", "start", "-"]


def test_batches_table_shows_status_message_or_name():
    table = batches_table(
        [
            Batch(name="b1", status=BatchStatus.RUNNING, status_message="1 of 3 migrated"),
            Batch(name="b2", status=BatchStatus.STOPPED),
            Batch(name="b3", status=None),
        ]
    )

    assert [r[1].renderable for r in table.rows] == ["1 of 3 migrated", "Stopped", "Unknown"]


def test_queue_table_action_controls():
    table = queue_table(
        [
            QueueEntry(instance_uuid="u1", migration_status=MigrationStatus.CANCELED),
            QueueEntry(instance_uuid="u2", migration_status=MigrationStatus.ERROR),
            QueueEntry(instance_uuid="u3", migration_status=None),
        ]
    )
    actions = QUEUE_HEADERS.index("Actions")

    assert [str(r[actions].renderable) for r in table.rows] == ["retry", "cancel, delete", "-"]


def test_action_controls_enabled_order():
    controls = ActionControls({Action.START: False, Action.STOP: True, Action.RESET: True})

    assert controls.enabled() == [Action.STOP, Action.RESET]


def test_disks_table_sorts_capacity_by_bytes():
    instance = Instance(
        uuid="u1",
        disks=(Disk(name="big", capacity=2 * 1024**4), Disk(name="small", capacity=900 * 1024**3)),
    )

    rows = visible_rows(disks_table(instance), set_sort(TableState(), 1))

    assert [r[0].renderable for r in rows] == ["small", "big"]
    assert rows[0][1].renderable == "900.00 GiB"


def test_nics_table():
    instance = Instance(uuid="u1", nics=(NIC(id="eth0", hardware_address="aa", network="vlan10"),))

    assert [c.renderable for c in nics_table(instance).rows[0]] == ["eth0", "aa", "vlan10"]


def test_instance_overview_shows_override_details():
    instance = Instance(
        uuid="u1",
        cpus=2,
        overrides=InstanceOverride(last_update=_UPDATED, cpus=4, comment="resized"),
    )

    overview = dict(instance_overview(instance))

    assert str(overview["CPU"]) == "2 4"
    assert overview["Firmware"] == "UEFI"
    assert overview["Override updated"] == "2025-04-17 07:38:46 UTC"
    assert overview["Override comment"] == "resized"


def test_instance_overview_hides_placeholder_override():
    overview = dict(instance_overview(Instance(uuid="u1", legacy_boot=True, overrides=InstanceOverride())))

    assert overview["Firmware"] == "BIOS"
    assert "Secure boot" not in overview
    assert "Override updated" not in overview


def test_batch_overview():
    overview = dict(
        batch_overview(
            Batch(
                name="b1",
                status=BatchStatus.ERROR,
                migration_window_start="2025-05-01T22:00:00Z",
            )
        )
    )

    assert overview["Status"] == "Error"
    assert overview["Migration window start"] == "2025-05-01 22:00:00 UTC"
    assert overview["Migration window end"] == ""
    assert str(overview["Actions"]) == "start"


def test_queue_table_shows_unknown_status_verbatim():
    entries = [
        QueueEntry.from_json({"instance_uuid": "u1", "migration_status": "Worker tasks complete"}),
        QueueEntry.from_json({"instance_uuid": "u2", "migration_status": "Blocked"}),
    ]
    status = QUEUE_HEADERS.index("Status")
    actions = QUEUE_HEADERS.index("Actions")

    table = queue_table(entries)

    assert table.rows[0][status].renderable == "Worker tasks complete"
    assert table.rows[0][status].key() == "Worker tasks complete"
    assert str(table.rows[0][actions].renderable) == "-"
    rows = visible_rows(table, set_sort(TableState(), status))
    assert [r[1].renderable for r in rows] == ["u2", "u1"]


def _networks() -> list[Network]:
    return [
        Network(
            uuid="n1",
            placement=NetworkPlacement(network="vmnet", nictype="bridged", vlan_id="10"),
            overrides=NetworkPlacement(network="incusbr0"),
        ),
        Network(
            uuid="n2",
            placement=NetworkPlacement(network="lan", nictype="bridged", vlan_id="20"),
        ),
    ]


def test_networks_table_shows_non_empty_overrides():
    table = networks_table(_networks())
    target = NETWORK_HEADERS.index("Target network")
    nictype = NETWORK_HEADERS.index("Target NIC type")

    assert str(table.rows[0][target].renderable) == "vmnet incusbr0"
    assert table.rows[0][target].renderable.superseded is True
    assert str(table.rows[0][nictype].renderable) == "bridged"
    assert table.rows[0][nictype].renderable.superseded is False


def test_networks_table_sorts_by_effective_target_network():
    table = networks_table(_networks())
    target = NETWORK_HEADERS.index("Target network")

    rows = visible_rows(table, set_sort(TableState(), target))

    # "incusbr0" (override of n1) sorts before "lan"
    assert [r[0].renderable for r in rows] == ["n1", "n2"]
    assert rows[0][target].sort_key == "incusbr0"


def test_network_overview_uses_overrides():
    overview = dict(network_overview(_networks()[0]))

    assert str(overview["Target network"]) == "vmnet incusbr0"
    assert str(overview["Target VLAN"]) == "10"


def test_sources_and_targets_tables():
    sources = sources_table(
        [Source(name="vc1", source_type="VMware", endpoint="https://vc1", connectivity_status="OK", username="admin")]
    )
    targets = targets_table(
        [Target(name="incus", target_type="Incus", endpoint="https://incus:8443", connectivity_status="OK", auth_type="TLS")]
    )

    assert [c.renderable for c in sources.rows[0]] == ["vc1", "VMware", "https://vc1", "OK", "admin"]
    assert [c.renderable for c in targets.rows[0]] == ["incus", "Incus", "https://incus:8443", "OK", "TLS"]
