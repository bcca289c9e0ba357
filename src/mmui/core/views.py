"""Presenters turning entity snapshots into tables.

Each function shapes already-decoded entities into a Table (or a list of
label/value pairs for detail views). Effective values are computed through
the override resolver and sizes through the unit codec, so every list shows
the same thing the same way and sorts by the value actually in effect.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from mmui.core.lifecycle import (
    BATCH_ACTIONS,
    QUEUE_ACTIONS,
    Action,
    action_states,
)
from mmui.core.models import Batch, Instance, Network, QueueEntry, Source, Target
from mmui.core.overrides import (
    has_override,
    override_cell,
    resolve_field,
    resolve_text,
    row_style,
)
from mmui.core.table import Cell, Table
from mmui.core.units import bytes_to_human, format_timestamp

BATCH_HEADERS = (
    "Name",
    "Status",
    "Target",
    "Project",
    "Storage pool",
    "Include expression",
    "Actions",
)

QUEUE_HEADERS = (
    "Name",
    "UUID",
    "Batch",
    "Status",
    "Detailed status",
    "Target",
    "Target project",
    "Actions",
)

INSTANCE_HEADERS = ("UUID", "Source", "Location", "OS version", "CPU", "Memory")

DISK_HEADERS = ("Name", "Capacity", "Shared", "Supported")

NIC_HEADERS = ("Id", "Hardware address", "Network")

NETWORK_HEADERS = (
    "UUID",
    "Source specific ID",
    "Location",
    "Source",
    "Type",
    "Target network",
    "Target NIC type",
    "Target VLAN",
)

SOURCE_HEADERS = ("Name", "Type", "Endpoint", "Connectivity status", "Username")

TARGET_HEADERS = ("Name", "Type", "Endpoint", "Connectivity status", "Auth type")


@dataclass(frozen=True)
class ActionControls:
    """Enablement of an entity's action controls."""

    states: Mapping[Action, bool]

    def enabled(self) -> list[Action]:
        return [action for action, ok in self.states.items() if ok]

    def __str__(self) -> str:
        return ", ".join(action.value for action in self.enabled()) or "-"


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _text(value: str) -> Cell:
    return Cell(renderable=value, sort_key=value)


def batch_status_text(batch: Batch) -> str:
    if batch.status_message:
        return batch.status_message
    return batch.status.value if batch.status is not None else "Unknown"


def batches_table(batches: Iterable[Batch], in_flight: Iterable[str] = ()) -> Table:
    """Build the batch list; action controls are disabled for batches with a pending request."""
    pending = set(in_flight)
    rows = [
        (
            _text(b.name),
            _text(batch_status_text(b)),
            _text(b.target),
            _text(b.target_project),
            _text(b.storage_pool),
            _text(b.include_expression),
            Cell(
                renderable=ActionControls(
                    action_states(b.status, BATCH_ACTIONS, in_flight=b.name in pending)
                )
            ),
        )
        for b in batches
    ]
    return Table(headers=BATCH_HEADERS, rows=rows)


def queue_table(entries: Iterable[QueueEntry], in_flight: Iterable[str] = ()) -> Table:
    """Build the migration queue list."""
    pending = set(in_flight)
    rows = []
    for q in entries:
        status = queue_status_text(q)
        rows.append(
            (
                _text(q.instance_name),
                _text(q.instance_uuid),
                _text(q.batch_name),
                _text(status),
                _text(q.migration_status_message),
                _text(q.target_name),
                _text(q.target_project),
                Cell(
                    renderable=ActionControls(
                        action_states(
                            q.migration_status,
                            QUEUE_ACTIONS,
                            in_flight=q.instance_uuid in pending,
                        )
                    )
                ),
            )
        )
    return Table(headers=QUEUE_HEADERS, rows=rows)


def queue_status_text(entry: QueueEntry) -> str:
    if entry.migration_status_text:
        return entry.migration_status_text
    return entry.migration_status.value if entry.migration_status is not None else ""


def _instance_cpu_cell(instance: Instance, overridden: bool) -> Cell:
    override = instance.overrides.cpus if instance.overrides else None
    resolved = resolve_field(instance.cpus, override, overridden)
    return override_cell(instance.cpus, override, resolved.shown)


def _instance_memory_cell(instance: Instance, overridden: bool) -> Cell:
    override = instance.overrides.memory if instance.overrides else None
    resolved = resolve_field(instance.memory, override, overridden)
    return override_cell(instance.memory, override, resolved.shown, render=bytes_to_human)


def instances_table(instances: Iterable[Instance]) -> Table:
    """Build the instance list with CPU and memory overrides resolved."""
    rows = []
    for item in instances:
        style = row_style(item)
        overridden = has_override(item)
        cells = (
            _text(item.uuid),
            _text(item.source),
            _text(item.location),
            _text(item.os_version),
            _instance_cpu_cell(item, overridden),
            _instance_memory_cell(item, overridden),
        )
        rows.append(
            tuple(Cell(c.renderable, c.sort_key, style) if style else c for c in cells)
        )
    return Table(headers=INSTANCE_HEADERS, rows=rows)


def instance_overview(instance: Instance) -> list[tuple[str, object]]:
    """Label/value pairs for an instance's detail view."""
    overridden = has_override(instance)
    rows: list[tuple[str, object]] = [
        ("UUID", instance.uuid),
        ("Source", instance.source),
        ("Source type", instance.source_type),
        ("Location", instance.location),
        ("OS version", instance.os_version),
        ("CPU", _instance_cpu_cell(instance, overridden).renderable),
        ("Memory", _instance_memory_cell(instance, overridden).renderable),
        ("Firmware", "BIOS" if instance.legacy_boot else "UEFI"),
    ]
    if not instance.legacy_boot:
        rows.append(("Secure boot", _yes_no(instance.secure_boot)))
    rows.extend(
        [
            ("Running", _yes_no(instance.running)),
            ("Background import", _yes_no(instance.background_import)),
        ]
    )
    if instance.overrides is not None and overridden:
        rows.append(("Override updated", format_timestamp(instance.overrides.last_update)))
        if instance.overrides.comment:
            rows.append(("Override comment", instance.overrides.comment))
        rows.append(("Migration disabled", _yes_no(instance.overrides.disable_migration)))
    return rows


def disks_table(instance: Instance) -> Table:
    rows = [
        (
            _text(d.name),
            Cell(renderable=bytes_to_human(d.capacity), sort_key=d.capacity),
            _text(_yes_no(d.shared)),
            _text(_yes_no(d.supported)),
        )
        for d in instance.disks
    ]
    return Table(headers=DISK_HEADERS, rows=rows)


def nics_table(instance: Instance) -> Table:
    rows = [
        (_text(n.id), _text(n.hardware_address), _text(n.network)) for n in instance.nics
    ]
    return Table(headers=NIC_HEADERS, rows=rows)


def batch_overview(batch: Batch) -> list[tuple[str, object]]:
    """Label/value pairs for a batch's detail view."""
    return [
        ("Name", batch.name),
        ("Status", batch.status.value if batch.status is not None else "Unknown"),
        ("Status message", batch.status_message),
        ("Target", batch.target),
        ("Project", batch.target_project),
        ("Storage pool", batch.storage_pool),
        ("Include expression", batch.include_expression),
        ("Migration window start", format_timestamp(batch.migration_window_start)),
        ("Migration window end", format_timestamp(batch.migration_window_end)),
        ("Actions", ActionControls(action_states(batch.status, BATCH_ACTIONS))),
    ]


def _text_override_cell(original: str, override: str) -> Cell:
    resolved = resolve_text(original, override)
    return override_cell(original, override, resolved.shown)


def networks_table(networks: Iterable[Network]) -> Table:
    """Build the network list; target placement cells show their overrides."""
    rows = [
        (
            _text(n.uuid),
            _text(n.source_specific_id),
            _text(n.location),
            _text(n.source),
            _text(n.type),
            _text_override_cell(n.placement.network, n.overrides.network),
            _text_override_cell(n.placement.nictype, n.overrides.nictype),
            _text_override_cell(n.placement.vlan_id, n.overrides.vlan_id),
        )
        for n in networks
    ]
    return Table(headers=NETWORK_HEADERS, rows=rows)


def network_overview(network: Network) -> list[tuple[str, object]]:
    """Label/value pairs for a network's detail view."""
    placed, override = network.placement, network.overrides
    return [
        ("UUID", network.uuid),
        ("Source specific ID", network.source_specific_id),
        ("Location", network.location),
        ("Source", network.source),
        ("Type", network.type),
        ("Target network", _text_override_cell(placed.network, override.network).renderable),
        ("Target NIC type", _text_override_cell(placed.nictype, override.nictype).renderable),
        ("Target VLAN", _text_override_cell(placed.vlan_id, override.vlan_id).renderable),
    ]


def sources_table(sources: Iterable[Source]) -> Table:
    rows = [
        (
            _text(s.name),
            _text(s.source_type),
            _text(s.endpoint),
            _text(s.connectivity_status),
            _text(s.username),
        )
        for s in sources
    ]
    return Table(headers=SOURCE_HEADERS, rows=rows)


def targets_table(targets: Iterable[Target]) -> Table:
    rows = [
        (
            _text(t.name),
            _text(t.target_type),
            _text(t.endpoint),
            _text(t.connectivity_status),
            _text(t.auth_type),
        )
        for t in targets
    ]
    return Table(headers=TARGET_HEADERS, rows=rows)
