"""Core entity snapshots decoded from the migration daemon's JSON.

The daemon returns batches, queue entries, instances, networks, sources
and targets as JSON objects. This module turns them into small immutable
value objects that the rest of the core (override resolution, table
presenters, lifecycle gating) works with. Decoding is lenient: a missing
field becomes a blank default rather than an error, so a partially
populated entity still renders.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from mmui.core.lifecycle import (
    BatchStatus,
    MigrationStatus,
    parse_batch_status,
    parse_migration_status,
)


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _int(data: Mapping[str, Any], key: str) -> int:
    try:
        return int(data.get(key) or 0)
    except (TypeError, ValueError):
        return 0


def _bool(data: Mapping[str, Any], key: str) -> bool:
    return bool(data.get(key) or False)


def _mapping(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    return value if isinstance(value, Mapping) else {}


@dataclass(frozen=True)
class Batch:
    """
    A batch of instances migrated together.

    Attributes:
        name: Unique batch name.
        status: Decoded batch status, or None when the daemon reported a
                value outside the known enumeration.
        status_message: Free-form status detail (e.g. "4 of 5 migrated").
    """

    name: str
    status: BatchStatus | None
    status_message: str = ""
    target: str = ""
    target_project: str = ""
    storage_pool: str = ""
    include_expression: str = ""
    migration_window_start: str = ""
    migration_window_end: str = ""

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Batch":
        return cls(
            name=_str(data, "name"),
            status=parse_batch_status(data.get("status")),
            status_message=_str(data, "status_message") or _str(data, "status_string"),
            target=_str(data, "target"),
            target_project=_str(data, "target_project"),
            storage_pool=_str(data, "storage_pool"),
            include_expression=_str(data, "include_expression"),
            migration_window_start=_str(data, "migration_window_start"),
            migration_window_end=_str(data, "migration_window_end"),
        )


@dataclass(frozen=True)
class QueueEntry:
    """
    A single instance migration queued by a running batch.

    Attributes:
        migration_status: Decoded status used for action gating; None for
                          texts outside the known enumeration.
        migration_status_text: Status exactly as the daemon reported it.
    """

    instance_uuid: str
    instance_name: str = ""
    batch_name: str = ""
    migration_status: MigrationStatus | None = None
    migration_status_text: str = ""
    migration_status_message: str = ""
    target_name: str = ""
    target_project: str = ""

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "QueueEntry":
        placement = _mapping(data, "placement")
        return cls(
            instance_uuid=_str(data, "instance_uuid"),
            instance_name=_str(data, "instance_name"),
            batch_name=_str(data, "batch_name"),
            migration_status=parse_migration_status(data.get("migration_status")),
            migration_status_text=_str(data, "migration_status"),
            migration_status_message=_str(data, "migration_status_message"),
            target_name=_str(placement, "target_name"),
            target_project=_str(placement, "target_project"),
        )


@dataclass(frozen=True)
class InstanceOverride:
    """
    Administrator overrides for a single instance.

    Attributes:
        uuid: Identity of the override record; the nil UUID (or an empty
              string) when the daemon sent an empty placeholder.
        last_update: RFC 3339 timestamp of the last change.
        cpus: Overridden CPU count; 0 means "not overridden".
        memory: Overridden memory in bytes; 0 means "not overridden".
        disable_migration: If True the instance is excluded from migration.
    """

    uuid: str = ""
    last_update: str = ""
    comment: str = ""
    cpus: int = 0
    memory: int = 0
    disable_migration: bool = False

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "InstanceOverride":
        # Older daemons send flat fields, newer ones nest them under "properties".
        properties = _mapping(data, "properties")
        return cls(
            uuid=_str(data, "uuid"),
            last_update=_str(data, "last_update"),
            comment=_str(data, "comment"),
            cpus=_int(properties, "cpus") or _int(data, "number_cpus"),
            memory=_int(properties, "memory") or _int(data, "memory_in_bytes"),
            disable_migration=_bool(data, "disable_migration"),
        )


@dataclass(frozen=True)
class Disk:
    name: str
    capacity: int = 0
    shared: bool = False
    supported: bool = False


@dataclass(frozen=True)
class NIC:
    id: str
    hardware_address: str = ""
    network: str = ""


@dataclass(frozen=True)
class Instance:
    """A source VM as inventoried by the daemon, plus its overrides."""

    uuid: str
    source: str = ""
    source_type: str = ""
    location: str = ""
    os_version: str = ""
    cpus: int = 0
    memory: int = 0
    legacy_boot: bool = False
    secure_boot: bool = False
    running: bool = False
    background_import: bool = False
    disks: tuple[Disk, ...] = field(default_factory=tuple)
    nics: tuple[NIC, ...] = field(default_factory=tuple)
    overrides: InstanceOverride | None = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Instance":
        props = _mapping(data, "properties")
        raw_overrides = data.get("overrides")
        overrides = (
            InstanceOverride.from_json(raw_overrides)
            if isinstance(raw_overrides, Mapping)
            else None
        )
        return cls(
            uuid=_str(props, "uuid") or _str(data, "uuid"),
            source=_str(data, "source"),
            source_type=_str(data, "source_type"),
            location=_str(props, "location"),
            os_version=_str(props, "os_version"),
            cpus=_int(props, "cpus"),
            memory=_int(props, "memory"),
            legacy_boot=_bool(props, "legacy_boot"),
            secure_boot=_bool(props, "secure_boot"),
            running=_bool(props, "running"),
            background_import=_bool(props, "background_import"),
            disks=tuple(
                Disk(
                    name=_str(d, "name"),
                    capacity=_int(d, "capacity"),
                    shared=_bool(d, "shared"),
                    supported=_bool(d, "supported"),
                )
                for d in props.get("disks") or []
                if isinstance(d, Mapping)
            ),
            nics=tuple(
                NIC(
                    id=_str(n, "id"),
                    hardware_address=_str(n, "hardware_address"),
                    network=_str(n, "network"),
                )
                for n in props.get("nics") or []
                if isinstance(n, Mapping)
            ),
            overrides=overrides,
        )


# Wire order of the daemon's integer enumerations; index 0 is Unknown.
SOURCE_TYPES = ("Unknown", "Common", "VMware")
TARGET_TYPES = ("Unknown", "Incus")
CONNECTIVITY_STATUSES = (
    "Unknown",
    "OK",
    "Cannot connect",
    "TLS error",
    "Confirm TLS fingerprint",
    "Authentication error",
    "Waiting for OIDC authentications",
)


def _coded(data: Mapping[str, Any], key: str, names: tuple[str, ...]) -> str:
    """Decode an enumeration sent either as its integer code or its name."""
    value = data.get(key)
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, int):
        return names[value] if 0 <= value < len(names) else "Unknown"
    text = str(value)
    for name in names:
        if name.lower() == text.lower():
            return name
    return text


@dataclass(frozen=True)
class NetworkPlacement:
    """Target-side network settings, either as placed or as overridden."""

    network: str = ""
    nictype: str = ""
    vlan_id: str = ""

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "NetworkPlacement":
        return cls(
            network=_str(data, "network"),
            nictype=_str(data, "nictype"),
            vlan_id=_str(data, "vlan_id"),
        )


@dataclass(frozen=True)
class Network:
    """A source network and where its NICs land on the target."""

    uuid: str
    source_specific_id: str = ""
    location: str = ""
    source: str = ""
    type: str = ""
    placement: NetworkPlacement = field(default_factory=NetworkPlacement)
    overrides: NetworkPlacement = field(default_factory=NetworkPlacement)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Network":
        return cls(
            uuid=_str(data, "uuid"),
            source_specific_id=_str(data, "source_specific_id"),
            location=_str(data, "location"),
            source=_str(data, "source"),
            type=_str(data, "type"),
            placement=NetworkPlacement.from_json(_mapping(data, "placement")),
            overrides=NetworkPlacement.from_json(_mapping(data, "overrides")),
        )


@dataclass(frozen=True)
class Source:
    """A source hypervisor the daemon imports instances from."""

    name: str
    source_type: str = ""
    endpoint: str = ""
    connectivity_status: str = ""
    username: str = ""

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Source":
        props = _mapping(data, "properties")
        return cls(
            name=_str(data, "name"),
            source_type=_coded(data, "source_type", SOURCE_TYPES),
            endpoint=_str(props, "endpoint"),
            connectivity_status=_coded(props, "connectivity_status", CONNECTIVITY_STATUSES),
            username=_str(props, "username"),
        )


@dataclass(frozen=True)
class Target:
    """A target cluster instances are migrated to."""

    name: str
    target_type: str = ""
    endpoint: str = ""
    connectivity_status: str = ""
    auth_type: str = ""

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Target":
        props = _mapping(data, "properties")
        return cls(
            name=_str(data, "name"),
            target_type=_coded(data, "target_type", TARGET_TYPES),
            endpoint=_str(props, "endpoint"),
            connectivity_status=_coded(props, "connectivity_status", CONNECTIVITY_STATUSES),
            # A client key means TLS client authentication; otherwise OIDC.
            auth_type="TLS" if _str(props, "tls_client_key") else "OIDC",
        )
