"""Effective-value resolution for administrator overrides.

An instance carries source-derived values (CPU count, memory) and may carry
an override record set by an administrator. For each field the console
shows which value is in effect: the override when one is set, otherwise the
original. When an override is in effect the original is still shown, marked
as superseded.

These backend conventions are preserved here:
  - the daemon always sends an override record; an "empty" one is
    recognized by its nil identity (nil UUID, or Go's zero timestamp for
    records that carry no UUID);
  - a numeric override of 0 means "not overridden", so 0 can never be an
    override value;
  - a text override (network, NIC type, VLAN) is in effect iff it is
    non-empty.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, TypeVar

from mmui.core.table import Cell
from mmui.core.units import ZERO_TIME

NIL_UUID = "00000000-0000-0000-0000-000000000000"

SUPERSEDED = "superseded"

T = TypeVar("T", int, float)
V = TypeVar("V")


@dataclass(frozen=True)
class Resolution(Generic[V]):
    """Outcome of resolving one field: the effective value and whether the override shows."""

    effective: V
    shown: bool


@dataclass(frozen=True)
class OverrideDisplay:
    """Renderable pair for one field: original (maybe superseded) plus optional override."""

    original: str
    override: str | None
    superseded: bool

    def __str__(self) -> str:
        if self.override is None:
            return self.original
        return f"{self.original} {self.override}"


def _is_nil(value: Any, sentinel: str) -> bool:
    return value is None or str(value).strip() in ("", sentinel)


def has_override(entity: Any) -> bool:
    """
    Return True if the entity carries a genuine override record.

    Accepts an Instance snapshot or the raw JSON mapping of one. The record
    counts only if its identity is set: its ``uuid`` when present, otherwise
    its ``last_update`` timestamp.
    """
    if entity is None:
        return False

    if isinstance(entity, Mapping):
        record = entity.get("overrides")
        if not isinstance(record, Mapping):
            return False
        uuid = record.get("uuid")
        last_update = record.get("last_update")
    else:
        record = getattr(entity, "overrides", None)
        if record is None:
            return False
        uuid = getattr(record, "uuid", None)
        last_update = getattr(record, "last_update", None)

    if uuid not in (None, ""):
        return not _is_nil(uuid, NIL_UUID)
    return not _is_nil(last_update, ZERO_TIME)


def resolve_field(original: T, override: T | None, has_override: bool) -> Resolution[T]:
    """
    Resolve a numeric field against its override.

    The override shows only if the record is genuine and the value is > 0;
    otherwise the original stays in effect.
    """
    shown = bool(has_override) and override is not None and override > 0
    return Resolution(effective=override if shown else original, shown=shown)


def resolve_text(original: str, override: str | None) -> Resolution[str]:
    """
    Resolve a text field against its override.

    Text overrides carry no record identity: a non-empty override is in
    effect, an empty one leaves the original.
    """
    shown = bool(override)
    return Resolution(effective=override if shown else original, shown=shown)


def override_cell(
    original: V,
    override: V | None,
    shown: bool,
    *,
    render: Callable[[Any], str] = str,
) -> Cell:
    """
    Build the table cell for an overridable field.

    The cell sorts by the effective value. When the override shows, the
    original is marked superseded and the override is rendered next to it.
    """
    display = OverrideDisplay(
        original=render(original),
        override=render(override) if shown else None,
        superseded=shown,
    )
    effective = override if shown else original
    return Cell(renderable=display, sort_key=effective)


def row_style(instance: Any) -> str | None:
    """Return the style for every cell of an instance row (excluded instances are superseded)."""
    record = getattr(instance, "overrides", None)
    if record is not None and getattr(record, "disable_migration", False):
        return SUPERSEDED
    return None
