"""Human-readable size and timestamp formatting.

This module converts raw byte counts coming from the migration daemon into
display strings (and back, for user input), and normalizes the daemon's
RFC 3339 timestamps for display. It is intentionally free of CLI concerns
so the same rules apply wherever sizes are shown or parsed.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_BINARY_UNITS = ("B", "KiB", "MiB", "GiB", "TiB", "PiB")

_UNIT_MULTIPLIERS = {
    "": 1,
    "b": 1,
    "kb": 1000,
    "mb": 1000**2,
    "gb": 1000**3,
    "tb": 1000**4,
    "pb": 1000**5,
    "kib": 1024,
    "mib": 1024**2,
    "gib": 1024**3,
    "tib": 1024**4,
    "pib": 1024**5,
}

_HUMAN_SIZE_RE = re.compile(r"^\s*(?P<number>\S*?)\s*(?P<unit>[A-Za-z]*)\s*$")
_NUMBER_RE = re.compile(r"^(\d+(\.\d+)?|\.\d+)$")

_TWO_PLACES = Decimal("0.01")

# Go's time.Time{} as serialized by the daemon.
ZERO_TIME = "0001-01-01T00:00:00Z"

_RFC3339_FRACTION_RE = re.compile(r"\.(\d+)")
_WINDOW_DATE_RE = re.compile(
    r"^\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01]) "
    r"(?:[01]\d|2[0-3]):[0-5]\d:[0-5]\d(?: UTC)?$"
)


class ParseError(ValueError):
    """Raised when a human-readable size cannot be parsed."""


def bytes_to_human(n: int | None) -> str:
    """
    Format a byte count using binary (1024-based) units.

    Zero renders as ``"0 B"``; any other count renders with exactly two
    decimals, rounded half-up, e.g. ``1 -> "1.00 B"`` and
    ``2345637 -> "2.24 MiB"``. ``None`` renders as an empty string so a
    missing field shows as a blank cell.

    Raises:
        ValueError: If ``n`` is negative.
    """
    if n is None:
        return ""
    if n < 0:
        raise ValueError(f"byte count must be >= 0, got {n}")
    if n == 0:
        return "0 B"

    value = Decimal(int(n))
    index = 0
    while value >= 1024 and index < len(_BINARY_UNITS) - 1:
        value /= 1024
        index += 1

    rounded = value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    return f"{rounded} {_BINARY_UNITS[index]}"


def human_to_bytes(text: str) -> int:
    """
    Parse a human-readable size into a byte count.

    Accepts ``<number>[whitespace]<unit>`` where the unit is one of B, KB,
    MB, GB, TB, PB (powers of 1000) or KiB, MiB, GiB, TiB, PiB (powers of
    1024), case-insensitive. A bare number is a byte count. The result is
    rounded half-up to the nearest byte.

    Raises:
        ParseError: If the number is not a valid decimal or the unit is unknown.
    """
    match = _HUMAN_SIZE_RE.match(text or "")
    if not match:
        raise ParseError(f"Invalid size: '{text}'")

    number = match.group("number")
    unit = match.group("unit").lower()

    if not _NUMBER_RE.match(number):
        raise ParseError(f"Invalid size: '{text}' (bad number '{number}')")

    multiplier = _UNIT_MULTIPLIERS.get(unit)
    if multiplier is None:
        raise ParseError(f"Invalid size: '{text}' (unknown unit '{match.group('unit')}')")

    try:
        value = Decimal(number) * multiplier
    except InvalidOperation as exc:
        raise ParseError(f"Invalid size: '{text}'") from exc

    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _parse_rfc3339(value: str) -> datetime:
    """Parse an RFC 3339 timestamp, tolerating nanosecond fractions."""
    text = value.strip().replace("Z", "+00:00")
    # fromisoformat() accepts at most microseconds
    text = _RFC3339_FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: str | None) -> str:
    """Render a daemon timestamp as ``YYYY-MM-DD HH:MM:SS UTC`` (blank if unset)."""
    if not value or value == ZERO_TIME:
        return ""
    try:
        parsed = _parse_rfc3339(value)
    except ValueError:
        return ""
    return parsed.strftime("%Y-%m-%d %H:%M:%S UTC")


def is_migration_window_valid(text: str) -> bool:
    """Return True if text is a migration window date (``YYYY-MM-DD HH:MM:SS[ UTC]``)."""
    return bool(_WINDOW_DATE_RE.match(text))
