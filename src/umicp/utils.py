"""Identifier, timestamp, version and formatting helpers."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from umicp.errors import EnvelopeValidationError

_BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")


def generate_message_id() -> str:
    """Generate a new message ID. Standard uuid4 string, unique per envelope."""
    return str(uuid.uuid4())


def current_timestamp() -> str:
    """Return the current instant as ISO-8601 with UTC offset."""
    return datetime.now(UTC).isoformat()


def parse_version(version: str) -> tuple[int, int, int]:
    """Parse ``major.minor.patch`` into an integer triple.

    Raises:
        EnvelopeValidationError: If the text is not three dot-separated integers.
    """
    parts = version.split(".")
    if len(parts) != 3:
        raise EnvelopeValidationError(
            f"Invalid version format: {version}. Expected x.y.z"
        )
    numbers: list[int] = []
    for label, part in zip(("major", "minor", "patch"), parts, strict=True):
        if not part.isdigit():
            raise EnvelopeValidationError(f"Invalid {label} version: {part}")
        numbers.append(int(part))
    return (numbers[0], numbers[1], numbers[2])


def compare_versions(left: str, right: str) -> int:
    """Compare two ``x.y.z`` versions; return -1, 0 or 1."""
    a = parse_version(left)
    b = parse_version(right)
    return (a > b) - (a < b)


def format_bytes(size: int) -> str:
    """Render a byte count with a binary unit, e.g. ``1.50 KB``."""
    value = float(size)
    unit_index = 0
    while value >= 1024.0 and unit_index < len(_BYTE_UNITS) - 1:
        value /= 1024.0
        unit_index += 1
    if unit_index == 0:
        return f"{size} B"
    return f"{value:.2f} {_BYTE_UNITS[unit_index]}"


def format_duration(seconds: int) -> str:
    """Render seconds as ``1d 2h 3m 4s``, dropping leading zero units."""
    days, rest = divmod(seconds, 86_400)
    hours, rest = divmod(rest, 3_600)
    minutes, secs = divmod(rest, 60)
    if days:
        return f"{days}d {hours}h {minutes}m {secs}s"
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def sanitize_identifier(value: str) -> str:
    """Keep only alphanumerics, ``_``, ``-`` and ``.``."""
    return "".join(ch for ch in value if ch.isalnum() or ch in "_-.")


def is_ascii_only(value: str) -> bool:
    return value.isascii()


def truncate(value: str, max_length: int) -> str:
    """Cut value to max_length characters, ending with ``...`` when shortened."""
    if len(value) <= max_length:
        return value
    return value[: max(max_length - 3, 0)] + "..."
