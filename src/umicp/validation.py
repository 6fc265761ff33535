"""Validation utilities: pure checks raising EnvelopeValidationError."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from datetime import datetime

from umicp.errors import EnvelopeValidationError

# Canonical hyphenated 8-4-4-4-12 form only; no braces, urn: prefix or bare hex.
_UUID_PATTERN = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)


def validate_non_empty(value: str, field_name: str) -> None:
    """Reject empty or whitespace-only strings.

    Args:
        value: String to check.
        field_name: Field name used in the error message.

    Raises:
        EnvelopeValidationError: If value is empty after stripping.
    """
    if not isinstance(value, str) or not value.strip():
        raise EnvelopeValidationError(
            f"Field '{field_name}' cannot be empty", data={"field": field_name}
        )


def is_valid_uuid(value: str) -> bool:
    """Return True when value is UUID text in canonical hyphenated form."""
    return isinstance(value, str) and _UUID_PATTERN.fullmatch(value) is not None


def validate_uuid(value: str, field_name: str = "message_id") -> None:
    """Reject values that are not UUID text.

    Raises:
        EnvelopeValidationError: If value is not a UUID.
    """
    if not is_valid_uuid(value):
        raise EnvelopeValidationError(
            f"Invalid UUID format: {value}", data={"field": field_name}
        )


def validate_positive(value: float, field_name: str) -> None:
    """Reject values that are zero or negative.

    Raises:
        EnvelopeValidationError: If value <= 0.
    """
    if value <= 0:
        raise EnvelopeValidationError(
            f"Field '{field_name}' must be positive, got {value}",
            data={"field": field_name},
        )


def validate_non_negative(value: float, field_name: str) -> None:
    """Reject negative values.

    Raises:
        EnvelopeValidationError: If value < 0.
    """
    if value < 0:
        raise EnvelopeValidationError(
            f"Field '{field_name}' must not be negative, got {value}",
            data={"field": field_name},
        )


def validate_index(index: int, max_index: int, field_name: str) -> None:
    """Reject indices outside ``[0, max_index)``.

    Raises:
        EnvelopeValidationError: If index is out of bounds.
    """
    if index < 0 or index >= max_index:
        raise EnvelopeValidationError(
            f"Field '{field_name}' index {index} is out of bounds (max: {max_index})",
            data={"field": field_name},
        )


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp. A time zone offset is required.

    Args:
        value: Timestamp text, e.g. ``2024-01-01T00:00:00+00:00``.

    Returns:
        Timezone-aware datetime.

    Raises:
        EnvelopeValidationError: If the text is not a zoned ISO-8601 timestamp.
    """
    try:
        parsed = datetime.fromisoformat(value)
    except (ValueError, TypeError) as exc:
        raise EnvelopeValidationError(f"Invalid timestamp format: {exc}") from exc
    if parsed.tzinfo is None:
        raise EnvelopeValidationError(
            f"Invalid timestamp format: missing time zone in {value!r}"
        )
    return parsed


def validate_envelope_fields(
    *,
    from_: str,
    to: str,
    message_id: str,
    capabilities: Mapping[str, str] | None,
    schema_uri: str | None,
    accept: Sequence[str] | None,
) -> None:
    """Run the envelope field checks in their fixed order; first failure wins.

    Raises:
        EnvelopeValidationError: On the first failing check.
    """
    validate_non_empty(from_, "from")
    validate_non_empty(to, "to")
    validate_non_empty(message_id, "message_id")
    validate_uuid(message_id, "message_id")
    if capabilities is not None:
        for key, value in capabilities.items():
            validate_non_empty(key, "capability key")
            validate_non_empty(value, "capability value")
    if schema_uri is not None:
        validate_non_empty(schema_uri, "schema_uri")
    if accept is not None:
        for content_type in accept:
            validate_non_empty(content_type, "accept type")
