"""Canonical wire bytes for envelopes and their SHA-256 content id."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping, Sequence

# Values an envelope wire object can hold: string maps (capabilities, payload
# refs), string lists (accept), ints (hint size/count) and plain strings.
type JSONReadOnly = (
    Mapping[str, JSONReadOnly]
    | Sequence[JSONReadOnly]
    | str
    | int
    | float
    | bool
    | None
)


def canonical_json_bytes(obj: JSONReadOnly) -> bytes:
    """Encode a wire object as the bytes that go on the wire and get hashed.

    Keys are sorted and separators compact, so two envelopes with the same
    content produce the same bytes whatever order their maps were filled in.
    Non-ASCII text stays UTF-8; NaN and Infinity are refused.

    Args:
        obj: Wire mapping (or any nested part of one).

    Returns:
        UTF-8 JSON bytes.

    Raises:
        TypeError: If obj is not a JSON container or scalar.
        ValueError: On NaN or Infinity.
    """
    if obj is not None and not isinstance(
        obj, (dict, list, tuple, str, int, float, bool)
    ):
        raise TypeError(f"Unsupported type for canonical JSON: {type(obj).__name__}")

    raw = json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return raw.encode("utf-8")


def sha256_bytes(data: bytes) -> str:
    """Digest serialized envelope bytes as lowercase hex; the envelope content id."""
    return hashlib.sha256(data).hexdigest()
