"""Numeric payload packing for bytes referenced by ``payload_hint``.

Values are packed little-endian, one fixed-width element per value, in the
element format named by ``EncodingType``.
"""

from __future__ import annotations

import base64
import binascii
import struct
from collections.abc import Sequence

from umicp.errors import EnvelopeValidationError, SerializationError
from umicp.types import EncodingType, PayloadHint, PayloadType

_FORMATS: dict[EncodingType, str] = {
    EncodingType.FLOAT32: "f",
    EncodingType.FLOAT64: "d",
    EncodingType.INT32: "i",
    EncodingType.INT64: "q",
    EncodingType.UINT8: "B",
    EncodingType.UINT16: "H",
    EncodingType.UINT32: "I",
    EncodingType.UINT64: "Q",
}


def element_size(encoding: EncodingType) -> int:
    """Width in bytes of one element."""
    return struct.calcsize("<" + _FORMATS[encoding])


def pack_values(values: Sequence[float], encoding: EncodingType) -> bytes:
    """Pack values into little-endian bytes.

    Raises:
        SerializationError: If a value does not fit the encoding.
    """
    fmt = f"<{len(values)}{_FORMATS[encoding]}"
    try:
        return struct.pack(fmt, *values)
    except struct.error as exc:
        raise SerializationError(
            f"Cannot pack values as {encoding.value}: {exc}",
            data={"encoding": encoding.value},
        ) from exc


def unpack_values(data: bytes, encoding: EncodingType) -> list[float] | list[int]:
    """Unpack little-endian bytes into a list of numbers.

    Raises:
        SerializationError: If the byte length is not a multiple of the element size.
    """
    width = element_size(encoding)
    if len(data) % width:
        raise SerializationError(
            f"Payload length {len(data)} is not a multiple of {width} "
            f"({encoding.value})",
            data={"length": len(data), "encoding": encoding.value},
        )
    count = len(data) // width
    return list(struct.unpack(f"<{count}{_FORMATS[encoding]}", data))


def describe_vector(
    values: Sequence[float], encoding: EncodingType = EncodingType.FLOAT32
) -> PayloadHint:
    """Build the payload hint for a vector packed with ``pack_values``."""
    return PayloadHint(
        payload_type=PayloadType.VECTOR,
        size=len(values) * element_size(encoding),
        encoding=encoding,
        count=len(values),
    )


def base64_encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def base64_decode(text: str) -> bytes:
    """Decode strict base64 text.

    Raises:
        EnvelopeValidationError: If text is not valid base64.
    """
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise EnvelopeValidationError(f"Invalid base64: {exc}") from exc
