"""Primitive types shared by the envelope, codec and numeric kernel."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, model_validator

PROTOCOL_VERSION = "1.0"

# Free-form string metadata attached to an envelope.
type Capabilities = Mapping[str, str]
# Accepted content types, order preserved.
type AcceptTypes = Sequence[str]
# Multi-part payload locations; opaque to the core.
type PayloadRefs = Sequence[Mapping[str, str]]


class OperationType(StrEnum):
    """Envelope operation kind. Wire form is the lowercase value."""

    CONTROL = "control"
    DATA = "data"
    ACK = "ack"
    ERROR = "error"
    REQUEST = "request"
    RESPONSE = "response"


class PayloadType(StrEnum):
    """Kind of out-of-band payload described by a payload hint."""

    VECTOR = "vector"
    TEXT = "text"
    METADATA = "metadata"
    BINARY = "binary"


class EncodingType(StrEnum):
    """Element encoding of a numeric payload."""

    FLOAT32 = "float32"
    FLOAT64 = "float64"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"


class PayloadHint(BaseModel):
    """Descriptor of an attached payload: type, byte size, encoding, element count."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    payload_type: PayloadType
    size: NonNegativeInt | None = None
    encoding: EncodingType | None = None
    count: NonNegativeInt | None = None


class NumericResult(BaseModel):
    """Outcome of one kernel operation.

    Exactly one of ``scalar``, ``similarity`` or ``data`` is set. Failures are
    raised as ``MatrixError`` and never produce a result.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    scalar: float | None = None
    similarity: float | None = None
    data: list[float] | None = Field(default=None)

    @model_validator(mode="after")
    def _exactly_one_value(self) -> NumericResult:
        populated = [
            name
            for name in ("scalar", "similarity", "data")
            if getattr(self, name) is not None
        ]
        if len(populated) != 1:
            raise ValueError(
                f"NumericResult must set exactly one of scalar/similarity/data, got {populated}"
            )
        return self

    @property
    def success(self) -> bool:
        """Always True: a returned result is a successful one."""
        return True
