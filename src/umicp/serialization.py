"""Envelope wire codec: canonical JSON bytes, strict decoding and content hash.

Wire object uses short names (``v``, ``msg_id``, ``ts``, ``from``, ``to``,
``op``) and omits absent optional fields entirely instead of emitting null.
"""

from __future__ import annotations

import json
import logging
from enum import StrEnum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from umicp.canonical import canonical_json_bytes, sha256_bytes
from umicp.config import UmicpConfig
from umicp.envelope import Envelope, EnvelopeBuilder
from umicp.errors import EnvelopeValidationError, SerializationError
from umicp.types import EncodingType, OperationType, PayloadHint, PayloadType

_LOGGER = logging.getLogger(__name__)

# Wire values are taken as sent: no "12" -> 12 or true -> 1 coercion, so the
# re-encoded bytes (and hash) match what the sender produced.
_WireCount = Annotated[StrictInt, Field(ge=0)]


class _PayloadHintWire(BaseModel):
    """Wire shape of ``payload_hint``; enum names stay raw until checked."""

    model_config = ConfigDict(extra="ignore")

    type: StrictStr
    size: _WireCount | None = None
    encoding: StrictStr | None = None
    count: _WireCount | None = None


class _EnvelopeWire(BaseModel):
    """Wire shape of an envelope. Unknown top-level keys are ignored."""

    # Accepts only the "from" alias; a "from_" key is not a sender.
    model_config = ConfigDict(extra="ignore")

    v: StrictStr
    msg_id: StrictStr
    ts: StrictStr
    from_: StrictStr = Field(alias="from")
    to: StrictStr
    op: StrictStr
    capabilities: dict[StrictStr, StrictStr] | None = None
    schema_uri: StrictStr | None = None
    accept: list[StrictStr] | None = None
    payload_hint: _PayloadHintWire | None = None
    payload_refs: list[dict[StrictStr, StrictStr]] | None = None


def _parse_enum[E: StrEnum](enum_type: type[E], value: str, label: str) -> E:
    try:
        return enum_type(value)
    except ValueError as exc:
        raise EnvelopeValidationError(
            f"Unknown {label}: {value}", data={"value": value}
        ) from exc


def envelope_to_wire(envelope: Envelope) -> dict[str, object]:
    """Map an Envelope to its wire object, omitting absent optional fields."""
    wire: dict[str, object] = {
        "v": envelope.version,
        "msg_id": envelope.message_id,
        "ts": envelope.timestamp,
        "from": envelope.from_,
        "to": envelope.to,
        "op": envelope.operation.value,
    }
    if envelope.capabilities is not None:
        wire["capabilities"] = dict(envelope.capabilities)
    if envelope.schema_uri is not None:
        wire["schema_uri"] = envelope.schema_uri
    if envelope.accept is not None:
        wire["accept"] = list(envelope.accept)
    if envelope.payload_hint is not None:
        wire["payload_hint"] = _hint_to_wire(envelope.payload_hint)
    if envelope.payload_refs is not None:
        wire["payload_refs"] = [dict(ref) for ref in envelope.payload_refs]
    return wire


def _hint_to_wire(hint: PayloadHint) -> dict[str, object]:
    wire: dict[str, object] = {"type": hint.payload_type.value}
    if hint.size is not None:
        wire["size"] = hint.size
    if hint.encoding is not None:
        wire["encoding"] = hint.encoding.value
    if hint.count is not None:
        wire["count"] = hint.count
    return wire


def envelope_from_wire(data: object) -> Envelope:
    """Rebuild an Envelope from a decoded wire object.

    Args:
        data: Parsed JSON value.

    Returns:
        Validated Envelope.

    Raises:
        SerializationError: If the object is malformed or misses required fields.
        EnvelopeValidationError: On unknown enum strings or failing field checks.
    """
    if not isinstance(data, dict):
        raise SerializationError(
            "Failed to deserialize envelope: root must be an object"
        )
    try:
        wire = _EnvelopeWire.model_validate(data)
    except ValidationError as exc:
        raise SerializationError(f"Failed to deserialize envelope: {exc}") from exc

    operation = _parse_enum(OperationType, wire.op, "operation type")
    payload_hint = None
    if wire.payload_hint is not None:
        hint = wire.payload_hint
        payload_hint = PayloadHint(
            payload_type=_parse_enum(PayloadType, hint.type, "payload type"),
            size=hint.size,
            encoding=(
                None
                if hint.encoding is None
                else _parse_enum(EncodingType, hint.encoding, "encoding type")
            ),
            count=hint.count,
        )
    try:
        return Envelope(
            version=wire.v,
            message_id=wire.msg_id,
            timestamp=wire.ts,
            from_=wire.from_,
            to=wire.to,
            operation=operation,
            capabilities=wire.capabilities,
            schema_uri=wire.schema_uri,
            accept=None if wire.accept is None else tuple(wire.accept),
            payload_hint=payload_hint,
            payload_refs=None if wire.payload_refs is None else tuple(wire.payload_refs),
        )
    except ValidationError as exc:
        raise SerializationError(f"Failed to deserialize envelope: {exc}") from exc


def serialize_envelope(envelope: Envelope) -> bytes:
    """Encode an Envelope to canonical JSON bytes. Does not re-validate.

    Raises:
        SerializationError: If the wire object cannot be encoded.
    """
    try:
        return canonical_json_bytes(envelope_to_wire(envelope))
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Failed to serialize envelope: {exc}") from exc


def deserialize_envelope(raw: bytes | str) -> Envelope:
    """Decode wire bytes (or text) into a validated Envelope.

    Raises:
        SerializationError: On invalid JSON or malformed wire object.
        EnvelopeValidationError: On unknown enum strings or failing field checks.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SerializationError(f"Failed to deserialize envelope: {exc}") from exc
    return envelope_from_wire(data)


def hash_envelope(envelope: Envelope) -> str:
    """Lowercase hex SHA-256 of the serialized bytes. Identity, not authentication."""
    return sha256_bytes(serialize_envelope(envelope))


class EnvelopeCodec:
    """Envelope codec bound to a UmicpConfig: size limit and accepted versions."""

    def __init__(self, config: UmicpConfig | None = None) -> None:
        """Create codec.

        Args:
            config: Protocol config; defaults are used when omitted.
        """
        self._config = config or UmicpConfig()

    @property
    def config(self) -> UmicpConfig:
        return self._config

    def builder(self) -> EnvelopeBuilder:
        """Return a builder stamped with the configured protocol version."""
        return EnvelopeBuilder(version=self._config.protocol_version)

    def encode(self, envelope: Envelope) -> bytes:
        """Serialize and enforce ``max_message_size``.

        Raises:
            SerializationError: If encoding fails or output is oversized.
        """
        raw = serialize_envelope(envelope)
        self._check_size(len(raw))
        _LOGGER.debug(
            "Encoded envelope %s (%d bytes)", envelope.message_id, len(raw)
        )
        return raw

    def decode(self, raw: bytes | str) -> Envelope:
        """Check size, decode and check the protocol version.

        Raises:
            SerializationError: If input is oversized or malformed.
            EnvelopeValidationError: If the envelope is invalid or its version
                is not supported.
        """
        size = len(raw.encode("utf-8")) if isinstance(raw, str) else len(raw)
        try:
            self._check_size(size)
            envelope = deserialize_envelope(raw)
            if envelope.version not in self._config.supported_versions:
                raise EnvelopeValidationError(
                    f"Unsupported protocol version: {envelope.version}",
                    data={"supported": list(self._config.supported_versions)},
                )
        except (SerializationError, EnvelopeValidationError) as exc:
            _LOGGER.warning("Rejected envelope (%s): %s", exc.code, exc.message)
            raise
        _LOGGER.debug("Decoded envelope %s (%d bytes)", envelope.message_id, size)
        return envelope

    def hash(self, envelope: Envelope) -> str:
        return sha256_bytes(self.encode(envelope))

    def _check_size(self, size: int) -> None:
        limit = self._config.max_message_size
        if size > limit:
            raise SerializationError(
                f"Message size {size} exceeds maximum {limit} bytes",
                data={"size": size, "max_message_size": limit},
            )
