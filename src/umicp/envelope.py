"""Envelope (immutable, validated) and EnvelopeBuilder (mutable working copy)."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from umicp.errors import EnvelopeValidationError
from umicp.types import (
    PROTOCOL_VERSION,
    AcceptTypes,
    Capabilities,
    OperationType,
    PayloadHint,
    PayloadRefs,
)
from umicp.utils import current_timestamp, generate_message_id
from umicp.validation import validate_envelope_fields


class Envelope(BaseModel):
    """Typed message container. Pure data; no IO, hashing or wire naming.

    Every construction runs the field checks, so an instance that exists is a
    valid one. Build through ``Envelope.builder()``. ``model_copy(update=...)``
    re-runs the checks; ``model_construct()`` skips all validation and must not
    be used to create envelopes.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    version: str = PROTOCOL_VERSION
    message_id: str
    timestamp: str
    from_: str = Field(alias="from")
    to: str
    operation: OperationType = OperationType.CONTROL
    capabilities: dict[str, str] | None = None
    schema_uri: str | None = None
    accept: tuple[str, ...] | None = None
    payload_hint: PayloadHint | None = None
    payload_refs: tuple[dict[str, str], ...] | None = None

    @model_validator(mode="after")
    def _validate_fields(self) -> Envelope:
        # EnvelopeValidationError is not a ValueError, so pydantic lets it through.
        validate_envelope_fields(
            from_=self.from_,
            to=self.to,
            message_id=self.message_id,
            capabilities=self.capabilities,
            schema_uri=self.schema_uri,
            accept=self.accept,
        )
        return self

    def model_copy(
        self, *, update: Mapping[str, Any] | None = None, deep: bool = False
    ) -> Envelope:
        """Copy the envelope; an update goes through full validation again.

        Raises:
            EnvelopeValidationError: If the updated fields fail a check.
        """
        if not update:
            return super().model_copy(deep=deep)
        try:
            fields = {name: getattr(self, name) for name in type(self).model_fields}
            return type(self).model_validate({**fields, **update})
        except ValidationError as exc:
            raise EnvelopeValidationError(f"Invalid envelope field: {exc}") from exc

    @classmethod
    def builder(cls) -> EnvelopeBuilder:
        """Return a fresh builder with a new message id and timestamp."""
        return EnvelopeBuilder()


class EnvelopeBuilder:
    """Fluent constructor for Envelope. Setters never validate; ``build()`` does."""

    def __init__(self, *, version: str = PROTOCOL_VERSION) -> None:
        """Seed the working copy.

        Args:
            version: Protocol version stamped on the envelope.
        """
        self._version = version
        self._message_id = generate_message_id()
        self._timestamp = current_timestamp()
        self._from = ""
        self._to = ""
        self._operation = OperationType.CONTROL
        self._capabilities: dict[str, str] | None = None
        self._schema_uri: str | None = None
        self._accept: tuple[str, ...] | None = None
        self._payload_hint: PayloadHint | None = None
        self._payload_refs: tuple[dict[str, str], ...] | None = None

    def from_(self, sender: str) -> EnvelopeBuilder:
        self._from = sender
        return self

    def to(self, recipient: str) -> EnvelopeBuilder:
        self._to = recipient
        return self

    def operation(self, operation: OperationType) -> EnvelopeBuilder:
        self._operation = operation
        return self

    def message_id(self, message_id: str) -> EnvelopeBuilder:
        """Use an explicit message id. Checked, never normalized, at build time."""
        self._message_id = message_id
        return self

    def capability(self, key: str, value: str) -> EnvelopeBuilder:
        """Add one capability entry, keeping the others."""
        if self._capabilities is None:
            self._capabilities = {}
        self._capabilities[key] = value
        return self

    def capabilities(self, capabilities: Capabilities) -> EnvelopeBuilder:
        """Replace the whole capability map."""
        self._capabilities = dict(capabilities)
        return self

    def schema_uri(self, schema_uri: str) -> EnvelopeBuilder:
        self._schema_uri = schema_uri
        return self

    def accept(self, accept: AcceptTypes) -> EnvelopeBuilder:
        self._accept = tuple(accept)
        return self

    def payload_hint(self, hint: PayloadHint) -> EnvelopeBuilder:
        self._payload_hint = hint
        return self

    def payload_refs(self, refs: PayloadRefs) -> EnvelopeBuilder:
        self._payload_refs = tuple(dict(ref) for ref in refs)
        return self

    def build(self) -> Envelope:
        """Validate the working copy and return an immutable Envelope.

        Returns:
            Validated Envelope. Later builder calls do not affect it.

        Raises:
            EnvelopeValidationError: On the first failing field check, or when a
                field has the wrong type.
        """
        try:
            return Envelope(
                version=self._version,
                message_id=self._message_id,
                timestamp=self._timestamp,
                from_=self._from,
                to=self._to,
                operation=self._operation,
                capabilities=_copy_map(self._capabilities),
                schema_uri=self._schema_uri,
                accept=self._accept,
                payload_hint=self._payload_hint,
                payload_refs=_copy_refs(self._payload_refs),
            )
        except ValidationError as exc:
            raise EnvelopeValidationError(f"Invalid envelope field: {exc}") from exc


def _copy_map(value: Mapping[str, str] | None) -> dict[str, str] | None:
    return None if value is None else dict(value)


def _copy_refs(
    value: Sequence[Mapping[str, str]] | None,
) -> tuple[dict[str, str], ...] | None:
    return None if value is None else tuple(dict(ref) for ref in value)
