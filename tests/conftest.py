"""Pytest configuration and shared fixtures."""

import pytest

from umicp.envelope import Envelope
from umicp.types import EncodingType, OperationType, PayloadHint, PayloadType


@pytest.fixture
def minimal_envelope() -> Envelope:
    """Envelope with only the required fields set."""
    return Envelope.builder().from_("client-001").to("server-001").build()


@pytest.fixture
def full_envelope() -> Envelope:
    """Envelope with every optional field populated."""
    return (
        Envelope.builder()
        .from_("client-001")
        .to("server-001")
        .operation(OperationType.DATA)
        .capability("priority", "high")
        .capability("content-type", "application/json")
        .schema_uri("https://example.com/schemas/embedding.v1.json")
        .accept(["application/json", "application/cbor"])
        .payload_hint(
            PayloadHint(
                payload_type=PayloadType.VECTOR,
                size=3072,
                encoding=EncodingType.FLOAT32,
                count=768,
            )
        )
        .payload_refs([{"part": "0", "uri": "shm://embeddings/0"}])
        .build()
    )
