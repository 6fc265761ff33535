"""Envelope wire codec: canonical form, strict decoding, hashing, codec limits."""

import hashlib
import json
import uuid

import pytest

from umicp.canonical import canonical_json_bytes, sha256_bytes
from umicp.config import UmicpConfig
from umicp.envelope import Envelope
from umicp.errors import EnvelopeValidationError, SerializationError
from umicp.serialization import (
    EnvelopeCodec,
    deserialize_envelope,
    hash_envelope,
    serialize_envelope,
)
from umicp.types import OperationType


def _wire(**overrides: object) -> dict[str, object]:
    wire: dict[str, object] = {
        "v": "1.0",
        "msg_id": str(uuid.uuid4()),
        "ts": "2024-05-01T12:00:00.123456+00:00",
        "from": "client-001",
        "to": "server-001",
        "op": "data",
    }
    wire.update(overrides)
    return wire


@pytest.mark.unit
def test_minimal_wire_form_omits_absent_fields(minimal_envelope: Envelope) -> None:
    """Only required short-named fields appear; no nulls."""
    data = json.loads(serialize_envelope(minimal_envelope))
    assert set(data) == {"v", "msg_id", "ts", "from", "to", "op"}
    assert data["op"] == "control"
    assert data["from"] == "client-001"


@pytest.mark.unit
def test_full_wire_form_uses_short_names(full_envelope: Envelope) -> None:
    """Optional fields use their wire names and lowercase enum values."""
    data = json.loads(serialize_envelope(full_envelope))
    assert data["op"] == "data"
    assert data["capabilities"] == {"priority": "high", "content-type": "application/json"}
    assert data["schema_uri"] == "https://example.com/schemas/embedding.v1.json"
    assert data["accept"] == ["application/json", "application/cbor"]
    assert data["payload_hint"] == {
        "type": "vector",
        "size": 3072,
        "encoding": "float32",
        "count": 768,
    }
    assert data["payload_refs"] == [{"part": "0", "uri": "shm://embeddings/0"}]


@pytest.mark.unit
def test_payload_hint_sub_fields_omitted_when_absent() -> None:
    """Absent hint size/encoding/count are not emitted."""
    raw = json.dumps(_wire(payload_hint={"type": "text"}))
    env = deserialize_envelope(raw)
    assert json.loads(serialize_envelope(env))["payload_hint"] == {"type": "text"}


@pytest.mark.unit
@pytest.mark.parametrize("fixture_name", ["minimal_envelope", "full_envelope"])
def test_round_trip_reproduces_every_field(
    fixture_name: str, request: pytest.FixtureRequest
) -> None:
    """deserialize(serialize(e)) == e, version and timestamp included."""
    env: Envelope = request.getfixturevalue(fixture_name)
    restored = deserialize_envelope(serialize_envelope(env))
    assert restored == env
    assert restored.version == env.version
    assert restored.timestamp == env.timestamp


@pytest.mark.unit
def test_every_operation_round_trips() -> None:
    """Each operation kind survives the wire as its lowercase name."""
    for operation in OperationType:
        env = Envelope.builder().from_("a").to("b").operation(operation).build()
        raw = serialize_envelope(env)
        assert json.loads(raw)["op"] == operation.value
        assert deserialize_envelope(raw).operation == operation


@pytest.mark.unit
def test_serialization_is_independent_of_capability_order() -> None:
    """Capability insertion order does not change bytes or hash."""
    builder = Envelope.builder().from_("a").to("b")
    first = builder.capabilities({"x": "1", "y": "2"}).build()
    second = builder.capabilities({"y": "2", "x": "1"}).build()
    assert serialize_envelope(first) == serialize_envelope(second)
    assert hash_envelope(first) == hash_envelope(second)


@pytest.mark.unit
def test_hash_is_lowercase_sha256_hex(full_envelope: Envelope) -> None:
    """Hash is 64 lowercase hex chars and deterministic."""
    digest = hash_envelope(full_envelope)
    assert len(digest) == 64
    assert digest == digest.lower()
    assert digest == hash_envelope(deserialize_envelope(serialize_envelope(full_envelope)))


@pytest.mark.unit
def test_wire_bytes_are_sorted_compact_utf8() -> None:
    """Wire bytes sort keys, drop whitespace and keep non-ASCII text as UTF-8."""
    raw = canonical_json_bytes({"to": "naïve", "capabilities": {"b": "2", "a": "1"}})
    assert raw == '{"capabilities":{"a":"1","b":"2"},"to":"naïve"}'.encode()
    assert sha256_bytes(raw) == hashlib.sha256(raw).hexdigest()
    with pytest.raises(ValueError):
        canonical_json_bytes({"size": float("nan")})
    with pytest.raises(TypeError, match="Unsupported type for canonical JSON"):
        canonical_json_bytes({1, 2})  # type: ignore[arg-type]


@pytest.mark.unit
def test_hash_is_digest_of_serialized_bytes(full_envelope: Envelope) -> None:
    """The content id is the SHA-256 of exactly the bytes that go on the wire."""
    raw = serialize_envelope(full_envelope)
    assert hash_envelope(full_envelope) == hashlib.sha256(raw).hexdigest()


@pytest.mark.unit
def test_hash_changes_with_one_capability_value() -> None:
    """Changing a single capability value changes the hash."""
    builder = Envelope.builder().from_("a").to("b").capability("priority", "high")
    high = builder.build()
    low = builder.capability("priority", "low").build()
    assert hash_envelope(high) != hash_envelope(low)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("overrides", "match"),
    [
        ({"op": "broadcast"}, "Unknown operation type: broadcast"),
        ({"op": "DATA"}, "Unknown operation type: DATA"),
        ({"payload_hint": {"type": "audio"}}, "Unknown payload type: audio"),
        (
            {"payload_hint": {"type": "vector", "encoding": "float16"}},
            "Unknown encoding type: float16",
        ),
    ],
    ids=["unknown_op", "uppercase_op", "unknown_payload_type", "unknown_encoding"],
)
def test_deserialize_rejects_unknown_enum_strings(
    overrides: dict[str, object], match: str
) -> None:
    """Unknown enum strings are validation errors, never defaulted."""
    with pytest.raises(EnvelopeValidationError, match=match):
        deserialize_envelope(json.dumps(_wire(**overrides)))


@pytest.mark.unit
@pytest.mark.parametrize("missing", ["v", "msg_id", "ts", "from", "to", "op"])
def test_deserialize_rejects_missing_required_field(missing: str) -> None:
    """Missing required fields are malformed input."""
    wire = _wire()
    del wire[missing]
    with pytest.raises(SerializationError, match="Failed to deserialize envelope"):
        deserialize_envelope(json.dumps(wire))


@pytest.mark.unit
def test_deserialize_reads_sender_only_from_wire_name() -> None:
    """A "from_" key does not stand in for the "from" field."""
    wire = _wire()
    wire["from_"] = wire.pop("from")
    with pytest.raises(SerializationError, match="Failed to deserialize envelope"):
        deserialize_envelope(json.dumps(wire))


@pytest.mark.unit
@pytest.mark.parametrize(
    "overrides",
    [
        {"payload_hint": {"type": "vector", "size": "12"}},
        {"payload_hint": {"type": "vector", "size": True}},
        {"payload_hint": {"type": "vector", "count": 3.0}},
        {"payload_hint": {"type": "vector", "count": -1}},
        {"payload_hint": {"type": 1}},
        {"to": 5},
        {"v": 1.0},
        {"capabilities": {"k": 1}},
        {"accept": ["application/json", 2]},
        {"payload_refs": [{"uri": True}]},
    ],
    ids=[
        "size_as_string",
        "size_as_bool",
        "count_as_float",
        "negative_count",
        "hint_type_as_int",
        "to_as_int",
        "version_as_float",
        "capability_value_as_int",
        "accept_entry_as_int",
        "ref_value_as_bool",
    ],
)
def test_deserialize_rejects_wrongly_typed_values(overrides: dict[str, object]) -> None:
    """Wire values are not coerced; the wrong JSON type is malformed input."""
    with pytest.raises(SerializationError, match="Failed to deserialize envelope"):
        deserialize_envelope(json.dumps(_wire(**overrides)))


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw",
    [b"not json", b"[1, 2, 3]", b'{"v": 1}', b"\x80\x81\x82\x83"],
    ids=["garbage", "array_root", "wrong_type", "bad_utf8"],
)
def test_deserialize_rejects_malformed_input(raw: bytes) -> None:
    """Malformed bytes raise SerializationError."""
    with pytest.raises(SerializationError):
        deserialize_envelope(raw)


@pytest.mark.unit
def test_deserialize_runs_field_checks() -> None:
    """A wire envelope with an invalid id is rejected like build() would."""
    with pytest.raises(EnvelopeValidationError, match="Invalid UUID format"):
        deserialize_envelope(json.dumps(_wire(msg_id="hello-001")))


@pytest.mark.unit
def test_deserialize_ignores_unknown_top_level_keys() -> None:
    """Extra keys from newer peers are ignored."""
    env = deserialize_envelope(json.dumps(_wire(trace_id="abc")))
    assert env.operation == OperationType.DATA


@pytest.mark.unit
def test_deserialize_preserves_timestamp_text() -> None:
    """Timestamp text is kept byte-for-byte, not reformatted."""
    env = deserialize_envelope(json.dumps(_wire(ts="2024-05-01T12:00:00Z")))
    assert env.timestamp == "2024-05-01T12:00:00Z"
    assert json.loads(serialize_envelope(env))["ts"] == "2024-05-01T12:00:00Z"


@pytest.mark.unit
def test_codec_rejects_oversized_input() -> None:
    """Decoding input above max_message_size fails before parsing."""
    codec = EnvelopeCodec(UmicpConfig(max_message_size=1024))
    raw = json.dumps(_wire(capabilities={"blob": "x" * 2000})).encode("utf-8")
    with pytest.raises(SerializationError, match="exceeds maximum 1024"):
        codec.decode(raw)


@pytest.mark.unit
def test_codec_rejects_oversized_output() -> None:
    """Encoding refuses to produce bytes above max_message_size."""
    codec = EnvelopeCodec(UmicpConfig(max_message_size=1024))
    env = Envelope.builder().from_("a").to("b").capability("blob", "x" * 2000).build()
    with pytest.raises(SerializationError, match="exceeds maximum"):
        codec.encode(env)


@pytest.mark.unit
def test_codec_rejects_unsupported_version() -> None:
    """Versions outside supported_versions are rejected on decode."""
    codec = EnvelopeCodec()
    with pytest.raises(EnvelopeValidationError, match="Unsupported protocol version: 2.0"):
        codec.decode(json.dumps(_wire(v="2.0")))


@pytest.mark.unit
def test_codec_builder_uses_configured_version() -> None:
    """Codec builder stamps the configured protocol version and round-trips."""
    codec = EnvelopeCodec(UmicpConfig(protocol_version="1.1"))
    env = codec.builder().from_("a").to("b").build()
    assert env.version == "1.1"
    assert codec.decode(codec.encode(env)) == env
    assert codec.hash(env) == hash_envelope(env)
