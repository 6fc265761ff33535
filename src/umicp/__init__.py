"""UMICP core: typed message envelopes and a dimension-checked numeric kernel."""

from umicp.config import UmicpConfig, load_config
from umicp.envelope import Envelope, EnvelopeBuilder
from umicp.errors import (
    ConfigurationError,
    EnvelopeValidationError,
    MatrixError,
    SerializationError,
    UmicpError,
    UmicpErrorCode,
)
from umicp.serialization import (
    EnvelopeCodec,
    deserialize_envelope,
    hash_envelope,
    serialize_envelope,
)
from umicp.types import (
    PROTOCOL_VERSION,
    EncodingType,
    NumericResult,
    OperationType,
    PayloadHint,
    PayloadType,
)

__version__ = "0.1.0"

__all__ = [
    "PROTOCOL_VERSION",
    "ConfigurationError",
    "EncodingType",
    "Envelope",
    "EnvelopeBuilder",
    "EnvelopeCodec",
    "EnvelopeValidationError",
    "MatrixError",
    "NumericResult",
    "OperationType",
    "PayloadHint",
    "PayloadType",
    "SerializationError",
    "UmicpConfig",
    "UmicpError",
    "UmicpErrorCode",
    "deserialize_envelope",
    "hash_envelope",
    "load_config",
    "serialize_envelope",
]
