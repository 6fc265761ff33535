"""Deterministic UMICP error contracts."""

from __future__ import annotations

from enum import StrEnum


class UmicpErrorCode(StrEnum):
    """Stable error codes for envelope, codec and kernel failures."""

    VALIDATION = "validation"
    SERIALIZATION = "serialization"
    MATRIX_DIMENSION_MISMATCH = "matrix_dimension_mismatch"
    MATRIX_SINGULAR = "matrix_singular"
    MATRIX_UNSUPPORTED_SIZE = "matrix_unsupported_size"
    CONFIGURATION = "configuration"
    GENERIC = "generic"


class UmicpError(RuntimeError):
    """UMICP failure with stable deterministic code."""

    def __init__(
        self,
        code: UmicpErrorCode,
        message: str,
        *,
        data: dict[str, object] | None = None,
    ) -> None:
        """Create UMICP failure.

        Args:
            code: Stable error code.
            message: Human-readable error message.
            data: Optional structured payload for diagnostics.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data or {}

    @classmethod
    def generic(cls, message: str, **data: object) -> UmicpError:
        """Build a caller-raised generic failure.

        Args:
            message: Human-readable error message.
            **data: Optional diagnostics.

        Returns:
            Error instance with ``GENERIC`` code.
        """
        return cls(UmicpErrorCode.GENERIC, message, data=dict(data))


class EnvelopeValidationError(UmicpError):
    """Raised for empty/malformed fields, invalid UUIDs and unknown enum strings."""

    def __init__(self, message: str, *, data: dict[str, object] | None = None) -> None:
        super().__init__(UmicpErrorCode.VALIDATION, message, data=data)


class SerializationError(UmicpError):
    """Raised when envelope or payload bytes cannot be encoded or decoded."""

    def __init__(self, message: str, *, data: dict[str, object] | None = None) -> None:
        super().__init__(UmicpErrorCode.SERIALIZATION, message, data=data)


class MatrixError(UmicpError):
    """Raised by the numeric kernel. Permanent; never retried internally."""

    _CODES = frozenset(
        {
            UmicpErrorCode.MATRIX_DIMENSION_MISMATCH,
            UmicpErrorCode.MATRIX_SINGULAR,
            UmicpErrorCode.MATRIX_UNSUPPORTED_SIZE,
        }
    )

    def __init__(
        self,
        code: UmicpErrorCode,
        message: str,
        *,
        data: dict[str, object] | None = None,
    ) -> None:
        if code not in self._CODES:
            raise ValueError(f"Not a matrix error code: {code!r}")
        super().__init__(code, message, data=data)


class ConfigurationError(UmicpError):
    """Raised when UMICP config cannot be decoded or validated."""

    def __init__(self, message: str, *, data: dict[str, object] | None = None) -> None:
        super().__init__(UmicpErrorCode.CONFIGURATION, message, data=data)
