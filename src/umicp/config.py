"""UMICP protocol config models and loading helpers."""

from __future__ import annotations

import json
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from umicp.errors import ConfigurationError
from umicp.types import PROTOCOL_VERSION, EncodingType

_VERSION_PATTERN = re.compile(r"^\d+\.\d+$")

MIN_MESSAGE_SIZE = 1024
MAX_MESSAGE_SIZE = 100 * 1024 * 1024
DEFAULT_MESSAGE_SIZE = 1024 * 1024


class UmicpConfig(BaseModel):
    """Root UMICP configuration model."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    protocol_version: str = PROTOCOL_VERSION
    supported_versions: tuple[str, ...] = ("1.0", "1.1")
    max_message_size: int = Field(
        default=DEFAULT_MESSAGE_SIZE, ge=MIN_MESSAGE_SIZE, le=MAX_MESSAGE_SIZE
    )
    default_encoding: EncodingType = EncodingType.FLOAT32

    @model_validator(mode="after")
    def _validate_versions(self) -> UmicpConfig:
        """Validate version formats and that the active version is supported.

        Returns:
            Validated config model.

        Raises:
            ValueError: If a version is malformed or unsupported.
        """
        for version in (self.protocol_version, *self.supported_versions):
            if not _VERSION_PATTERN.match(version):
                raise ValueError(
                    f"Invalid version format {version!r} (expected major.minor)"
                )
        if self.protocol_version not in self.supported_versions:
            raise ValueError(
                f"Unsupported protocol version {self.protocol_version!r}"
            )
        return self


def _decode_config_payload(path: Path) -> dict[str, object]:
    """Decode config payload from JSON or YAML.

    Args:
        path: Config file path.

    Returns:
        Parsed mapping payload.

    Raises:
        ConfigurationError: If decode fails or payload is not an object.
    """
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid UMICP config JSON: {exc}") from exc
    else:
        try:
            payload = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid UMICP config YAML: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigurationError("Invalid UMICP config payload: root must be an object")
    return payload


def load_config(path: Path) -> UmicpConfig:
    """Load UMICP config from disk, defaulting when missing.

    Args:
        path: Config file path (``.json``, ``.yaml`` or ``.yml``).

    Returns:
        Parsed config, or defaults when file does not exist.

    Raises:
        ConfigurationError: If payload decode or validation fails.
    """
    if not path.exists():
        return UmicpConfig()
    payload = _decode_config_payload(path)
    try:
        return UmicpConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid UMICP config payload: {exc}") from exc
