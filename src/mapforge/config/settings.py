"""Map generator config models and loading helpers."""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mapforge.cache import GENERATOR_EXECUTABLE_SUB_DIRECTORY
from mapforge.download import DEFAULT_DOWNLOAD_URL_TEMPLATE
from mapforge.generation import GENERATION_TIMEOUT_SECONDS
from mapforge.naming import validate_version

GENERATOR_DEFAULT_VERSION = "0.1.1"


class MapGeneratorConfig(BaseModel):
    """Root map generator configuration model."""

    model_config = ConfigDict(extra="forbid")

    data_dir: Path = Path("~/.mapforge").expanduser()
    custom_maps_dir: Path | None = None
    default_version: str = GENERATOR_DEFAULT_VERSION
    generation_timeout_seconds: float = Field(default=GENERATION_TIMEOUT_SECONDS, gt=0)
    java_path: str = Field(default="java", min_length=1)
    download_url_template: str = DEFAULT_DOWNLOAD_URL_TEMPLATE
    download_timeout_seconds: float = Field(default=30.0, gt=0)
    max_workers: int = Field(default=4, ge=1, le=64)

    @field_validator("default_version")
    @classmethod
    def _validate_default_version(cls, value: str) -> str:
        if not validate_version(value):
            raise ValueError(f"unsupported generator version: {value!r}")
        return value

    @field_validator("download_url_template")
    @classmethod
    def _validate_url_template(cls, value: str) -> str:
        if "{version}" not in value:
            raise ValueError("download_url_template must contain '{version}'")
        return value

    @field_validator("data_dir", "custom_maps_dir")
    @classmethod
    def _expand_user(cls, value: Path | None) -> Path | None:
        return value.expanduser() if value is not None else None

    @property
    def generator_executable_dir(self) -> Path:
        """Cache root for generator executables."""
        return self.data_dir / GENERATOR_EXECUTABLE_SUB_DIRECTORY


class ConfigError(RuntimeError):
    """Raised when map generator config cannot be decoded or validated."""


def _decode_config_payload(path: Path) -> dict[str, object]:
    """Decode config payload from JSON or YAML.

    Args:
        path: Config file path.

    Returns:
        Parsed mapping payload.

    Raises:
        ConfigError: If decode fails or payload is not an object.
    """
    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid config JSON: {exc}") from exc
    else:
        try:
            payload = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid config YAML: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigError("Invalid config payload: root must be an object")
    return payload


def load_config(path: Path) -> MapGeneratorConfig:
    """Load map generator config from disk, defaulting when missing.

    Args:
        path: Config file path.

    Returns:
        Parsed config payload, or defaults when file does not exist.

    Raises:
        ConfigError: If payload decode or validation fails.
    """
    if not path.exists():
        return MapGeneratorConfig()
    payload = _decode_config_payload(path)
    try:
        return MapGeneratorConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config payload: {exc}") from exc
