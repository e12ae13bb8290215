"""
Convivencia Engine Settings

Settings are validated with pydantic, read from an optional YAML file
(path in CONVIVENCIA_CONFIG) and then overridden by environment variables:

    CONVIVENCIA_ALLOW_BACKWARD       true|false
    CONVIVENCIA_TRANSITION_ATTEMPTS  integer >= 1
    CONVIVENCIA_LOG_LEVEL            DEBUG|INFO|WARNING|ERROR
    CONVIVENCIA_LOG_FORMAT           json|text
    CONVIVENCIA_STORAGE_PATH         JSON case file (unset = in-memory)

Example YAML:

    allow_backward_transitions: true
    transition_attempts: 2
    log_level: INFO
    storage_path: data/expedientes.json
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

CONFIG_ENV_VAR = "CONVIVENCIA_CONFIG"

_ENV_OVERRIDES = {
    "CONVIVENCIA_ALLOW_BACKWARD": "allow_backward_transitions",
    "CONVIVENCIA_TRANSITION_ATTEMPTS": "transition_attempts",
    "CONVIVENCIA_LOG_LEVEL": "log_level",
    "CONVIVENCIA_LOG_FORMAT": "log_format",
    "CONVIVENCIA_STORAGE_PATH": "storage_path",
}


class EngineSettings(BaseModel):
    """Runtime settings for the case service and its API."""

    allow_backward_transitions: bool = Field(
        default=True,
        description="Permit audited corrections to an earlier stage",
    )
    transition_attempts: int = Field(
        default=1,
        ge=1,
        description="Attempts per transition when the repository reports a race",
    )
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: Literal["json", "text"] = Field(default="json")
    storage_path: Optional[str] = Field(
        default=None,
        description="JSON case file; None keeps cases in memory",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    model_config = {
        "extra": "forbid",  # Reject unknown keys
    }


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            message=f"Failed to read settings file: {e}",
            details={"path": str(path)},
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            message="Settings file must contain a mapping",
            details={"path": str(path)},
        )
    return data


def load_settings(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> EngineSettings:
    """
    Load engine settings.

    Args:
        path: YAML settings file; defaults to $CONVIVENCIA_CONFIG if set
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated EngineSettings

    Raises:
        ConfigurationError: If the file cannot be read or validation fails
    """
    env = os.environ if environ is None else environ

    if path is None and env.get(CONFIG_ENV_VAR):
        path = env[CONFIG_ENV_VAR]

    data: dict[str, Any] = _read_yaml(Path(path)) if path is not None else {}

    for var, key in _ENV_OVERRIDES.items():
        if env.get(var):
            data[key] = env[var]

    try:
        return EngineSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            message=f"Settings validation failed: {e.error_count()} errors",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e
