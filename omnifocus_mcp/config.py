"""Configuration loading and logging setup for OmniFocus MCP."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_TIMEOUT_MS = 60_000
DEFAULT_PROBE_TIMEOUT_MS = 5_000
DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ConfigError(RuntimeError):
    """Raised when configuration from the environment is invalid."""


class Settings(BaseModel):
    """Runtime settings for the bridge and its callers."""

    model_config = ConfigDict(frozen=True)

    osascript: str = Field(default="osascript", min_length=1)
    app_name: str = Field(default="OmniFocus", min_length=1)
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, ge=1)
    probe_timeout_ms: int = Field(default=DEFAULT_PROBE_TIMEOUT_MS, ge=1)
    max_output_bytes: int = Field(default=DEFAULT_MAX_OUTPUT_BYTES, ge=1)
    log_level: str = "WARNING"


_ENV_KEYS = {
    "osascript": "OF_OSASCRIPT",
    "app_name": "OF_APP_NAME",
    "timeout_ms": "OF_TIMEOUT_MS",
    "probe_timeout_ms": "OF_PROBE_TIMEOUT_MS",
    "max_output_bytes": "OF_MAX_OUTPUT_BYTES",
    "log_level": "OF_LOG_LEVEL",
}

_INT_FIELDS = {"timeout_ms", "probe_timeout_ms", "max_output_bytes"}


def _read_int(raw_value: str, *, key: str) -> int:
    try:
        value = int(raw_value.strip())
    except ValueError:
        raise ConfigError(f"{key} must be an integer.") from None
    if value < 1:
        raise ConfigError(f"{key} must be a positive integer.")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Load settings from the environment, falling back to defaults."""
    env = os.environ if environ is None else environ
    values: dict[str, object] = {}

    for field_name, key in _ENV_KEYS.items():
        raw_value = env.get(key)
        if raw_value is None or not raw_value.strip():
            continue
        if field_name in _INT_FIELDS:
            values[field_name] = _read_int(raw_value, key=key)
        else:
            values[field_name] = raw_value.strip()

    level = str(values.get("log_level", "WARNING")).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"OF_LOG_LEVEL must be a logging level name, got {level!r}.")
    values["log_level"] = level

    return Settings(**values)


def configure_logging(level: str | int = logging.WARNING) -> None:
    """Send log records to stderr; stdout carries JSON and MCP traffic."""
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
