"""Server configuration — settings models, YAML loading, env overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from mcpkit.utils.logsink import LogLevel

ENV_PREFIX = "MCPKIT_"


class ConfigError(Exception):
    """Raised when settings cannot be read or fail validation."""


class TelemetrySettings(BaseModel):
    """Optional telemetry configuration."""

    enabled: bool = False
    otlp_endpoint: str | None = None


class ServerSettings(BaseModel):
    """Everything needed to serve an MCP application over HTTP."""

    name: str = "mcpkit"
    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=0, le=65535)
    path: str = "/"
    log_level: LogLevel = LogLevel.INFO
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> ServerSettings:
        """Build settings from ``MCPKIT_*`` variables only."""
        try:
            return cls.model_validate(_env_overrides(os.environ if environ is None else environ))
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


def load_settings(path: str | Path | None = None, *, environ: dict[str, str] | None = None) -> ServerSettings:
    """Read settings from a YAML file, then apply ``MCPKIT_*`` overrides.

    ``${VAR}`` and ``$VAR`` references in the file are expanded with
    :func:`os.path.expandvars` before parsing.  Without *path* only the
    environment is consulted.

    Raises:
        ConfigError: On unreadable files, YAML errors, or invalid values.
    """
    env_map = os.environ if environ is None else environ
    data: dict[str, Any] = {}

    if path is not None:
        p = Path(path)
        try:
            raw = p.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {p}: {exc}") from exc

        try:
            loaded: Any = yaml.safe_load(os.path.expandvars(raw))
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError("Settings YAML must be a mapping")
        data = loaded

    overrides = _env_overrides(env_map)
    if "telemetry" in overrides:
        telemetry = dict(data.get("telemetry") or {})
        telemetry.update(overrides.pop("telemetry"))
        overrides["telemetry"] = telemetry
    data = {**data, **overrides}

    try:
        return ServerSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def env(name: str, default: str | None = None) -> str | None:
    """Read one process environment variable."""
    return os.environ.get(name, default)


def _env_overrides(environ: Any) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for field in ("name", "host", "port", "path", "log_level"):
        value = environ.get(f"{ENV_PREFIX}{field.upper()}")
        if value is not None:
            overrides[field] = value.lower() if field == "log_level" else value

    telemetry: dict[str, Any] = {}
    enabled = environ.get(f"{ENV_PREFIX}TELEMETRY")
    if enabled is not None:
        telemetry["enabled"] = enabled.strip().lower() in {"1", "true", "yes", "on"}
    endpoint = environ.get(f"{ENV_PREFIX}OTLP_ENDPOINT")
    if endpoint is not None:
        telemetry["otlp_endpoint"] = endpoint
    if telemetry:
        overrides["telemetry"] = telemetry
    return overrides
