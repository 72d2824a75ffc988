"""Configuration loading and management."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv

from puzzl.errors import ConfigurationError

DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_DEMO_DELAY_MS = 1000

CONFIG_FILE_NAME = "puzzl.yaml"
ENV_PREFIX = "PUZZL_"


@dataclass(slots=True)
class PuzzlConfig:
    """Merged configuration from all sources.

    Priority: CLI args > env vars > config file > defaults
    """
    # Network
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    # Logging
    debug: bool = False
    json_logs: bool = False

    # Demos
    demo_delay_ms: int = DEFAULT_DEMO_DELAY_MS


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load a YAML config file, returning empty dict if not found."""
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected a mapping at the top of {path}")
    return data


def load_env_config() -> dict[str, Any]:
    """Collect ``PUZZL_*`` environment variables (``.env`` included)."""
    load_dotenv(find_dotenv(usecwd=True))
    values: dict[str, Any] = {}
    for f in fields(PuzzlConfig):
        raw = os.environ.get(ENV_PREFIX + f.name.upper())
        if raw is not None:
            values[f.name] = raw
    return values


def load_config(
    *,
    cli_args: dict[str, Any] | None = None,
    config_path: str | Path | None = None,
) -> PuzzlConfig:
    """Load configuration from all sources with proper priority.

    Priority: CLI args > env vars > config file > defaults
    """
    config = PuzzlConfig()

    # 1. Config file (./puzzl.yaml unless told otherwise)
    path = Path(config_path) if config_path else Path.cwd() / CONFIG_FILE_NAME
    if config_path and not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")
    _apply_dict(config, load_yaml_config(path))

    # 2. Environment variables
    _apply_dict(config, load_env_config())

    # 3. CLI args (None means "not given")
    _apply_dict(config, {k: v for k, v in (cli_args or {}).items() if v is not None})

    return config


def _apply_dict(config: PuzzlConfig, data: dict[str, Any]) -> None:
    """Apply known keys from *data* onto *config*, coercing to field types."""
    for f in fields(config):
        if f.name in data:
            setattr(config, f.name, _coerce(f.name, f.type, data[f.name]))


def _coerce(name: str, type_name: Any, value: Any) -> Any:
    try:
        if type_name in ("bool", bool):
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in ("1", "true", "yes", "on"):
                    return True
                if lowered in ("0", "false", "no", "off", ""):
                    return False
                raise ValueError(value)
            return bool(value)
        if type_name in ("int", int):
            return int(value)
        if type_name in ("float", float):
            return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid value for {name}: {value!r}") from exc
    return value
