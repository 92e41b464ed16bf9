"""Configuration file loading.

Sources in order of priority:
1. Environment variables (highest priority)
2. Config file (--config, $REDFOX_CONFIG or ~/.redfox/config.yml)
3. Default values (lowest priority)
"""

from __future__ import annotations

import logging
import os
import types
import typing
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from redfox.errors import ConfigError

from .models import (
    DEFAULT_CONFIG_DIR,
    GeneralSettings,
    OutputSettings,
    RedFoxConfig,
    ScanningSettings,
    WordlistSettings,
)

logger = logging.getLogger(__name__)

SECTIONS: dict[str, type] = {
    "general": GeneralSettings,
    "scanning": ScanningSettings,
    "wordlists": WordlistSettings,
    "output": OutputSettings,
}

# env var -> (section, key)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "REDFOX_LOG_LEVEL": ("general", "log_level"),
    "REDFOX_LOG_FILE": ("general", "log_file"),
    "REDFOX_THREADS": ("scanning", "threads"),
    "REDFOX_TIMEOUT": ("scanning", "timeout"),
    "REDFOX_MAX_RETRIES": ("scanning", "max_retries"),
    "REDFOX_RATE_LIMIT": ("scanning", "rate_limit"),
    "REDFOX_PROXY": ("scanning", "proxy"),
    "REDFOX_RESULTS_DIR": ("output", "results_dir"),
    "REDFOX_OUTPUT_FORMAT": ("output", "default_format"),
}


def default_config_path() -> Path:
    """Return the config path used when none is given explicitly."""
    env_path = os.environ.get("REDFOX_CONFIG", "").strip()
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_DIR / "config.yml"


def load_config_file(path: Path) -> dict[str, Any]:
    """Load the raw YAML mapping from a config file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")
    return data


def load_config(path: Path | None = None) -> RedFoxConfig:
    """Build the effective configuration.

    An explicitly requested file must exist; the default location is optional.
    """
    explicit = path is not None
    config_path = path.expanduser() if path is not None else default_config_path()

    raw: dict[str, Any] = {}
    if config_path.exists():
        raw = load_config_file(config_path)
    elif explicit:
        raise ConfigError(f"Config file not found: {config_path}")

    config = RedFoxConfig(source=config_path if config_path.exists() else None)
    for section_name, values in raw.items():
        if section_name not in SECTIONS:
            logger.warning("Ignoring unknown config section %r", section_name)
            continue
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ConfigError(f"Config section [{section_name}] must be a mapping")
        section = getattr(config, section_name)
        for key, value in values.items():
            _apply_value(section, section_name, key, value)

    for env_key, (section_name, key) in ENV_OVERRIDES.items():
        env_value = os.environ.get(env_key)
        if env_value:
            _apply_value(getattr(config, section_name), section_name, key, env_value)

    _validate(config)
    return config


def _apply_value(section: Any, section_name: str, key: str, value: Any) -> None:
    known = {f.name: f for f in fields(section)}
    if key not in known:
        logger.warning("Ignoring unknown config key %s.%s", section_name, key)
        return
    expected = typing.get_type_hints(type(section))[key]
    setattr(section, key, _coerce(value, expected, f"{section_name}.{key}"))


def _coerce(value: Any, expected: Any, name: str) -> Any:
    """Coerce a YAML or environment value to the annotated field type."""
    optional = False
    if isinstance(expected, types.UnionType) or typing.get_origin(expected) is typing.Union:
        args = [a for a in typing.get_args(expected) if a is not type(None)]
        optional = len(args) < len(typing.get_args(expected))
        expected = args[0]

    if value is None:
        if optional:
            return None
        raise ConfigError(f"{name} must not be empty")

    origin = typing.get_origin(expected)
    try:
        if origin is list:
            if isinstance(value, str):
                return [v.strip() for v in value.split(",") if v.strip()]
            if not isinstance(value, list):
                raise ConfigError(f"{name} must be a list")
            return [str(v) for v in value]
        if expected is bool:
            if isinstance(value, bool):
                return value
            lowered = str(value).strip().lower()
            if lowered in {"1", "true", "yes", "on"}:
                return True
            if lowered in {"0", "false", "no", "off"}:
                return False
            raise ConfigError(f"{name} must be a boolean, got {value!r}")
        if expected is int:
            if isinstance(value, bool):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
            return int(value)
        if expected is float:
            if isinstance(value, bool):
                raise ConfigError(f"{name} must be a number, got {value!r}")
            return float(value)
        return str(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name}: invalid value {value!r}") from exc


def _validate(config: RedFoxConfig) -> None:
    scanning = config.scanning
    if scanning.threads < 1:
        raise ConfigError("scanning.threads must be at least 1")
    if scanning.timeout <= 0:
        raise ConfigError("scanning.timeout must be positive")
    if scanning.max_retries < 0:
        raise ConfigError("scanning.max_retries must not be negative")
    if scanning.rate_limit < 0:
        raise ConfigError("scanning.rate_limit must not be negative (0 disables it)")
    if scanning.burst < 1:
        raise ConfigError("scanning.burst must be at least 1")
    level = config.general.log_level.upper()
    if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigError(f"general.log_level: unknown level {config.general.log_level!r}")
