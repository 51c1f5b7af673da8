from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..contracts import CONFIG_SCHEMA_PATH

"""Configuration loader.

Reads ``config/sheetmap.yml`` (or the file named by ``SHEETMAP_CONFIG``),
validates it against contracts/config_schema.json and applies defaults.
"""

__all__ = [
    "AppConfig",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "CONFIG_ENV_VAR",
    "default_config_path",
    "load_config",
]

DEFAULT_CONFIG_PATH = Path("config/sheetmap.yml")
CONFIG_ENV_VAR = "SHEETMAP_CONFIG"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class AppConfig:
    source_directory: str
    schema_directory: str = "./schemas"
    logs_directory: str = "./logs"
    schema_version: str = "1.0"
    schema_name: str | None = None
    domain: str | None = None  # audit | vehiculo
    default_year: int | None = None


def default_config_path() -> Path:
    """``SHEETMAP_CONFIG`` when set (possibly from .env), else config/sheetmap.yml."""
    env = os.getenv(CONFIG_ENV_VAR)
    return Path(env) if env else DEFAULT_CONFIG_PATH


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file unreadable, or the data violates it
    """
    try:
        schema = json.loads(CONFIG_SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config validation failed: top level must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    defaults = data.get("schema_defaults") or {}
    return AppConfig(
        source_directory=data["source_directory"],
        schema_directory=data.get("schema_directory", "./schemas"),
        logs_directory=data.get("logs_directory", "./logs"),
        schema_version=defaults.get("version", "1.0"),
        schema_name=defaults.get("name"),
        domain=data.get("domain"),
        default_year=data.get("default_year"),
    )
