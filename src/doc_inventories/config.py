"""
Configuration file system for doc-inventories.

Supports loading configuration from multiple locations, merged with precedence:
1. /etc/doc-inventories/config.yaml or config.json (lowest priority)
2. ~/.config/doc-inventories/config.yaml or config.json
3. ./doc-inventories.yaml or ./doc-inventories.json (highest priority)

All found config files are merged, with later files overriding earlier ones.
YAML is checked before JSON at each location. Environment variables
(DOC_INVENTORIES_*) have the highest priority.
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any

import yaml

# Config filenames for current working directory (project-local config)
CONFIG_FILENAMES = ["config.yaml", "config.json", "doc-inventories.yaml", "doc-inventories.json"]
# Config filenames for system/user config directories
CONFIG_USER_FILENAMES = ["config.yaml", "config.json"]

ENV_PREFIX = "DOC_INVENTORIES_"

DEFAULTS: dict[str, Any] = {
    "log_level": "WARNING",
    "network": {
        "timeout": 1.0,  # seconds per request
        "retries": 3,  # total number of attempts
        "wait_time": 1.0,  # each retry waits this much longer
    },
    # Additional file extensions, e.g. {".inv.gz": "application/x-intersphinx+gzip"}
    "mime_types": {},
}


def _get_config_dirs() -> list[Path]:
    """Get list of config directories to search, in merge order (lowest priority first)."""
    return [
        Path("/etc/doc-inventories"),
        Path.home() / ".config" / "doc-inventories",
        Path.cwd(),
    ]


def find_config_files() -> list[Path]:
    """Find all existing config files, in merge order (lowest priority first).

    At each location, only the first found file (YAML before JSON) is
    included.
    """
    found_files = []
    for dir_path in _get_config_dirs():
        filenames = CONFIG_FILENAMES if dir_path == Path.cwd() else CONFIG_USER_FILENAMES
        for filename in filenames:
            path = dir_path / filename
            if path.exists():
                found_files.append(path)
                break
    return found_files


def find_config_file() -> Path | None:
    """Find the highest-priority existing config file, or None."""
    files = find_config_files()
    return files[-1] if files else None


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override into base dict, modifying base in place."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _load_config_file(path: Path) -> dict[str, Any]:
    """Load a single config file (YAML or JSON) and return its contents.

    Raises:
        yaml.YAMLError: If a YAML config file is malformed.
        json.JSONDecodeError: If a JSON config file is malformed.
    """
    with open(path, encoding="utf-8") as f:
        if path.suffix in (".yaml", ".yml"):
            return yaml.safe_load(f) or {}
        return json.load(f)


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load config from file(s), merging with defaults.

    If path is provided, only that file is loaded (plus defaults and
    environment variables). Otherwise, all config files from the standard
    locations are merged.
    """
    config = copy.deepcopy(DEFAULTS)

    if path is not None:
        if path.exists():
            _deep_merge(config, _load_config_file(path))
    else:
        for config_path in find_config_files():
            _deep_merge(config, _load_config_file(config_path))

    _apply_env_overrides(config)
    return config


def _apply_env_overrides(config: dict[str, Any]) -> None:
    """Apply environment variable overrides to config.

    Environment variables are named DOC_INVENTORIES_<KEY> where nested
    keys use double underscore, e.g., DOC_INVENTORIES_NETWORK__RETRIES=5
    """
    for key, value in os.environ.items():
        if key.startswith(ENV_PREFIX):
            config_key = key[len(ENV_PREFIX):].lower()
            _set_nested_value(config, config_key, value)


def _set_nested_value(config: dict, key: str, value: str) -> None:
    """Set a nested config value using double-underscore notation.

    e.g., "network__retries" sets config["network"]["retries"]
    """
    parts = key.split("__")
    target = config
    for part in parts[:-1]:
        if not isinstance(target.get(part), dict):
            target[part] = {}
        target = target[part]
    target[parts[-1]] = _convert_value(value)


def _convert_value(value: str) -> Any:
    """Convert string value to int or float where possible."""
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value


def get_config_value(config: dict[str, Any], key: str, default: Any = None) -> Any:
    """Get a config value using dot notation, e.g. "network.timeout"."""
    target = config
    for part in key.split("."):
        if isinstance(target, dict) and part in target:
            target = target[part]
        else:
            return default
    return target


class Config:
    """Configuration holder with convenient access methods."""

    def __init__(self, path: Path | None = None):
        """Initialize config, loading from file(s).

        Args:
            path: Optional explicit path to config file. If provided, only
                  this file is loaded. Otherwise, all standard locations
                  are searched and merged.
        """
        if path is not None:
            self._paths = [path] if path.exists() else []
        else:
            self._paths = find_config_files()
        self._data = load_config(path)

    @property
    def path(self) -> Path | None:
        """Return the highest-priority loaded config file, or None."""
        return self._paths[-1] if self._paths else None

    @property
    def paths(self) -> list[Path]:
        """Return all loaded config file paths, in merge order."""
        return self._paths.copy()

    @property
    def data(self) -> dict[str, Any]:
        """Return the raw config dictionary."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value using dot notation."""
        return get_config_value(self._data, key, default)

    @property
    def timeout(self) -> float:
        return float(self.get("network.timeout", 1.0))

    @property
    def retries(self) -> int:
        return int(self.get("network.retries", 3))

    @property
    def wait_time(self) -> float:
        return float(self.get("network.wait_time", 1.0))

    @property
    def mime_types(self) -> dict[str, str]:
        """Return additional extension to MIME type mappings."""
        return self.get("mime_types", {}) or {}

    @property
    def log_level(self) -> str:
        return str(self.get("log_level", "WARNING")).upper()
