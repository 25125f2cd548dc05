"""Config loading/saving, merging, paths.

Settings come from a global file with optional per-workspace overrides.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

import dacite

from .exceptions import (
    ConfigLoadError,
    ConfigSaveError,
    ConfigValidationError,
    record_error,
)
from .models import AppConfig, model_from_dict, model_to_dict

logger = logging.getLogger(__name__)

# Configuration file locations
CONFIG_DIR = Path.home() / ".config" / "term-layouts"
GLOBAL_CONFIG_PATH = CONFIG_DIR / "config.json"
WORKSPACE_CONFIG_FILENAME = ".term-layouts.json"


def merge_configs(global_config: dict, workspace_config: dict) -> dict:
    """
    Merge workspace config into global config.

    Rules:
    - Scalars: workspace overrides global
    - Lists: workspace replaces global (no merge)
    - Dicts: recursive merge
    - None in workspace: removes key from global

    Returns:
        Merged configuration dictionary
    """
    result = copy.deepcopy(global_config)

    for key, value in workspace_config.items():
        if value is None:
            result.pop(key, None)
        elif isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def _read_json(path: Path, label: str) -> dict[str, Any] | None:
    """Read a JSON config file; None when it does not exist.

    Raises:
        ConfigLoadError: If the file cannot be read or is not a JSON object.
    """
    if not path.exists():
        logger.debug("No %s found at %s", label, path)
        return None

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in %s: %s", label, e)
        record_error(e)
        raise ConfigLoadError(
            f"Invalid JSON in {label} at line {e.lineno}",
            file_path=str(path),
            context={"line": e.lineno, "column": e.colno},
            cause=e,
        ) from e
    except OSError as e:
        logger.error("Failed to read %s: %s", label, e)
        record_error(e)
        raise ConfigLoadError(f"Failed to read {label}", file_path=str(path), cause=e) from e

    if not isinstance(data, dict):
        raise ConfigLoadError(
            f"Expected a JSON object in {label}",
            file_path=str(path),
            context={"type": type(data).__name__},
        )

    logger.debug("Loaded %s from %s", label, path)
    return data


def _to_app_config(data: dict[str, Any], source: str | None = None) -> AppConfig:
    try:
        return model_from_dict(AppConfig, data)  # type: ignore[return-value]
    except (dacite.DaciteError, ValueError, TypeError) as e:
        logger.error("Config schema validation failed: %s", e)
        record_error(e)
        raise ConfigValidationError(
            f"Config schema validation failed: {e}",
            context={"file_path": source} if source else None,
            cause=e,
        ) from e


def load_global_config() -> AppConfig:
    """
    Load global application configuration.

    Reads ~/.config/term-layouts/config.json if it exists, otherwise returns
    a default AppConfig.

    Raises:
        ConfigLoadError: If the config file exists but cannot be parsed.
        ConfigValidationError: If the file does not match the schema.
    """
    data = _read_json(GLOBAL_CONFIG_PATH, "global config")
    if data is None:
        return AppConfig()
    return _to_app_config(data, str(GLOBAL_CONFIG_PATH))


def save_global_config(config: AppConfig) -> None:
    """
    Save global application configuration, creating the directory if needed.

    Raises:
        ConfigSaveError: If the config cannot be saved.
    """
    try:
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        text = json.dumps(model_to_dict(config), indent=2)
        GLOBAL_CONFIG_PATH.write_text(text + "\n", encoding="utf-8")
    except OSError as e:
        logger.error("Failed to write config file: %s", e)
        record_error(e)
        raise ConfigSaveError(
            "Failed to write config file",
            file_path=str(GLOBAL_CONFIG_PATH),
            cause=e,
        ) from e
    except (TypeError, ValueError) as e:
        logger.error("Failed to serialize config to JSON: %s", e)
        record_error(e)
        raise ConfigSaveError(
            "Failed to serialize config to JSON",
            file_path=str(GLOBAL_CONFIG_PATH),
            cause=e,
        ) from e

    logger.debug("Saved global config to %s", GLOBAL_CONFIG_PATH)


def load_workspace_config(workspace: str | Path) -> dict:
    """
    Load workspace-local configuration overrides.

    Returns:
        Dictionary of overrides, or an empty dict if the workspace has none.

    Raises:
        ConfigLoadError: If the config file exists but cannot be parsed.
    """
    return _read_json(get_workspace_config_path(workspace), "workspace config") or {}


def load_merged_config(workspace: str | Path | None = None) -> AppConfig:
    """
    Load configuration with workspace overrides merged in.

    When a workspace is given and its config does not set ``workspace_root``,
    the workspace itself becomes the root for relative working directories.

    Raises:
        ConfigLoadError: If configuration files cannot be read.
        ConfigValidationError: If the merged config is invalid.
    """
    merged = _read_json(GLOBAL_CONFIG_PATH, "global config") or {}

    if workspace is not None:
        merged = merge_configs(merged, load_workspace_config(workspace))
        logger.debug("Merged workspace config from %s", workspace)

    config = _to_app_config(merged)
    if workspace is not None and not config.settings.workspace_root:
        config.settings.workspace_root = str(Path(workspace).expanduser().resolve())
    return config


def get_store_dir(config: AppConfig) -> Path:
    """Return the directory holding the layout store."""
    if config.settings.store_dir:
        return Path(config.settings.store_dir).expanduser()
    return CONFIG_DIR


def get_global_config_path() -> Path:
    """Return the path to the global config file."""
    return GLOBAL_CONFIG_PATH


def get_config_dir() -> Path:
    """Return the path to the config directory."""
    return CONFIG_DIR


def get_workspace_config_path(workspace: str | Path) -> Path:
    """Return the path to a workspace's local config file."""
    return Path(workspace) / WORKSPACE_CONFIG_FILENAME
