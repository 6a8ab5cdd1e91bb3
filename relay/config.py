"""Loading and merging of ``relay.yaml`` configuration."""

from __future__ import annotations

import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from relay.errors import ConfigError

CONFIG_FILENAME = "relay.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "project": {"name": ""},
    "paths": {
        "plans_dir": "plans",
        "rca_dir": "docs/rca",
        "history_file": ".relay/history.jsonl",
    },
    "agent": {
        "provider": "claude_code",
        "model": None,
        "timeout": None,
    },
    "tracker": {"provider": "github", "repo": None},
    "prime": {"commit_limit": 10, "file_limit": 60, "readme_lines": 40},
}


def merge_config(base: Mapping[str, Any], overrides: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    merged = deepcopy(dict(base))
    if not overrides:
        return merged

    def merge(target: dict, updates: Mapping[str, Any]) -> None:
        for key, value in updates.items():
            if isinstance(value, Mapping) and isinstance(target.get(key), dict):
                merge(target[key], value)
            else:
                target[key] = deepcopy(value)

    merge(merged, overrides)
    return merged


def load_config(
    config_path: Optional[Path] = None,
    *,
    project_root: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> tuple[Path, Dict[str, Any]]:
    """Resolve the project root and the effective configuration.

    An explicit ``config_path`` must exist. Without one, ``relay.yaml`` in the
    project root (default: the working directory) is used when present, and the
    built-in defaults otherwise.
    """

    if config_path is not None:
        resolved_path = Path(config_path)
        if not resolved_path.is_file():
            raise ConfigError(f"configuration file not found: {resolved_path}")
        root = Path(project_root) if project_root is not None else resolved_path.resolve().parent
    else:
        root = Path(project_root) if project_root is not None else Path.cwd()
        resolved_path = root / CONFIG_FILENAME

    loaded: Dict[str, Any] = {}
    if resolved_path.is_file():
        try:
            with resolved_path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise ConfigError(f"invalid YAML in {resolved_path}: {exc}") from exc
        except OSError as exc:
            raise ConfigError(f"unable to read {resolved_path}: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"{resolved_path} must contain a mapping at the top level")
        loaded = data

    config = merge_config(DEFAULT_CONFIG, loaded)

    env_agent = os.getenv("RELAY_AGENT")
    if env_agent:
        config = merge_config(config, {"agent": {"provider": env_agent}})

    config = merge_config(config, overrides)
    return root.resolve(), validate_config(config, source=resolved_path)


_INTEGER_KEYS = {
    "agent": ("timeout",),
    "prime": ("commit_limit", "file_limit", "readme_lines"),
}


def validate_config(config: Dict[str, Any], *, source: Optional[Path] = None) -> Dict[str, Any]:
    """Check section shapes and numeric settings, raising ``ConfigError``.

    Empty sections fall back to their defaults. Integer settings given as
    strings are converted in place.
    """

    origin = f" in {source}" if source is not None else ""
    for section, defaults in DEFAULT_CONFIG.items():
        value = config.get(section)
        if value is None:
            config[section] = deepcopy(defaults)
            continue
        if not isinstance(value, dict):
            raise ConfigError(
                f"'{section}' must be a mapping{origin}, got {type(value).__name__}"
            )

    for section, keys in _INTEGER_KEYS.items():
        values = config[section]
        for key in keys:
            raw = values.get(key)
            if raw is None:
                continue
            if isinstance(raw, bool):
                raise ConfigError(f"'{section}.{key}' must be an integer{origin}")
            try:
                number = int(raw)
            except (TypeError, ValueError):
                raise ConfigError(
                    f"'{section}.{key}' must be an integer{origin}, got {raw!r}"
                ) from None
            if number < 0:
                raise ConfigError(f"'{section}.{key}' must not be negative{origin}")
            values[key] = number

    return config


__all__ = ["CONFIG_FILENAME", "DEFAULT_CONFIG", "load_config", "merge_config", "validate_config"]
