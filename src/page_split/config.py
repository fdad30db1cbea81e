"""
Configuration helpers for YAML-backed command options.
"""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any

import yaml

from .utils import UserError, ensure_file_exists


DEFAULT_ADAPT: dict[str, Any] = {
    "overwrite": False,
    "dry_run": False,
    "manifest": None,
}

DEFAULT_OVERLAY: dict[str, Any] = {
    "glob": "*.png",
    "line_width": 3,
    "outline_color": [0, 255, 0],
    "cutter_color": [255, 0, 0],
    "overwrite": False,
    "dry_run": False,
    "manifest": None,
}

DEFAULTS_BY_SECTION: dict[str, dict[str, Any]] = {
    "adapt": DEFAULT_ADAPT,
    "overlay": DEFAULT_OVERLAY,
}


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file into a dictionary."""

    ensure_file_exists(path, "Config file")
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise UserError(f"Failed to parse YAML config {path}: {exc}") from exc
    except OSError as exc:
        raise UserError(f"Failed to read config {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise UserError(f"Config {path} must contain a YAML mapping/object at top level.")
    return loaded


def deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Recursively merge dictionaries where overlay values win.
    """

    merged = deepcopy(base)
    for key, value in overlay.items():
        if (
            key in merged
            and isinstance(merged[key], dict)
            and isinstance(value, dict)
        ):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


def validate_keys(cfg: dict[str, Any], allowed: set[str], ctx: str) -> None:
    """
    Validate dictionary keys and fail fast on unknown entries.
    """

    unknown = sorted(key for key in cfg.keys() if key not in allowed)
    if unknown:
        allowed_list = ", ".join(sorted(allowed))
        unknown_list = ", ".join(unknown)
        raise UserError(
            f"Unknown keys in {ctx}: {unknown_list}. Allowed keys: {allowed_list}."
        )


def extract_section(loaded: dict[str, Any], section: str) -> dict[str, Any]:
    """Support either root config keys or a wrapper named after the command."""

    allowed = set(DEFAULTS_BY_SECTION[section].keys())
    if section in loaded:
        raw_section = loaded[section]
        if not isinstance(raw_section, dict):
            raise UserError(f"config.{section} must be a mapping/object.")
        validate_keys(raw_section, allowed, f"config.{section}")
        return raw_section

    validate_keys(loaded, allowed, "config")
    return loaded


def require_bool(value: Any, key: str) -> bool:
    """Require a strict boolean value from config/CLI merge output."""

    if isinstance(value, bool):
        return value
    raise UserError(f"{key} must be true or false.")


def dump_default_yaml(section: str) -> str:
    """Serialize wrapped defaults for one command as YAML."""

    return yaml.safe_dump(
        {section: DEFAULTS_BY_SECTION[section]}, sort_keys=False, default_flow_style=None
    ).rstrip()
