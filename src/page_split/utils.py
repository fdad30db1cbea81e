"""
Shared utility helpers.

This module keeps the "sharp edges" (validation and parsing) in one place so
the rest of the code can stay focused on layout geometry.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, List, Tuple


class UserError(Exception):
    """Raised for user-facing problems that should show a clear message."""


def normalize_path(value: str) -> Path:
    """
    Convert user input to a Path.

    We do not resolve() here because we want to preserve relative paths in
    manifests and error messages.
    """

    return Path(value).expanduser()


def ensure_file_exists(path: Path, label: str) -> Path:
    """Validate that a path exists and is a file."""

    if not path.exists():
        raise UserError(f"{label} not found: {path}")
    if not path.is_file():
        raise UserError(f"{label} is not a file: {path}")
    return path


def ensure_dir(path: Path, dry_run: bool) -> None:
    """
    Create a directory if needed, unless this is a dry-run.

    Why: dry-run should never touch the filesystem, but real runs should
    create output folders automatically.
    """

    if dry_run:
        return
    path.mkdir(parents=True, exist_ok=True)


def ensure_dir_path(path: Path, label: str) -> None:
    """Ensure a path is either a directory or does not exist yet."""

    if path.exists() and not path.is_dir():
        raise UserError(f"{label} is not a directory: {path}")


def ensure_file_path(path: Path, label: str) -> None:
    """Ensure a path is a file path (not an existing directory)."""

    if path.exists() and path.is_dir():
        raise UserError(f"{label} is a directory, not a file: {path}")


def validate_positive_int(value: int, label: str) -> int:
    """Common validation for options like line_width."""

    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise UserError(f"{label} must be a positive integer.")
    return value


def parse_coords(value: Any, count: int, label: str) -> List[float]:
    """
    Parse a list of finite numbers such as [x0, y0, x1, y1].

    Strings like "0, 0, 100, 200" are accepted too so CLI-ish values in
    config files still work.
    """

    if isinstance(value, str):
        tokens = [token for token in value.replace(" ", "").split(",") if token]
        raw: List[Any] = tokens
    elif isinstance(value, (list, tuple)):
        raw = list(value)
    else:
        raise UserError(f"{label} must be a list of {count} numbers.")

    if len(raw) != count:
        raise UserError(f"{label} must have exactly {count} numbers, got {len(raw)}.")

    numbers: List[float] = []
    for item in raw:
        if isinstance(item, bool):
            raise UserError(f"{label} contains a boolean, expected a number.")
        try:
            number = float(item)
        except (TypeError, ValueError) as exc:
            raise UserError(f"{label} contains a non-numeric value: {item!r}.") from exc
        if not math.isfinite(number):
            raise UserError(f"{label} contains a non-finite value: {item!r}.")
        numbers.append(number)
    return numbers


def parse_color(value: Any, label: str) -> Tuple[int, int, int]:
    """Parse an RGB color given as [r, g, b] or "#rrggbb"."""

    if isinstance(value, str):
        text = value.strip()
        if len(text) == 7 and text.startswith("#"):
            try:
                return (int(text[1:3], 16), int(text[3:5], 16), int(text[5:7], 16))
            except ValueError as exc:
                raise UserError(f"{label} is not a valid hex color: {value!r}.") from exc
        raise UserError(f"{label} must be '#rrggbb' or [r, g, b].")

    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise UserError(f"{label} must be '#rrggbb' or [r, g, b].")
    channels = []
    for channel in value:
        if isinstance(channel, bool) or not isinstance(channel, int):
            raise UserError(f"{label} channels must be integers in [0, 255].")
        if channel < 0 or channel > 255:
            raise UserError(f"{label} channels must be integers in [0, 255].")
        channels.append(channel)
    return (channels[0], channels[1], channels[2])
