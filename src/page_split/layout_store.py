"""
Read and write layout and outline files.

Why this module exists:
- Layouts and outlines travel between pipeline stages as small YAML or JSON
  files keyed by page image name.
- Parsing is strict so a malformed entry fails with a message naming the page
  instead of producing a half-valid layout.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import fitz  # PyMuPDF
import yaml

from .geometry import Line, rect_from_coords, rect_to_coords
from .layout import LayoutType, PageLayout
from .utils import UserError, ensure_dir, ensure_file_exists, parse_coords


LAYOUT_TYPE_NAMES = {layout_type.value: layout_type for layout_type in LayoutType}


def _is_json(path: Path) -> bool:
    return path.suffix.lower() == ".json"


def _load_mapping(path: Path, label: str) -> Dict[str, Any]:
    """Load a YAML or JSON file that must hold a mapping at top level."""

    ensure_file_exists(path, label)
    try:
        with path.open("r", encoding="utf-8") as handle:
            if _is_json(path):
                loaded = json.load(handle)
            else:
                loaded = yaml.safe_load(handle)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise UserError(f"Failed to parse {label.lower()} {path}: {exc}") from exc
    except OSError as exc:
        raise UserError(f"Failed to read {label.lower()} {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise UserError(f"{label} {path} must contain a mapping/object at top level.")
    return loaded


def _section(loaded: Dict[str, Any], key: str, path: Path) -> Dict[str, Any]:
    section = loaded.get(key, {})
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise UserError(f"'{key}' in {path} must be a mapping of page name to entry.")
    return section


def layout_from_dict(data: Any, page: str) -> PageLayout:
    """Build a PageLayout from its file representation."""

    label = f"Layout for page '{page}'"
    if not isinstance(data, dict):
        raise UserError(f"{label} must be a mapping/object.")

    unknown = sorted(key for key in data if key not in {"type", "outline", "cutters"})
    if unknown:
        raise UserError(f"{label} has unknown keys: {', '.join(unknown)}.")

    type_name = data.get("type")
    if not isinstance(type_name, str) or type_name not in LAYOUT_TYPE_NAMES:
        allowed = ", ".join(LAYOUT_TYPE_NAMES)
        raise UserError(f"{label} has invalid type {type_name!r}. Use one of: {allowed}.")
    layout_type = LAYOUT_TYPE_NAMES[type_name]

    if "outline" not in data:
        raise UserError(f"{label} is missing 'outline'.")
    outline = rect_from_coords(parse_coords(data["outline"], 4, f"{label} outline"))

    raw_cutters = data["cutters"] if "cutters" in data else []
    if not isinstance(raw_cutters, list):
        raise UserError(f"{label} cutters must be a list.")
    cutters = [
        Line.from_coords(*parse_coords(raw, 4, f"{label} cutter {index}"))
        for index, raw in enumerate(raw_cutters, start=1)
    ]

    if len(cutters) != layout_type.cutter_count:
        raise UserError(
            f"{label} of type {type_name} needs {layout_type.cutter_count} "
            f"cutter(s), found {len(cutters)}."
        )
    return PageLayout(layout_type, outline, tuple(cutters))


def _plain_number(value: float) -> float | int:
    """Keep whole coordinates as ints so files stay readable."""

    return int(value) if float(value).is_integer() else float(value)


def layout_to_dict(layout: PageLayout) -> Dict[str, Any]:
    """Serialize a PageLayout to plain data."""

    data: Dict[str, Any] = {
        "type": layout.type.value,
        "outline": [_plain_number(value) for value in rect_to_coords(layout.outline)],
    }
    if layout.cutters:
        data["cutters"] = [
            [_plain_number(value) for value in cutter.to_coords()]
            for cutter in layout.cutters
        ]
    return data


def load_layouts(path: Path) -> Dict[str, PageLayout]:
    """Load a layouts file into {page name: PageLayout}."""

    loaded = _load_mapping(path, "Layouts file")
    pages = _section(loaded, "pages", path)
    return {str(page): layout_from_dict(entry, str(page)) for page, entry in pages.items()}


def load_outlines(path: Path) -> Dict[str, fitz.Rect]:
    """Load an outlines file into {page name: fitz.Rect}."""

    loaded = _load_mapping(path, "Outlines file")
    outlines = _section(loaded, "outlines", path)
    return {
        str(page): rect_from_coords(parse_coords(value, 4, f"Outline for page '{page}'"))
        for page, value in outlines.items()
    }


def dump_layouts_text(layouts: Dict[str, PageLayout], as_json: bool = False) -> str:
    """Render layouts as YAML (default) or JSON text, pages in sorted order."""

    payload = {"pages": {page: layout_to_dict(layouts[page]) for page in sorted(layouts)}}
    if as_json:
        return json.dumps(payload, indent=2, ensure_ascii=True)
    return yaml.safe_dump(payload, sort_keys=False, default_flow_style=None).rstrip()


def dump_layouts(layouts: Dict[str, PageLayout], path: Path) -> None:
    """Write layouts to path; the suffix picks JSON or YAML."""

    ensure_dir(path.parent, dry_run=False)
    text = dump_layouts_text(layouts, as_json=_is_json(path))
    try:
        path.write_text(text + "\n", encoding="utf-8")
    except OSError as exc:
        raise UserError(f"Failed to write layouts file {path}: {exc}") from exc
