"""
Command-line interface for page-split.

This file focuses on parsing arguments and dispatching to the real work.
Keeping this separate makes the code easier to read and test.
"""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path
from typing import Any, Dict

from . import __version__
from .config import (
    DEFAULTS_BY_SECTION,
    deep_merge,
    dump_default_yaml,
    extract_section,
    load_yaml,
    require_bool,
)
from .utils import UserError, normalize_path


TOP_LEVEL_EXAMPLES = """Examples:
  python -m page_split adapt --layouts "layouts.yaml" --outlines "outlines.yaml" --out "layouts_new.yaml"
  python -m page_split overlay --in_dir "out\\pages" --layouts "layouts_new.yaml" --out_dir "out\\overlay"
"""

ADAPT_EXAMPLES = """Examples:
  python -m page_split adapt --layouts "layouts.yaml" --outlines "outlines.yaml" --out "layouts_new.yaml"
  python -m page_split adapt --layouts "layouts.json" --outlines "outlines.json" --out "layouts.new.json" --dry-run
  python -m page_split adapt --dump-default-config
"""

OVERLAY_EXAMPLES = """Examples:
  python -m page_split overlay --in_dir "out\\pages" --layouts "layouts.yaml" --out_dir "out\\overlay"
  python -m page_split overlay --in_dir "out\\pages" --layouts "layouts.yaml" --out_dir "out\\overlay" --line_width 5 --overwrite
  python -m page_split overlay --dump-default-config
"""


def _build_effective_config(
    args: argparse.Namespace, section: str
) -> tuple[Dict[str, Any], Path | None]:
    """Resolve defaults < YAML config < explicit CLI flags."""

    defaults = DEFAULTS_BY_SECTION[section]
    effective = deep_merge(defaults, {})
    config_path: Path | None = None
    if hasattr(args, "config"):
        config_path = normalize_path(args.config)
        loaded = load_yaml(config_path)
        effective = deep_merge(effective, extract_section(loaded, section))

    raw_args = vars(args)
    cli_overrides: Dict[str, Any] = {}
    for key in defaults:
        if key in raw_args:
            cli_overrides[key] = raw_args[key]

    effective = deep_merge(effective, cli_overrides)
    return effective, config_path


def _verbosity_from_args(args: argparse.Namespace) -> str:
    """Resolve global verbosity mode from top-level flags."""

    if getattr(args, "quiet", False):
        return "quiet"
    if getattr(args, "verbose", False):
        return "verbose"
    return "normal"


def _add_common_flags(parser: argparse.ArgumentParser, manifest_default: str) -> None:
    """Flags shared by every subcommand; all default to SUPPRESS so config can fill them."""

    parser.add_argument(
        "--config",
        default=argparse.SUPPRESS,
        help="Optional YAML config for this command.",
    )
    parser.add_argument(
        "--dump-default-config",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Print the default YAML config and exit.",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Overwrite existing files.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Show actions without writing files.",
    )
    parser.add_argument(
        "--manifest",
        default=argparse.SUPPRESS,
        help=f"Manifest path (default: {manifest_default}).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="page-split",
        description="Keep page split layouts (cutter lines) valid when page outlines change.",
        epilog=TOP_LEVEL_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=__version__)
    verbosity_group = parser.add_mutually_exclusive_group()
    verbosity_group.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress non-error console logs.",
    )
    verbosity_group.add_argument(
        "--verbose",
        action="store_true",
        help="Show debug-level console logs.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    adapt_parser = subparsers.add_parser(
        "adapt",
        help="Adapt layouts to new page outlines.",
        epilog=ADAPT_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    adapt_parser.add_argument(
        "--layouts",
        default=argparse.SUPPRESS,
        help="Input layouts file (YAML, or JSON by .json suffix).",
    )
    adapt_parser.add_argument(
        "--outlines",
        default=argparse.SUPPRESS,
        help="New outlines file (YAML, or JSON by .json suffix).",
    )
    adapt_parser.add_argument(
        "--out",
        default=argparse.SUPPRESS,
        help="Output layouts file.",
    )
    _add_common_flags(adapt_parser, "out folder\\manifest.json")

    overlay_parser = subparsers.add_parser(
        "overlay",
        help="Draw layouts over their page images.",
        epilog=OVERLAY_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    overlay_parser.add_argument(
        "--in_dir",
        default=argparse.SUPPRESS,
        help="Input folder of page images.",
    )
    overlay_parser.add_argument(
        "--out_dir",
        default=argparse.SUPPRESS,
        help="Output folder for overlay images.",
    )
    overlay_parser.add_argument(
        "--layouts",
        default=argparse.SUPPRESS,
        help="Layouts file keyed by image file name.",
    )
    overlay_parser.add_argument(
        "--glob",
        default=argparse.SUPPRESS,
        help='Glob pattern for input files (default: "*.png").',
    )
    overlay_parser.add_argument(
        "--line_width",
        type=int,
        default=argparse.SUPPRESS,
        help="Line width in pixels for outline and cutters.",
    )
    _add_common_flags(overlay_parser, "out_dir\\manifest.json")

    return parser


def _command_string(argv: list[str]) -> str:
    """Reconstruct a command string for the manifest."""

    # list2cmdline produces a Windows-friendly command representation.
    return subprocess.list2cmdline(argv)


def _command_argv_for_manifest(argv: list[str] | None) -> list[str]:
    """Choose argv used to record manifest command faithfully."""

    if argv is None:
        return list(sys.argv)
    return [sys.argv[0], *argv]


def _require_args(args: argparse.Namespace, command: str, *names: str) -> None:
    missing = [name for name in names if not hasattr(args, name)]
    if missing:
        flags = ", ".join(f"--{name}" for name in missing)
        raise UserError(
            f"{command} requires {flags} unless --dump-default-config is used."
        )


def _run_options(
    effective: Dict[str, Any], verbosity: str, config_path: Path | None
) -> Dict[str, Any]:
    """Build the JSON-friendly options dict recorded in the manifest."""

    options = deep_merge(effective, {})
    options["version"] = __version__
    options["verbosity"] = verbosity
    if config_path is not None:
        options["config_path"] = str(config_path)
    return options


def _manifest_path(effective: Dict[str, Any], default: Path) -> Path:
    value = effective.get("manifest")
    return normalize_path(str(value)) if value else default


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        command_string = _command_string(_command_argv_for_manifest(argv))
        verbosity = _verbosity_from_args(args)

        if getattr(args, "dump_default_config", False):
            print(dump_default_yaml(args.command))
            return 0

        effective, config_path = _build_effective_config(args, args.command)
        options = _run_options(effective, verbosity, config_path)
        overwrite = require_bool(effective["overwrite"], "config.overwrite")
        dry_run = require_bool(effective["dry_run"], "config.dry_run")

        if args.command == "adapt":
            _require_args(args, "adapt", "layouts", "outlines", "out")
            from .adapt import adapt_layouts_file

            out_path = normalize_path(args.out)
            adapt_layouts_file(
                layouts_path=normalize_path(args.layouts),
                outlines_path=normalize_path(args.outlines),
                out_path=out_path,
                overwrite=overwrite,
                dry_run=dry_run,
                manifest_path=_manifest_path(effective, out_path.parent / "manifest.json"),
                command_string=command_string,
                options=options,
            )
            return 0

        if args.command == "overlay":
            _require_args(args, "overlay", "in_dir", "out_dir", "layouts")
            from .overlay import overlay_layouts_in_folder

            out_dir = normalize_path(args.out_dir)
            overlay_layouts_in_folder(
                in_dir=normalize_path(args.in_dir),
                out_dir=out_dir,
                layouts_path=normalize_path(args.layouts),
                pattern=str(effective["glob"]),
                line_width=effective["line_width"],
                outline_color=effective["outline_color"],
                cutter_color=effective["cutter_color"],
                overwrite=overwrite,
                dry_run=dry_run,
                manifest_path=_manifest_path(effective, out_dir / "manifest.json"),
                command_string=command_string,
                options=options,
            )
            return 0

        raise UserError("Unknown command. Use --help for usage.")
    except UserError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
