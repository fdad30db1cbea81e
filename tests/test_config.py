"""
Unit tests for YAML config loading and precedence.
"""

from __future__ import annotations

import io
import sys
import unittest
from contextlib import redirect_stderr, redirect_stdout

from helpers_cli import workspace_temp_dir

from page_split.cli import (  # noqa: E402
    _build_effective_config,
    _build_parser,
    _command_argv_for_manifest,
    main,
)
from page_split.config import (  # noqa: E402
    DEFAULT_OVERLAY,
    deep_merge,
    extract_section,
    require_bool,
)
from page_split.utils import UserError  # noqa: E402


class ConfigTests(unittest.TestCase):
    def test_deep_merge_nested_overlay_wins(self) -> None:
        merged = deep_merge(
            {"a": 1, "nested": {"x": 1, "y": 2}},
            {"nested": {"y": 20, "z": 30}},
        )
        self.assertEqual(merged["a"], 1)
        self.assertEqual(merged["nested"]["x"], 1)
        self.assertEqual(merged["nested"]["y"], 20)
        self.assertEqual(merged["nested"]["z"], 30)

    def test_wrapper_form_ignores_root_siblings(self) -> None:
        section = extract_section(
            {"glob": "*.tif", "overlay": {"glob": "*.jpg", "line_width": 5}}, "overlay"
        )
        self.assertEqual(section["glob"], "*.jpg")
        self.assertEqual(section["line_width"], 5)

    def test_root_keys_are_validated_per_command(self) -> None:
        with self.assertRaises(UserError):
            extract_section({"glob": "*.png"}, "adapt")

    def test_unknown_nested_key_fails(self) -> None:
        with workspace_temp_dir("test_cfg") as tmpdir:
            path = tmpdir / "bad.yaml"
            path.write_text(
                "overlay:\n"
                "  glob: '*.png'\n"
                "  bad_key: 1\n",
                encoding="utf-8",
            )
            args = _build_parser().parse_args(
                ["overlay", "--in_dir", "in", "--out_dir", "out", "--config", str(path)]
            )
            with self.assertRaises(UserError):
                _build_effective_config(args, "overlay")

    def test_precedence_defaults_then_yaml_then_explicit_cli(self) -> None:
        with workspace_temp_dir("test_cfg") as tmpdir:
            path = tmpdir / "cfg.yaml"
            path.write_text(
                "overlay:\n"
                "  glob: '*.jpg'\n"
                "  line_width: 7\n"
                "  cutter_color: '#0000ff'\n",
                encoding="utf-8",
            )
            args = _build_parser().parse_args(
                [
                    "overlay",
                    "--in_dir",
                    "in",
                    "--out_dir",
                    "out",
                    "--config",
                    str(path),
                    "--line_width",
                    "2",
                ]
            )
            effective, config_path = _build_effective_config(args, "overlay")
            self.assertEqual(config_path, path)
            self.assertEqual(effective["line_width"], 2)
            self.assertEqual(effective["glob"], "*.jpg")
            self.assertEqual(effective["cutter_color"], "#0000ff")
            self.assertEqual(effective["outline_color"], DEFAULT_OVERLAY["outline_color"])

    def test_dump_default_config_without_paths(self) -> None:
        stream = io.StringIO()
        with redirect_stdout(stream):
            rc = main(["adapt", "--dump-default-config"])
        self.assertEqual(rc, 0)
        dumped = stream.getvalue()
        self.assertIn("adapt:", dumped)
        self.assertIn("overwrite: false", dumped)
        self.assertNotIn("overlay:", dumped)

    def test_require_bool_accepts_true_false_only(self) -> None:
        self.assertTrue(require_bool(True, "config.dry_run"))
        self.assertFalse(require_bool(False, "config.dry_run"))
        with self.assertRaises(UserError):
            require_bool("false", "config.dry_run")

    def test_command_argv_for_manifest_uses_passed_argv(self) -> None:
        original = sys.argv
        try:
            sys.argv = ["page_split_entry"]
            self.assertEqual(
                _command_argv_for_manifest(["adapt", "--dry-run"]),
                ["page_split_entry", "adapt", "--dry-run"],
            )
            self.assertEqual(_command_argv_for_manifest(None), ["page_split_entry"])
        finally:
            sys.argv = original

    def test_invalid_bool_in_config_fails_cleanly(self) -> None:
        with workspace_temp_dir("test_cfg") as tmpdir:
            path = tmpdir / "cfg.yaml"
            path.write_text(
                "adapt:\n"
                "  overwrite: 'false'\n",
                encoding="utf-8",
            )
            err = io.StringIO()
            with redirect_stderr(err):
                rc = main(
                    [
                        "adapt",
                        "--layouts",
                        "in.yaml",
                        "--outlines",
                        "outlines.yaml",
                        "--out",
                        "out.yaml",
                        "--config",
                        str(path),
                    ]
                )
            self.assertEqual(rc, 2)
            self.assertIn("config.overwrite must be true or false.", err.getvalue())


if __name__ == "__main__":
    unittest.main()
