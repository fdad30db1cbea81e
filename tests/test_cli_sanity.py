"""
CLI sanity checks for deterministic, quiet test behavior.
"""

from __future__ import annotations

import unittest

from helpers_cli import run_page_split_cli


class CliSanityTests(unittest.TestCase):
    def test_help_is_clean_and_deterministic(self) -> None:
        exit_code, stdout_text, stderr_text = run_page_split_cli(["--help"])
        self.assertEqual(exit_code, 0)
        self.assertIn("usage:", f"{stdout_text}{stderr_text}".lower())
        self.assertNotIn("not allowed with argument", stderr_text)

    def test_subcommand_help_lists_examples(self) -> None:
        exit_code, stdout_text, _ = run_page_split_cli(["adapt", "--help"])
        self.assertEqual(exit_code, 0)
        self.assertIn("--outlines", stdout_text)
        self.assertIn("Examples:", stdout_text)

    def test_missing_paths_fail_with_user_error(self) -> None:
        exit_code, _, stderr_text = run_page_split_cli(["adapt", "--layouts", "x.yaml"])
        self.assertEqual(exit_code, 2)
        self.assertIn("--outlines", stderr_text)
        self.assertIn("--out", stderr_text)

    def test_unknown_command_exits_nonzero(self) -> None:
        exit_code, _, _ = run_page_split_cli(["render"])
        self.assertNotEqual(exit_code, 0)


if __name__ == "__main__":
    unittest.main()
