#!/usr/bin/env python3
"""Unit tests for the keyword casing checker."""

import shutil
import tempfile
import unittest
from pathlib import Path

from psgate.checks.keyword_casing_checker import (
    KeywordCasingChecker,
    find_miscased_keywords,
)
from psgate.gate.config import GateConfig


def miscased(text: str) -> list[str]:
    return [tok.text for tok in find_miscased_keywords(text)]


class TestFindMiscasedKeywords(unittest.TestCase):
    def test_lowercase_keywords_are_clean(self) -> None:
        text = "function Get-Thing {\n    if ($x) { return 1 } else { return 2 }\n}\n"
        self.assertEqual(miscased(text), [])

    def test_statement_keywords(self) -> None:
        text = "If ($x) {\n    Write-Output 'a'\n} Else {\n    RETURN\n}\n"
        self.assertEqual(miscased(text), ["If", "Else", "RETURN"])

    def test_line_numbers(self) -> None:
        tokens = find_miscased_keywords("Write-Output 'x'\n\nForeach ($i in $items) { }\n")
        self.assertEqual([(t.text, t.line) for t in tokens], [("Foreach", 3)])

    def test_in_inside_foreach_header(self) -> None:
        self.assertEqual(miscased("foreach ($item In $list) { }\n"), ["In"])

    def test_in_outside_foreach_is_ignored(self) -> None:
        self.assertEqual(miscased("Write-Output In\n"), [])

    def test_arguments_are_not_keywords(self) -> None:
        self.assertEqual(miscased("Write-Output End\nGet-Item -Path If\n"), [])

    def test_hashtable_keys_are_not_keywords(self) -> None:
        self.assertEqual(miscased("$h = @{ Process = 1; Data = 2 }\n"), [])

    def test_parameters_and_members_are_ignored(self) -> None:
        self.assertEqual(miscased("Invoke-Thing -Begin -End\n$obj.Process()\n"), [])

    def test_comments_and_strings_are_ignored(self) -> None:
        text = (
            "# If this breaks\n"
            "<# Foreach\n   Return #>\n"
            "Write-Output 'If' \"Else\"\n"
            "$s = @'\nFunction\n'@\n"
        )
        self.assertEqual(miscased(text), [])

    def test_non_ascii_digits_and_symbols(self) -> None:
        text = "Write-Output ²\n$n = １\n$m = ٣ + ³\n€ 1\nIf ($n) { }\n"
        self.assertEqual(miscased(text), ["If"])

    def test_statement_after_separator(self) -> None:
        self.assertEqual(miscased("Get-Item x; Return\n$y = If ($z) { 1 }\n"), ["Return", "If"])


class TestKeywordCasingChecker(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = Path(tempfile.mkdtemp()).resolve()
        self.checker = KeywordCasingChecker(GateConfig(root=self.temp_dir))

    def tearDown(self) -> None:
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_should_process_scripts_only(self) -> None:
        self.assertTrue(self.checker.should_process_file(Path("a.psm1")))
        self.assertFalse(self.checker.should_process_file(Path("notes.txt")))

    def test_report_lists_offenders(self) -> None:
        path = self.temp_dir / "a.ps1"
        path.write_text("FUNCTION Get-Thing {\n}\n", encoding="utf-8")
        result = self.checker.check(path, fix=False)
        self.assertTrue(result.violation)
        self.assertIn("'FUNCTION' (line 1)", result.message)
        self.assertEqual(path.read_text(encoding="utf-8"), "FUNCTION Get-Thing {\n}\n")

    def test_fix_lowercases_only_keywords(self) -> None:
        path = self.temp_dir / "a.ps1"
        path.write_text(
            "Function Get-Thing {\n    If ($End) { Write-Output 'If' }\n}\n",
            encoding="utf-8",
        )
        result = self.checker.check(path, fix=True)
        self.assertTrue(result.fixed)
        self.assertEqual(
            path.read_text(encoding="utf-8"),
            "function Get-Thing {\n    if ($End) { Write-Output 'If' }\n}\n",
        )
        self.assertFalse(self.checker.check(path, fix=False).violation)


if __name__ == "__main__":
    unittest.main()
