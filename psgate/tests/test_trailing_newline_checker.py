#!/usr/bin/env python3
"""Unit tests for the trailing newline checker."""

import shutil
import tempfile
import unittest
from pathlib import Path

from psgate.checks.trailing_newline_checker import TrailingNewlineChecker
from psgate.gate.config import GateConfig


class TestTrailingNewlineChecker(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = Path(tempfile.mkdtemp()).resolve()
        self.checker = TrailingNewlineChecker(GateConfig(root=self.temp_dir))

    def tearDown(self) -> None:
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def write(self, name: str, data: bytes) -> Path:
        path = self.temp_dir / name
        path.write_bytes(data)
        return path

    def test_should_process_recognized_extensions_only(self) -> None:
        self.assertTrue(self.checker.should_process_file(Path("a.ps1")))
        self.assertTrue(self.checker.should_process_file(Path("README.md")))
        self.assertTrue(self.checker.should_process_file(Path("Module.PSD1")))
        self.assertFalse(self.checker.should_process_file(Path("image.png")))

    def test_single_newline_is_clean(self) -> None:
        for data in (b"Write-Output 'x'\n", b"Write-Output 'x'\r\n", b""):
            path = self.write("clean.ps1", data)
            result = self.checker.check(path, fix=False)
            self.assertFalse(result.violation, data)

    def test_missing_newline(self) -> None:
        path = self.write("a.ps1", b"Write-Output 'x'")
        result = self.checker.check(path, fix=False)
        self.assertTrue(result.violation)
        self.assertFalse(result.fixed)
        self.assertIn("missing newline", result.message)
        # Report mode leaves the file alone
        self.assertEqual(path.read_bytes(), b"Write-Output 'x'")

    def test_fix_adds_exactly_one_newline(self) -> None:
        path = self.write("a.ps1", b"Write-Output 'x'")
        result = self.checker.check(path, fix=True)
        self.assertTrue(result.violation)
        self.assertTrue(result.fixed)
        self.assertEqual(path.read_bytes(), b"Write-Output 'x'\n")
        self.assertFalse(self.checker.check(path, fix=False).violation)

    def test_extra_blank_lines_are_trimmed(self) -> None:
        path = self.write("notes.md", b"# Title\n\n\n")
        result = self.checker.check(path, fix=True)
        self.assertIn("extra blank lines", result.message)
        self.assertEqual(path.read_bytes(), b"# Title\n")

    def test_fix_keeps_crlf_and_bom(self) -> None:
        path = self.write("a.ps1", b"\xef\xbb\xbfline1\r\nline2")
        self.checker.check(path, fix=True)
        self.assertEqual(path.read_bytes(), b"\xef\xbb\xbfline1\r\nline2\r\n")

    def test_only_blank_lines(self) -> None:
        path = self.write("empty.txt", b"\n\n")
        result = self.checker.check(path, fix=True)
        self.assertIn("only blank lines", result.message)
        self.assertEqual(path.read_bytes(), b"")


if __name__ == "__main__":
    unittest.main()
