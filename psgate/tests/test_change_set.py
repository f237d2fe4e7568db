#!/usr/bin/env python3
"""
Unit tests for change-set resolution.

Git is mocked for the scoping rules; one test builds a real temporary
repository and is skipped when git is not installed.
"""

import os
import shutil
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from psgate.gate.change_set import resolve_base_ref, resolve_change_set
from psgate.gate.config import GateConfig
from psgate.gate.errors import GitError


class ChangeSetTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.root = Path(tempfile.mkdtemp()).resolve()
        self.config = GateConfig(root=self.root)
        self.write("a.ps1", "Write-Output 'a'\n")
        self.write("docs/b.md", "# b\n")
        self.write("node_modules/pkg/c.ps1", "Write-Output 'c'\n")
        self.write("image.png", "")
        self.write("tools/formatting/PSScriptAnalyzerSettings.psd1", "@{}\n")

    def tearDown(self) -> None:
        shutil.rmtree(self.root, ignore_errors=True)

    def write(self, relpath: str, text: str) -> Path:
        path = self.root / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path


class TestResolveChangeSet(ChangeSetTestCase):
    def resolve(self, committed: list[str], pending: list[str]):
        with (
            patch(
                "psgate.gate.change_set.commits_since", return_value=["abc123"]
            ) as mock_commits,
            patch("psgate.gate.change_set.files_in_commit", return_value=committed),
            patch("psgate.gate.change_set.uncommitted_files", return_value=pending),
        ):
            change_set = resolve_change_set(self.config, base_ref="origin/main")
        mock_commits.assert_called_once_with("origin/main", self.root)
        return change_set

    def test_changed_files_only(self) -> None:
        change_set = self.resolve(
            committed=["a.ps1", "deleted.ps1", "image.png", "node_modules/pkg/c.ps1"],
            pending=["docs/b.md", "a.ps1"],
        )
        self.assertFalse(change_set.all_files)
        self.assertEqual(change_set.files, [self.root / "a.ps1", self.root / "docs" / "b.md"])

    def test_nothing_changed(self) -> None:
        change_set = self.resolve(committed=[], pending=[])
        self.assertEqual(change_set.files, [])
        self.assertFalse(change_set.all_files)

    def test_config_area_change_widens_to_all_files(self) -> None:
        with self.assertLogs("psgate.gate.change_set", level="INFO") as logs:
            change_set = self.resolve(
                committed=["tools/formatting/PSScriptAnalyzerSettings.psd1"],
                pending=[],
            )
        self.assertTrue(change_set.all_files)
        self.assertIn("configuration", change_set.reason)
        self.assertIn(self.root / "a.ps1", change_set.files)
        self.assertIn(self.root / "docs" / "b.md", change_set.files)
        self.assertNotIn(self.root / "node_modules" / "pkg" / "c.ps1", change_set.files)
        self.assertTrue(any("checking all files" in line for line in logs.output))

    def test_custom_rules_directory_is_config_area(self) -> None:
        self.write("tools/formatting/CustomRules/Rule.psm1", "function x {}\n")
        change_set = self.resolve(
            committed=[], pending=["tools/formatting/CustomRules/Rule.psm1"]
        )
        self.assertTrue(change_set.all_files)

    def test_all_files_requested_skips_git(self) -> None:
        with patch("psgate.gate.change_set.commits_since") as mock_commits:
            change_set = resolve_change_set(self.config, all_files_requested=True)
        mock_commits.assert_not_called()
        self.assertEqual(
            change_set.files,
            [
                self.root / "a.ps1",
                self.root / "docs" / "b.md",
                self.root / "tools" / "formatting" / "PSScriptAnalyzerSettings.psd1",
            ],
        )


class TestResolveBaseRef(unittest.TestCase):
    def setUp(self) -> None:
        self.config = GateConfig(root=Path(tempfile.gettempdir()), base_ref="origin/dev")

    def test_explicit_wins(self) -> None:
        with patch.dict(os.environ, {"GITHUB_BASE_REF": "release"}):
            self.assertEqual(resolve_base_ref(self.config, "upstream/x"), "upstream/x")

    def test_ci_target_branch(self) -> None:
        with patch.dict(os.environ, {"GITHUB_BASE_REF": "release/v7.4"}):
            self.assertEqual(resolve_base_ref(self.config), "origin/release/v7.4")

    def test_config_fallback(self) -> None:
        with patch.dict(os.environ):
            os.environ.pop("GITHUB_BASE_REF", None)
            self.assertEqual(resolve_base_ref(self.config), "origin/dev")


class TestRealRepository(ChangeSetTestCase):
    def setUp(self) -> None:
        if shutil.which("git") is None:
            self.skipTest("git not installed")
        super().setUp()
        self.git("init", "-q")
        self.git("add", "-A")
        self.git("commit", "-q", "-m", "initial")
        self.git("branch", "baseline")

    def git(self, *args: str) -> None:
        subprocess.run(
            [
                "git",
                "-c",
                "user.name=psgate",
                "-c",
                "user.email=psgate@example.com",
                "-c",
                "commit.gpgsign=false",
                *args,
            ],
            cwd=self.root,
            check=True,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )

    def test_commits_and_uncommitted_files(self) -> None:
        self.write("committed.ps1", "Write-Output 'x'\n")
        self.git("add", "committed.ps1")
        self.git("commit", "-q", "-m", "add committed.ps1")
        self.write("a.ps1", "Write-Output 'changed'\n")
        self.write("docs/untracked.md", "# new\n")
        (self.root / "docs" / "b.md").unlink()

        change_set = resolve_change_set(self.config, base_ref="baseline")
        self.assertFalse(change_set.all_files)
        self.assertEqual(
            change_set.files,
            [
                self.root / "a.ps1",
                self.root / "committed.ps1",
                self.root / "docs" / "untracked.md",
            ],
        )

    def test_bad_base_ref(self) -> None:
        with self.assertRaises(GitError):
            resolve_change_set(self.config, base_ref="does-not-exist")


if __name__ == "__main__":
    unittest.main()
