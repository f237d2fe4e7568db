"""Thin wrappers around the git queries used by the change-set resolver."""

import logging
import subprocess
from pathlib import Path
from typing import Optional

from psgate.gate.errors import GitError


logger = logging.getLogger(__name__)


def run_git(args: list[str], cwd: Path) -> str:
    """Run ``git <args>`` in ``cwd`` and return stdout.

    Raises:
        GitError: git is missing or exited non-zero
    """
    command = ["git", *args]
    logger.debug("$ %s", " ".join(command))
    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=False,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError as e:
        raise GitError(command, -1, str(e)) from e
    if result.returncode != 0:
        raise GitError(command, result.returncode, result.stderr)
    return result.stdout


def git_toplevel(cwd: Path) -> Optional[Path]:
    """Work tree root containing ``cwd``; None outside a repository."""
    try:
        out = run_git(["rev-parse", "--show-toplevel"], cwd)
    except GitError:
        return None
    out = out.strip()
    return Path(out).resolve() if out else None


def commits_since(base_ref: str, cwd: Path) -> list[str]:
    """SHAs of commits reachable from HEAD but not from ``base_ref``."""
    out = run_git(["rev-list", f"{base_ref}..HEAD"], cwd)
    return [line.strip() for line in out.splitlines() if line.strip()]


def files_in_commit(sha: str, cwd: Path) -> list[str]:
    """Repo-relative paths touched by a single commit."""
    out = run_git(
        ["diff-tree", "--no-commit-id", "--name-only", "-r", "--root", "-z", sha],
        cwd,
    )
    return [name for name in out.split("\0") if name]


def uncommitted_files(cwd: Path) -> list[str]:
    """Repo-relative paths with staged, unstaged or untracked changes.

    Deleted entries are omitted; renames and copies report the new path.
    """
    out = run_git(["status", "--porcelain", "-z", "--untracked-files=all"], cwd)
    return parse_porcelain_z(out)


def parse_porcelain_z(out: str) -> list[str]:
    """Parse ``git status --porcelain -z`` output into paths worth checking."""
    paths: list[str] = []
    entries = out.split("\0")
    i = 0
    while i < len(entries):
        entry = entries[i]
        i += 1
        if len(entry) < 4:
            continue
        status = entry[:2]
        path = entry[3:]
        if "R" in status or "C" in status:
            # Rename/copy records are followed by the source path
            i += 1
        if "D" in status:
            continue
        paths.append(path)
    return paths
