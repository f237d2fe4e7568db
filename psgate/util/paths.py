"""Repository path helpers."""

import os
from pathlib import Path
from typing import Iterable, Optional

from psgate.util.git import git_toplevel


def find_repo_root(start: Optional[Path] = None) -> Path:
    """Return the git work tree containing ``start``, or ``start`` itself."""
    start = (start or Path.cwd()).resolve()
    toplevel = git_toplevel(start)
    return toplevel if toplevel is not None else start


def is_within(path: Path, parent: Path) -> bool:
    """True if ``path`` equals ``parent`` or lives underneath it."""
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def has_excluded_part(path: Path, root: Path, excluded_dirs: Iterable[str]) -> bool:
    """True if any directory between ``root`` and ``path`` is excluded."""
    try:
        parts = path.relative_to(root).parts[:-1]
    except ValueError:
        parts = path.parts[:-1]
    excluded = set(excluded_dirs)
    return any(part in excluded for part in parts)


def display_path(path: Path, root: Path) -> str:
    """Path relative to the repo root with forward slashes, for output."""
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return os.fspath(path)
