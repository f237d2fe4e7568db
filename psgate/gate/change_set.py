"""Decide which files the gate looks at.

Pull-request runs only need the files touched since the baseline ref, plus
anything edited but not yet committed. A change to the gate's own
configuration can turn a previously clean file dirty, so such a change
widens the scope to the whole tree.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from psgate.gate.config import GateConfig
from psgate.util.check_files import collect_files_to_check, filter_files_to_check
from psgate.util.git import commits_since, files_in_commit, uncommitted_files
from psgate.util.paths import display_path, is_within


logger = logging.getLogger(__name__)


@dataclass
class ChangeSet:
    """Files selected for checking and how they were selected."""

    files: list[Path]
    all_files: bool
    reason: str


def resolve_base_ref(config: GateConfig, base_ref: Optional[str] = None) -> str:
    """``--base`` wins, then the PR target branch from CI, then config."""
    if base_ref:
        return base_ref
    ci_base = os.environ.get("GITHUB_BASE_REF")
    if ci_base:
        return f"origin/{ci_base}"
    return config.base_ref


def changed_paths(root: Path, base_ref: str) -> set[Path]:
    """Absolute paths touched by commits since ``base_ref`` or uncommitted."""
    changed: set[Path] = set()

    commits = commits_since(base_ref, root)
    logger.debug(f"{len(commits)} commit(s) in {base_ref}..HEAD")
    for sha in commits:
        names = files_in_commit(sha, root)
        logger.debug(f"  {sha[:10]}: {len(names)} file(s)")
        changed.update((root / name).resolve() for name in names)

    pending = uncommitted_files(root)
    logger.debug(f"{len(pending)} uncommitted file(s)")
    changed.update((root / name).resolve() for name in pending)

    return changed


def touches_config_area(paths: Iterable[Path], config: GateConfig) -> Optional[Path]:
    """First changed path that lies inside the configuration area, if any."""
    area = config.config_area()
    for path in sorted(paths):
        if any(is_within(path, entry) for entry in area):
            return path
    return None


def all_files(config: GateConfig) -> list[Path]:
    return collect_files_to_check(
        config.root, config.recognized_extensions, config.excluded_dirs
    )


def resolve_change_set(
    config: GateConfig,
    all_files_requested: bool = False,
    base_ref: Optional[str] = None,
) -> ChangeSet:
    """
    Determine the files to inspect.

    Args:
        config: Gate configuration (root, extensions, exclusions)
        all_files_requested: Skip git and take the whole tree
        base_ref: Baseline ref; see resolve_base_ref()

    Returns:
        ChangeSet with a sorted, deduplicated file list

    Raises:
        GitError: a git query failed
    """
    if all_files_requested:
        return ChangeSet(all_files(config), True, "all files requested")

    base = resolve_base_ref(config, base_ref)
    changed = changed_paths(config.root, base)

    trigger = touches_config_area(changed, config)
    if trigger is not None:
        where = display_path(trigger, config.root)
        logger.info(f"{where} is part of the formatting configuration; checking all files")
        return ChangeSet(all_files(config), True, f"configuration changed ({where})")

    files = filter_files_to_check(
        changed, config.root, config.recognized_extensions, config.excluded_dirs
    )
    return ChangeSet(files, False, f"{len(changed)} file(s) changed since {base}")
