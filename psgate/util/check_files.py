import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from psgate.util.paths import has_excluded_part


UTF8_BOM = b"\xef\xbb\xbf"


class FileDecodeError(Exception):
    """The file is not valid UTF-8."""


@dataclass
class FileContent:
    """Container for file content and metadata.

    ``text`` never includes the BOM and keeps the file's own line endings.
    """

    path: Path
    raw: bytes
    has_bom: bool
    text: str

    @classmethod
    def load(cls, path: Path) -> "FileContent":
        raw = path.read_bytes()
        has_bom = raw.startswith(UTF8_BOM)
        body = raw[len(UTF8_BOM) :] if has_bom else raw
        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FileDecodeError(f"{path} is not valid UTF-8: {e}") from e
        return cls(path=path, raw=raw, has_bom=has_bom, text=text)

    @property
    def lines(self) -> List[str]:
        return self.text.splitlines()

    @property
    def newline(self) -> str:
        """Dominant line terminator; LF for files without any."""
        crlf = self.text.count("\r\n")
        lf = self.text.count("\n") - crlf
        return "\r\n" if crlf > lf else "\n"

    @property
    def is_ascii(self) -> bool:
        return self.text.isascii()

    def write(self, text: str, bom: Optional[bool] = None) -> None:
        """Rewrite the file. ``bom`` defaults to the file's current BOM state."""
        if bom is None:
            bom = self.has_bom
        data = text.encode("utf-8")
        if bom:
            data = UTF8_BOM + data
        self.path.write_bytes(data)


@dataclass
class CheckResult:
    """Outcome of one check on one file."""

    violation: bool = False
    fixed: bool = False
    message: str = ""
    original: Optional[str] = None
    reformatted: Optional[str] = None

    @classmethod
    def ok(cls) -> "CheckResult":
        return cls()

    @classmethod
    def failed(cls, message: str, fixed: bool = False) -> "CheckResult":
        return cls(violation=True, fixed=fixed, message=message)

    @property
    def has_diff(self) -> bool:
        return self.original is not None and self.reformatted is not None


class FileChecker(ABC):
    """Abstract base class for a single per-file style check."""

    #: Short identifier used in reports and the summary table.
    name: str = ""

    @abstractmethod
    def should_process_file(self, file_path: Path) -> bool:
        """Predicate to determine if a file should be processed.

        Args:
            file_path: Path to the file to check

        Returns:
            True if the file should be processed, False otherwise
        """
        pass

    @abstractmethod
    def check_file_content(self, file_content: FileContent, fix: bool) -> CheckResult:
        """Check the file content, rewriting the file when ``fix`` is set.

        Args:
            file_content: FileContent object for the file as it is on disk
            fix: Rewrite the file in place instead of only reporting

        Returns:
            CheckResult describing the violation, if any
        """
        pass

    def check(self, file_path: Path, fix: bool) -> CheckResult:
        """Load ``file_path`` and run the check on it."""
        if not self.should_process_file(file_path):
            return CheckResult.ok()
        return self.check_file_content(FileContent.load(file_path), fix)


def collect_files_to_check(
    root: Path,
    extensions: Iterable[str],
    excluded_dirs: Iterable[str],
) -> List[Path]:
    """Collect all files under ``root`` with one of ``extensions``."""
    wanted = {ext.lower() for ext in extensions}
    excluded = set(excluded_dirs)
    files_to_check: List[Path] = []

    for dirpath, dnames, fnames in os.walk(root):
        # os.walk() supports trimming down the dnames list in-place
        dnames[:] = sorted(d for d in dnames if d not in excluded)
        for fname in fnames:
            if os.path.splitext(fname)[1].lower() in wanted:
                files_to_check.append(Path(dirpath) / fname)

    return sorted(files_to_check)


def filter_files_to_check(
    files: Iterable[Path],
    root: Path,
    extensions: Iterable[str],
    excluded_dirs: Iterable[str],
) -> List[Path]:
    """Keep existing files with a recognized extension outside excluded dirs."""
    wanted = {ext.lower() for ext in extensions}
    excluded = list(excluded_dirs)
    return sorted(
        f
        for f in files
        if f.suffix.lower() in wanted
        and f.is_file()
        and not has_excluded_part(f, root, excluded)
    )
