"""Checker to ensure every file ends with exactly one line terminator."""

from pathlib import Path

from psgate.gate.config import GateConfig
from psgate.util.check_files import CheckResult, FileChecker, FileContent


class TrailingNewlineChecker(FileChecker):
    """Flags files with no final newline or with blank lines at the end."""

    name = "trailing-newline"

    def __init__(self, config: GateConfig):
        self.config = config

    def should_process_file(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self.config.recognized_extensions

    def check_file_content(self, file_content: FileContent, fix: bool) -> CheckResult:
        text = file_content.text
        if not text:
            return CheckResult.ok()

        body = text.rstrip("\r\n")
        trailing = text[len(body) :]
        if body and trailing in ("\n", "\r\n"):
            return CheckResult.ok()

        if not trailing:
            message = "missing newline at end of file"
        elif not body:
            message = "file contains only blank lines"
        else:
            message = "extra blank lines at end of file"

        if fix:
            file_content.write(body + file_content.newline if body else "")
        return CheckResult.failed(message, fixed=fix)
