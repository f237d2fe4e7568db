"""Checker for runs of consecutive blank lines."""

from pathlib import Path
from typing import List

from psgate.gate.config import GateConfig
from psgate.util.check_files import CheckResult, FileChecker, FileContent


class EmptyLinesChecker(FileChecker):
    """No more than ``max_consecutive_empty_lines`` blank lines in a row.

    A line holding only whitespace counts as blank.
    """

    name = "empty-lines"

    def __init__(self, config: GateConfig):
        self.config = config
        self.limit = config.max_consecutive_empty_lines

    def should_process_file(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self.config.recognized_extensions

    def check_file_content(self, file_content: FileContent, fix: bool) -> CheckResult:
        lines = file_content.text.splitlines(keepends=True)
        kept: List[str] = []
        offending: List[int] = []
        run = 0

        for line_number, line in enumerate(lines, 1):
            if line.strip():
                run = 0
                kept.append(line)
                continue
            run += 1
            if run > self.limit:
                if run == self.limit + 1:
                    offending.append(line_number)
                continue
            kept.append(line)

        if not offending:
            return CheckResult.ok()

        if fix:
            file_content.write("".join(kept))

        where = ", ".join(str(n) for n in offending[:5])
        if len(offending) > 5:
            where += ", ..."
        return CheckResult.failed(
            f"more than {self.limit} consecutive empty line(s) at line(s) {where}",
            fixed=fix,
        )
