"""Checker to ensure scripts start with the required copyright header."""

from pathlib import Path

from psgate.gate.config import GateConfig
from psgate.util.check_files import CheckResult, FileChecker, FileContent


class ComplianceHeaderChecker(FileChecker):
    """Scripts must begin with the configured header comment lines."""

    name = "compliance-header"

    def __init__(self, config: GateConfig):
        self.config = config
        self.header = list(config.header)

    def should_process_file(self, file_path: Path) -> bool:
        return bool(self.header) and self.config.is_script(file_path)

    def has_header(self, lines: list[str]) -> bool:
        if len(lines) < len(self.header):
            return False
        return all(
            actual.rstrip() == expected.rstrip()
            for actual, expected in zip(lines, self.header)
        )

    def check_file_content(self, file_content: FileContent, fix: bool) -> CheckResult:
        if self.has_header(file_content.lines):
            return CheckResult.ok()

        if fix:
            newline = file_content.newline
            header = newline.join(self.header) + newline
            if file_content.text:
                header += newline
            file_content.write(header + file_content.text)
        return CheckResult.failed(
            f"missing compliance header '{self.header[0]}'", fixed=fix
        )
