"""Byte-order-mark checkers.

Text assets (Markdown, JSON, YAML) must not carry a UTF-8 BOM. Scripts that
contain non-ASCII characters must carry one, otherwise Windows PowerShell 5.1
reads them in the ANSI code page.
"""

from pathlib import Path

from psgate.gate.config import GateConfig
from psgate.util.check_files import CheckResult, FileChecker, FileContent


class TextBomChecker(FileChecker):
    """Text-class files must be saved without a BOM."""

    name = "text-bom"

    def __init__(self, config: GateConfig):
        self.config = config

    def should_process_file(self, file_path: Path) -> bool:
        return self.config.is_text(file_path)

    def check_file_content(self, file_content: FileContent, fix: bool) -> CheckResult:
        if not file_content.has_bom:
            return CheckResult.ok()
        if fix:
            file_content.write(file_content.text, bom=False)
        return CheckResult.failed("UTF-8 byte-order mark found", fixed=fix)


class ScriptBomChecker(FileChecker):
    """Script-class files with non-ASCII content must be saved with a BOM."""

    name = "script-bom"

    def __init__(self, config: GateConfig):
        self.config = config

    def should_process_file(self, file_path: Path) -> bool:
        return self.config.is_script(file_path)

    def check_file_content(self, file_content: FileContent, fix: bool) -> CheckResult:
        if file_content.has_bom or file_content.is_ascii:
            return CheckResult.ok()
        if fix:
            file_content.write(file_content.text, bom=True)
        return CheckResult.failed(
            "non-ASCII characters found but no UTF-8 byte-order mark", fixed=fix
        )
