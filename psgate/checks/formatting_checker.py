"""Checker to ensure scripts match the canonical Invoke-Formatter style."""

from pathlib import Path
from typing import Callable, Optional, Protocol

from psgate.gate.config import GateConfig
from psgate.gate.errors import AnalyzerInvocationError
from psgate.util.check_files import CheckResult, FileChecker, FileContent
from psgate.util.retry import retry_call


class Formatter(Protocol):
    def format_file(self, target: Path, settings: Optional[Path]) -> str: ...


class FormattingChecker(FileChecker):
    """Compares each script with its reformatted version.

    In report mode the result carries both snapshots so the caller can print
    a diff.
    """

    name = "formatting"

    def __init__(
        self,
        config: GateConfig,
        formatter: Formatter,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.config = config
        self.formatter = formatter
        self.sleep = sleep

    def should_process_file(self, file_path: Path) -> bool:
        return self.config.is_formatted(file_path)

    def reformat(self, file_path: Path) -> str:
        return retry_call(
            lambda: self.formatter.format_file(file_path, self.config.analyzer_settings),
            max_attempts=self.config.analyzer_retries,
            delay=self.config.analyzer_retry_delay,
            retry_on=(AnalyzerInvocationError,),
            description=f"Invoke-Formatter on {file_path.name}",
            sleep=self.sleep,
        )

    def check_file_content(self, file_content: FileContent, fix: bool) -> CheckResult:
        original = file_content.text
        # Invoke-Formatter refuses an empty -ScriptDefinition
        if not original.strip():
            return CheckResult.ok()
        reformatted = self.reformat(file_content.path)
        if reformatted == original:
            return CheckResult.ok()

        if fix:
            file_content.write(reformatted)
        return CheckResult(
            violation=True,
            fixed=fix,
            message="file is not formatted",
            original=original,
            reformatted=reformatted,
        )
