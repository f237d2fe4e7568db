"""In-process stand-in for PowerShellHost used across the test suite."""

import io
from pathlib import Path
from typing import Optional

from rich.console import Console

from psgate.gate.errors import AnalyzerInvocationError
from psgate.util.color_output import ColorOutput


class FakeHost:
    """Formatter returns the file unchanged unless told otherwise."""

    def __init__(
        self,
        version: Optional[str] = "1.22.0",
        analyzer_output: str = "[]",
    ):
        self.version = version
        self.analyzer_output = analyzer_output
        self.formatted: dict[Path, str] = {}
        self.analyze_failures = 0
        self.format_calls: list[Path] = []
        self.analyze_calls: list[Path] = []

    def analyzer_version(self) -> Optional[str]:
        return self.version

    def format_file(self, target: Path, settings: Optional[Path]) -> str:
        self.format_calls.append(target)
        if target in self.formatted:
            return self.formatted[target]
        return target.read_bytes().decode("utf-8-sig")

    def analyze_file(
        self, target: Path, settings: Optional[Path], custom_rules: Optional[Path]
    ) -> str:
        self.analyze_calls.append(target)
        if self.analyze_failures:
            self.analyze_failures -= 1
            raise AnalyzerInvocationError("pwsh exited with code 1", returncode=1)
        return self.analyzer_output


def captured_output() -> tuple[ColorOutput, io.StringIO]:
    """ColorOutput writing plain text into a buffer."""
    buffer = io.StringIO()
    console = Console(file=buffer, force_terminal=False, width=200, highlight=False)
    return ColorOutput(console=console), buffer
