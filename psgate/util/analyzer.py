"""Rule-based linting delegated to Invoke-ScriptAnalyzer."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

from rich.table import Table
from rich.text import Text

from psgate.gate.config import GateConfig
from psgate.gate.errors import AnalyzerInvocationError
from psgate.util.retry import retry_call


logger = logging.getLogger(__name__)


class AnalyzerBackend(Protocol):
    def analyze_file(
        self, target: Path, settings: Optional[Path], custom_rules: Optional[Path]
    ) -> str: ...


@dataclass
class Finding:
    """One diagnostic record reported by the analyzer."""

    rule_name: str
    severity: str
    line: Optional[int]
    column: Optional[int]
    message: str


def _optional_int(value: Any) -> Optional[int]:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def parse_findings(raw: str) -> list[Finding]:
    """
    Parse the JSON written by the analyzer script.

    Raises:
        AnalyzerInvocationError: the output is not a JSON array of records
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise AnalyzerInvocationError(f"analyzer output is not valid JSON: {e}") from e

    # ConvertTo-Json collapses a single record into an object on older hosts
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise AnalyzerInvocationError(
            f"analyzer output must be a JSON array, got {type(data).__name__}"
        )

    findings: list[Finding] = []
    for record in data:
        if not isinstance(record, dict):
            raise AnalyzerInvocationError(f"unexpected analyzer record: {record!r}")
        findings.append(
            Finding(
                rule_name=str(record.get("RuleName", "")),
                severity=str(record.get("Severity", "")),
                line=_optional_int(record.get("Line")),
                column=_optional_int(record.get("Column")),
                message=str(record.get("Message", "")).strip(),
            )
        )
    return findings


class ScriptAnalyzer:
    """Runs the analyzer on one file at a time with bounded retry.

    Invocation failures are retried; exhausting the budget raises
    RetryExhaustedError, which the caller treats as fatal.
    """

    def __init__(
        self,
        config: GateConfig,
        backend: AnalyzerBackend,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.config = config
        self.backend = backend
        self.sleep = sleep

    def _invoke(self, file_path: Path) -> list[Finding]:
        raw = self.backend.analyze_file(
            file_path, self.config.analyzer_settings, self.config.analyzer_custom_rules
        )
        return parse_findings(raw)

    def analyze(self, file_path: Path) -> list[Finding]:
        findings = retry_call(
            lambda: self._invoke(file_path),
            max_attempts=self.config.analyzer_retries,
            delay=self.config.analyzer_retry_delay,
            retry_on=(AnalyzerInvocationError,),
            description=f"Invoke-ScriptAnalyzer on {file_path.name}",
            sleep=self.sleep,
        )
        logger.debug(f"{file_path}: {len(findings)} analyzer finding(s)")
        return findings


def findings_table(title: str, findings: list[Finding]) -> Table:
    table = Table(title=Text(title), title_justify="left", show_lines=False)
    table.add_column("Rule", style="bold")
    table.add_column("Severity")
    table.add_column("Line", justify="right")
    table.add_column("Column", justify="right")
    table.add_column("Message", overflow="fold")

    severity_styles = {"Error": "red", "ParseError": "red", "Warning": "yellow"}
    for finding in findings:
        table.add_row(
            Text(finding.rule_name),
            Text(finding.severity, style=severity_styles.get(finding.severity, "blue")),
            "" if finding.line is None else str(finding.line),
            "" if finding.column is None else str(finding.column),
            Text(finding.message),
        )
    return table
