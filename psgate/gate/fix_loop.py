"""Runs every check against every selected file and counts violations."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from psgate.gate.config import GateConfig
from psgate.gate.summary import CheckTracker
from psgate.util.analyzer import Finding, ScriptAnalyzer, findings_table
from psgate.util.check_files import FileChecker, FileDecodeError
from psgate.util.color_output import ColorOutput
from psgate.util.paths import display_path


logger = logging.getLogger(__name__)

ENCODING_CHECK = "encoding"
ANALYZER_CHECK = "script-analyzer"


@dataclass
class GateResult:
    """Accumulator threaded through the loop.

    ``violations`` grows by one per failing check invocation; the analyzer
    contributes one per file with findings, whatever the number of findings.
    """

    violations: int = 0
    files_checked: int = 0
    files_with_violations: set[Path] = field(default_factory=lambda: set[Path]())
    findings: dict[Path, list[Finding]] = field(
        default_factory=lambda: dict[Path, list[Finding]]()
    )

    @property
    def passed(self) -> bool:
        return self.violations == 0

    def add_violation(self, path: Path) -> None:
        self.violations += 1
        self.files_with_violations.add(path)


class FixReportLoop:
    """
    Applies the check registry and the analyzer to a list of files.

    Handles:
    - Sequential check execution, reloading the file after each fix
    - Violation accounting in a GateResult
    - Diff rendering for formatting violations in report mode
    - Analyzer findings tables

    The analyzer only runs on script-class files (.ps1, .psm1, .psd1 by
    default); text assets go through the style checks alone.
    """

    def __init__(
        self,
        config: GateConfig,
        checkers: list[FileChecker],
        analyzer: Optional[ScriptAnalyzer],
        fix: bool,
        output: ColorOutput,
        tracker: Optional[CheckTracker] = None,
    ) -> None:
        self.config = config
        self.checkers = checkers
        self.analyzer = analyzer
        self.fix = fix
        self.output = output
        names = [c.name for c in checkers]
        if analyzer is not None:
            names.append(ANALYZER_CHECK)
        self.tracker = tracker or CheckTracker(names)

    def run(self, files: list[Path], result: Optional[GateResult] = None) -> GateResult:
        """
        Check all files.

        Returns:
            GateResult holding the violation count

        Raises:
            ToolError: an external tool failed for good; no further files are
                checked
        """
        result = result or GateResult()
        for path in files:
            result = self.check_file(path, result)
        return result

    def check_file(self, path: Path, result: GateResult) -> GateResult:
        location = display_path(path, self.config.root)
        logger.debug(f"Checking {location}")
        result.files_checked += 1

        for checker in self.checkers:
            self.tracker.start_check(checker.name)
            try:
                outcome = checker.check(path, self.fix)
            except FileDecodeError as e:
                self.tracker.end_check(checker.name, violation=False)
                self.tracker.record_violation(ENCODING_CHECK)
                result.add_violation(path)
                self.output.print_violation(location, ENCODING_CHECK, str(e))
                # Remaining checks and the analyzer need decodable text
                return result
            self.tracker.end_check(checker.name, outcome.violation)

            if not outcome.violation:
                continue
            result.add_violation(path)
            if outcome.fixed:
                self.output.print_fixed(location, checker.name, outcome.message)
            else:
                self.output.print_violation(location, checker.name, outcome.message)
                if outcome.has_diff:
                    assert outcome.original is not None
                    assert outcome.reformatted is not None
                    self.output.print_diff(
                        location, outcome.original, outcome.reformatted
                    )

        if self.analyzer is not None and self.config.is_script(path):
            self.tracker.start_check(ANALYZER_CHECK)
            findings = self.analyzer.analyze(path)
            self.tracker.end_check(ANALYZER_CHECK, bool(findings))
            if findings:
                result.add_violation(path)
                result.findings[path] = findings
                self.output.print_violation(
                    location, ANALYZER_CHECK, f"{len(findings)} finding(s)"
                )
                self.output.print(findings_table(location, findings))

        return result
