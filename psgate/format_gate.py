#!/usr/bin/env python3
"""
PowerShell repository formatting gate.

Selects the files changed in a pull request (or every file), runs the style
checks and Invoke-ScriptAnalyzer on each, optionally fixes what it can, and
exits non-zero while any violation remains.

Exit codes:
    0   no violations
    1   violations found
    2   a tool or the environment failed (git, pwsh, PSScriptAnalyzer, config)
    130 interrupted
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Protocol

from psgate.checks.registry import create_checkers
from psgate.gate.args_parser import GateArgs, parse_gate_args
from psgate.gate.change_set import ChangeSet, resolve_change_set
from psgate.gate.config import GateConfig, load_config
from psgate.gate.errors import GateFailure, ToolError
from psgate.gate.fix_loop import FixReportLoop, GateResult
from psgate.util.analyzer import ScriptAnalyzer
from psgate.util.check_files import filter_files_to_check
from psgate.util.color_output import ColorOutput
from psgate.util.paths import find_repo_root
from psgate.util.powershell import PowerShellHost, ensure_script_analyzer


logger = logging.getLogger(__name__)

EXIT_PASS = 0
EXIT_VIOLATIONS = 1
EXIT_TOOL_ERROR = 2
EXIT_INTERRUPTED = 130


class Host(Protocol):
    """What the gate needs from PowerShell; PowerShellHost in production."""

    def analyzer_version(self) -> Optional[str]: ...

    def format_file(self, target: Path, settings: Optional[Path]) -> str: ...

    def analyze_file(
        self, target: Path, settings: Optional[Path], custom_rules: Optional[Path]
    ) -> str: ...


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
    )


def select_files(args: GateArgs, config: GateConfig) -> ChangeSet:
    """Explicit files win; otherwise ask the change-set resolver."""
    if args.files:
        files = filter_files_to_check(
            args.files, config.root, config.recognized_extensions, config.excluded_dirs
        )
        return ChangeSet(files, False, f"{len(args.files)} file(s) given")
    return resolve_change_set(config, args.all_files, args.base_ref)


def gate_decision(result: GateResult) -> None:
    """PASS returns; FAIL raises GateFailure."""
    if not result.passed:
        raise GateFailure(result)


def run_gate(
    args: GateArgs,
    output: Optional[ColorOutput] = None,
    host: Optional[Host] = None,
) -> GateResult:
    """
    Run the whole pipeline: config, tool check, file selection, checks, decision.

    Returns:
        GateResult when no violation remains

    Raises:
        GateFailure: violations were found
        ToolError: git, pwsh, PSScriptAnalyzer or the config failed
    """
    output = output or ColorOutput()
    root = (args.root or find_repo_root()).resolve()
    config = load_config(root, args.config)
    logger.debug(f"Repository root: {config.root}")
    if config.config_file is not None:
        logger.debug(f"Configuration: {config.config_file}")

    if host is None:
        host = PowerShellHost()
    ensure_script_analyzer(config.min_analyzer_version, host)

    change_set = select_files(args, config)
    mode = "fix" if args.save else "report"
    output.print_blue(
        f"Checking {len(change_set.files)} file(s) in {mode} mode ({change_set.reason})"
    )
    for path in change_set.files:
        logger.debug(f"  {path}")

    checkers = create_checkers(config, host)
    analyzer = ScriptAnalyzer(config, host) if args.run_analyzer else None
    loop = FixReportLoop(config, checkers, analyzer, fix=args.save, output=output)
    result = loop.run(change_set.files)

    output.print(loop.tracker.generate_summary())
    if result.passed:
        output.print_green(f"✅ {result.files_checked} file(s) checked, no violations")
    else:
        output.print_red(
            f"❌ {result.violations} violation(s) in "
            f"{len(result.files_with_violations)} file(s)"
        )
        if not args.save:
            output.print_yellow("Run with --save to fix what can be fixed automatically")

    gate_decision(result)
    return result


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the formatting gate."""
    args = parse_gate_args(argv)
    configure_logging(args.verbose)
    output = ColorOutput()

    try:
        run_gate(args, output)
    except GateFailure:
        return EXIT_VIOLATIONS
    except ToolError as e:
        output.print_red(f"FATAL: {e}")
        return EXIT_TOOL_ERROR
    except KeyboardInterrupt:
        output.print_yellow("\n⚠️  Interrupted by user")
        return EXIT_INTERRUPTED
    return EXIT_PASS


if __name__ == "__main__":
    sys.exit(main())
