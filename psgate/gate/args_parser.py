"""Argument parsing for the formatting gate."""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class GateArgs:
    """Parsed command-line arguments for the gate."""

    save: bool = False
    all_files: bool = False
    base_ref: Optional[str] = None
    root: Optional[Path] = None
    config: Optional[Path] = None
    run_analyzer: bool = True
    verbose: bool = False
    files: list[Path] = field(default_factory=lambda: list[Path]())


def parse_gate_args(argv: list[str] | None = None) -> GateArgs:
    """
    Parse command-line arguments for the gate.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        GateArgs object with parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog="psgate",
        description="PowerShell repository formatting gate",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Checks run on every selected file, in order:
  trailing-newline, text-bom, script-bom, compliance-header,
  keyword-casing, empty-lines, formatting, then Invoke-ScriptAnalyzer.

Examples:
  psgate                      # Files changed since origin/main (or $GITHUB_BASE_REF)
  psgate --all                # Every recognized file in the repository
  psgate --save               # Fix violations in place
  psgate --base origin/release/v7.4
  psgate src/Module/Thing.ps1 # Only the given files
""",
    )

    parser.add_argument(
        "--save",
        "--fix",
        dest="save",
        action="store_true",
        help="Rewrite files in place to fix violations",
    )

    parser.add_argument(
        "--all",
        dest="all_files",
        action="store_true",
        help="Check all files instead of only the changed ones",
    )

    parser.add_argument(
        "--base",
        dest="base_ref",
        default=None,
        help="Baseline ref for the change set (default: config base_ref)",
    )

    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Repository root (default: git top-level of the current directory)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration file (default: tools/formatting/formatting.toml)",
    )

    parser.add_argument(
        "--no-analyzer",
        action="store_true",
        help="Skip Invoke-ScriptAnalyzer",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Trace every git query, file and check",
    )

    parser.add_argument(
        "files",
        nargs="*",
        default=[],
        help="Optional: specific file(s) to check instead of the change set",
    )

    if argv is None:
        argv = sys.argv[1:]

    args = parser.parse_args(argv)

    return GateArgs(
        save=args.save,
        all_files=args.all_files,
        base_ref=args.base_ref,
        root=args.root,
        config=args.config,
        run_analyzer=not args.no_analyzer,
        verbose=args.verbose,
        files=[Path(f).resolve() for f in args.files],
    )
