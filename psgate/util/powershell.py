"""Driving PSScriptAnalyzer through a ``pwsh`` child process.

Every call passes its inputs through environment variables and receives its
result through a temp file, so script content never travels on a command
line and console encoding never touches the payload.
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from running_process import RunningProcess

from psgate.gate.errors import AnalyzerInvocationError, ToolNotFoundError


logger = logging.getLogger(__name__)

PWSH_TIMEOUT = 600
MODULE_NAME = "PSScriptAnalyzer"

VERSION_SCRIPT = r"""
$ErrorActionPreference = 'Stop'
$module = Get-Module -ListAvailable -Name PSScriptAnalyzer |
    Sort-Object -Property Version -Descending |
    Select-Object -First 1
if ($null -eq $module) { exit 3 }
[System.IO.File]::WriteAllText($env:PSGATE_OUTPUT, $module.Version.ToString())
"""

FORMAT_SCRIPT = r"""
$ErrorActionPreference = 'Stop'
Import-Module PSScriptAnalyzer
$params = @{ ScriptDefinition = [System.IO.File]::ReadAllText($env:PSGATE_TARGET) }
if ($env:PSGATE_SETTINGS) { $params.Settings = $env:PSGATE_SETTINGS }
$formatted = Invoke-Formatter @params
[System.IO.File]::WriteAllText($env:PSGATE_OUTPUT, $formatted)
"""

ANALYZE_SCRIPT = r"""
$ErrorActionPreference = 'Stop'
Import-Module PSScriptAnalyzer
$params = @{ Path = $env:PSGATE_TARGET }
if ($env:PSGATE_SETTINGS) { $params.Settings = $env:PSGATE_SETTINGS }
if ($env:PSGATE_RULES) {
    $params.CustomRulePath = $env:PSGATE_RULES
    $params.RecurseCustomRulePath = $true
    $params.IncludeDefaultRules = $true
}
$results = @(Invoke-ScriptAnalyzer @params | ForEach-Object {
    [pscustomobject]@{
        RuleName = $_.RuleName
        Severity = $_.Severity.ToString()
        Line     = $_.Line
        Column   = $_.Column
        Message  = $_.Message
    }
})
$json = ConvertTo-Json -InputObject $results -Depth 3
[System.IO.File]::WriteAllText($env:PSGATE_OUTPUT, $json)
"""


class VersionProbe(Protocol):
    def analyzer_version(self) -> Optional[str]: ...


def find_pwsh() -> str:
    """Locate the PowerShell 7 executable."""
    pwsh = shutil.which("pwsh")
    if pwsh is None:
        raise ToolNotFoundError(
            "pwsh (PowerShell 7+) was not found on PATH.\n"
            "Install it from https://aka.ms/powershell and re-run."
        )
    return pwsh


def _optional(path: Optional[Path]) -> str:
    return os.fspath(path) if path is not None and path.exists() else ""


class PowerShellHost:
    """Runs the formatter, analyzer and version probe scripts."""

    def __init__(self, executable: Optional[str] = None, timeout: int = PWSH_TIMEOUT):
        self.executable = executable or find_pwsh()
        self.timeout = timeout

    def run_script(
        self, script: str, inputs: dict[str, str], allow_empty: bool = False
    ) -> str:
        """
        Run ``script`` with ``inputs`` exported as environment variables.

        Returns:
            Contents of the file the script wrote to ``$env:PSGATE_OUTPUT``

        Raises:
            AnalyzerInvocationError: pwsh failed to start, exited non-zero
                or produced no output
        """
        fd, output_path = tempfile.mkstemp(prefix="psgate_", suffix=".out")
        os.close(fd)
        env = os.environ.copy()
        env.update(inputs)
        env["PSGATE_OUTPUT"] = output_path
        command = [
            self.executable,
            "-NoLogo",
            "-NoProfile",
            "-NonInteractive",
            "-Command",
            script,
        ]
        try:
            try:
                proc = RunningProcess(
                    command,
                    timeout=self.timeout,
                    auto_run=True,
                    check=False,  # We'll check returncode manually
                    env=env,
                )
                returncode = proc.wait(echo=False)
            except OSError as e:
                raise AnalyzerInvocationError(f"pwsh failed to start: {e}") from e

            if returncode != 0:
                raise AnalyzerInvocationError(
                    f"pwsh exited with code {returncode}: {proc.stdout.strip()}",
                    returncode=returncode,
                )
            try:
                output = Path(output_path).read_bytes().decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise AnalyzerInvocationError(f"pwsh wrote unreadable output: {e}") from e
            if not output and not allow_empty:
                raise AnalyzerInvocationError("pwsh produced no output")
            return output
        finally:
            try:
                os.unlink(output_path)
            except OSError:
                logger.debug(f"Could not remove temp file {output_path}")

    def analyzer_version(self) -> Optional[str]:
        """Highest installed PSScriptAnalyzer version, or None."""
        try:
            return self.run_script(VERSION_SCRIPT, {}).strip()
        except AnalyzerInvocationError as e:
            if e.returncode == 3:
                return None
            raise

    def format_file(self, target: Path, settings: Optional[Path]) -> str:
        """Content of ``target`` as reformatted by Invoke-Formatter."""
        return self.run_script(
            FORMAT_SCRIPT,
            {
                "PSGATE_TARGET": os.fspath(target),
                "PSGATE_SETTINGS": _optional(settings),
            },
            allow_empty=True,
        )

    def analyze_file(
        self, target: Path, settings: Optional[Path], custom_rules: Optional[Path]
    ) -> str:
        """Raw JSON array of Invoke-ScriptAnalyzer diagnostics for ``target``."""
        return self.run_script(
            ANALYZE_SCRIPT,
            {
                "PSGATE_TARGET": os.fspath(target),
                "PSGATE_SETTINGS": _optional(settings),
                "PSGATE_RULES": _optional(custom_rules),
            },
        )


def _version_tuple(version: str) -> tuple[int, ...]:
    parts: list[int] = []
    for piece in version.strip().split("."):
        digits = "".join(ch for ch in piece if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    while parts and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


def version_at_least(actual: str, minimum: str) -> bool:
    return _version_tuple(actual) >= _version_tuple(minimum)


def ensure_script_analyzer(min_version: str, host: VersionProbe) -> None:
    """
    Fail fast unless pwsh and a recent enough PSScriptAnalyzer are installed.

    Raises:
        ToolNotFoundError: pwsh missing, module missing, or module too old
    """
    try:
        version = host.analyzer_version()
    except AnalyzerInvocationError as e:
        raise ToolNotFoundError(f"Could not query {MODULE_NAME} version: {e}") from e

    if version is None:
        raise ToolNotFoundError(
            f"{MODULE_NAME} is not installed.\n"
            f"Run: pwsh -Command \"Install-Module {MODULE_NAME} "
            f"-MinimumVersion {min_version} -Scope CurrentUser\""
        )
    if not version_at_least(version, min_version):
        raise ToolNotFoundError(
            f"{MODULE_NAME} {version} is installed but {min_version} or newer is required"
        )
    logger.debug(f"Using {MODULE_NAME} {version}")
