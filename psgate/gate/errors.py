"""Exceptions raised by the formatting gate.

Content violations are never exceptions; they are counted in a GateResult.
Everything here is fatal and aborts the run.
"""

from typing import TYPE_CHECKING, Optional


if TYPE_CHECKING:
    from psgate.gate.fix_loop import GateResult


class PsGateError(Exception):
    """Base exception for the formatting gate."""


class ToolError(PsGateError):
    """An external tool or the environment failed (not a content problem)."""


class ConfigError(ToolError):
    """The configuration file is missing required structure or is malformed."""


class GitError(ToolError):
    """A git query failed."""

    def __init__(self, command: list[str], returncode: int, output: str = ""):
        self.command = command
        self.returncode = returncode
        self.output = output
        message = f"Command '{' '.join(command)}' failed with exit code {returncode}"
        if output.strip():
            message += f":\n{output.strip()}"
        super().__init__(message)


class ToolNotFoundError(ToolError):
    """pwsh or the PSScriptAnalyzer module is missing or too old."""


class AnalyzerInvocationError(ToolError):
    """A single pwsh invocation failed to run to completion."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class RetryExhaustedError(ToolError):
    """A retried operation failed on every attempt."""

    def __init__(self, description: str, attempts: int, last_error: BaseException):
        super().__init__(
            f"{description} failed after {attempts} attempt(s): {last_error}"
        )
        self.description = description
        self.attempts = attempts
        self.last_error = last_error


class GateFailure(PsGateError):
    """Raised when violations remain after all checks ran."""

    def __init__(self, result: "GateResult"):
        super().__init__(f"{result.violations} formatting violation(s) found")
        self.result = result
