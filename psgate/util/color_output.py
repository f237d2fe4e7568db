"""
Colored terminal output for the formatting gate.

Uses the Rich library so diffs and status lines render the same on the
Windows and Linux CI agents.
"""

import difflib
from typing import Generator, List, Optional

from rich.console import Console, RenderableType
from rich.text import Text


def make_diff(file: str, original: str, reformatted: str) -> List[str]:
    return list(
        difflib.unified_diff(
            original.splitlines(keepends=True),
            reformatted.splitlines(keepends=True),
            fromfile="{}\t(original)".format(file),
            tofile="{}\t(reformatted)".format(file),
            n=3,
        )
    )


def colorize(diff_lines: List[str]) -> Generator[Text, None, None]:
    for line in diff_lines:
        line = line.rstrip("\r\n")
        if line[:4] in ["--- ", "+++ "]:
            yield Text(line, style="bold")
        elif line.startswith("@@ "):
            yield Text(line, style="cyan")
        elif line.startswith("+"):
            yield Text(line, style="green")
        elif line.startswith("-"):
            yield Text(line, style="red")
        else:
            yield Text(line)


class ColorOutput:
    """
    Colored terminal output using Rich.

    Provides methods for printing colored text with consistent formatting
    across different operating systems and terminals.
    """

    def __init__(
        self,
        force_terminal: Optional[bool] = None,
        console: Optional[Console] = None,
    ):
        """
        Initialize ColorOutput.

        Args:
            force_terminal: Force terminal mode (True/False) or auto-detect (None)
            console: Use this console instead of creating one (tests)
        """
        self.console = console or Console(force_terminal=force_terminal, highlight=False)

    def print_green(self, message: str) -> None:
        """Print message in green color."""
        self.console.print(Text(message, style="green"))

    def print_yellow(self, message: str) -> None:
        """Print message in yellow color."""
        self.console.print(Text(message, style="yellow"))

    def print_red(self, message: str) -> None:
        """Print message in red color."""
        self.console.print(Text(message, style="red"))

    def print_blue(self, message: str) -> None:
        """Print message in blue color."""
        self.console.print(Text(message, style="blue"))

    def print_violation(self, location: str, check: str, message: str) -> None:
        """Print one violation as ``path: [check] message``."""
        text = Text()
        text.append("✗ ", style="red bold")
        text.append(location, style="bold")
        text.append(f": [{check}] ", style="red")
        text.append(message)
        self.console.print(text)

    def print_fixed(self, location: str, check: str, message: str) -> None:
        """Print one violation that fix mode already corrected."""
        text = Text()
        text.append("✓ ", style="bright_green bold")
        text.append(location, style="bold")
        text.append(f": [{check}] fixed: ", style="green")
        text.append(message)
        self.console.print(text)

    def print_diff(self, file: str, original: str, reformatted: str) -> None:
        """Print a colorized unified diff between two snapshots."""
        for line in colorize(make_diff(file, original, reformatted)):
            self.console.print(line, soft_wrap=True)

    def print(self, renderable: RenderableType) -> None:
        self.console.print(renderable)
