"""Per-check tallies and the summary table printed at the end of a run."""

import time
from dataclasses import dataclass


@dataclass
class CheckTally:
    """Accumulated numbers for a single check across all files."""

    name: str
    violations: int = 0
    duration: float = 0.0


class CheckTracker:
    """
    Tracks violation counts and time spent per check.

    Checks are registered up front so the summary lists them in run order,
    including the ones that never fired.
    """

    def __init__(self, names: list[str]) -> None:
        self.tallies: dict[str, CheckTally] = {name: CheckTally(name) for name in names}
        self.start_times: dict[str, float] = {}

    def _tally(self, name: str) -> CheckTally:
        if name not in self.tallies:
            self.tallies[name] = CheckTally(name)
        return self.tallies[name]

    def start_check(self, name: str) -> None:
        """Record the start time of one check invocation."""
        self.start_times[name] = time.time()

    def end_check(self, name: str, violation: bool) -> None:
        """Add the elapsed time and, if it failed, one violation."""
        tally = self._tally(name)
        if name in self.start_times:
            tally.duration += time.time() - self.start_times.pop(name)
        if violation:
            tally.violations += 1

    def record_violation(self, name: str) -> None:
        self._tally(name).violations += 1

    def generate_summary(self) -> str:
        """
        Generate the summary table.

        Returns:
            Formatted summary table as a string
        """
        if not self.tallies:
            return ""

        results = list(self.tallies.values())
        name_width = max(max(len(r.name) for r in results), len("Check"))

        separator = "-" * name_width + "-+-" + "-" * 10 + "-+-" + "-" * 10

        lines = [
            "",
            "Formatting Gate Summary:",
            separator,
            f"{'Check':<{name_width}} | {'Violations':>10} | {'Duration':>10}",
            separator,
        ]
        for result in results:
            lines.append(
                f"{result.name:<{name_width}} | {result.violations:>10} | "
                f"{result.duration:>9.2f}s"
            )
        lines.append(separator)

        return "\n".join(lines)
