"""Ordered registry of the per-file checks.

Order matters only for fix mode: cheap textual fixes run first so that the
formatter sees a file that already ends in a newline, has its header and
uses lowercase keywords.
"""

from psgate.checks.bom_checker import ScriptBomChecker, TextBomChecker
from psgate.checks.compliance_header_checker import ComplianceHeaderChecker
from psgate.checks.empty_lines_checker import EmptyLinesChecker
from psgate.checks.formatting_checker import Formatter, FormattingChecker
from psgate.checks.keyword_casing_checker import KeywordCasingChecker
from psgate.checks.trailing_newline_checker import TrailingNewlineChecker
from psgate.gate.config import GateConfig
from psgate.util.check_files import FileChecker


def create_checkers(config: GateConfig, formatter: Formatter) -> list[FileChecker]:
    """Create all checker instances in the order they run."""
    return [
        TrailingNewlineChecker(config),
        TextBomChecker(config),
        ScriptBomChecker(config),
        ComplianceHeaderChecker(config),
        KeywordCasingChecker(config),
        EmptyLinesChecker(config),
        FormattingChecker(config, formatter),
    ]
