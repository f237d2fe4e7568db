"""Checker to ensure PowerShell language keywords are written in lowercase.

A keyword only counts when it sits where the PowerShell parser would read it
as a keyword: at the start of a statement. ``Write-Output End`` and
``@{ Process = 1 }`` are left alone. The scan is lexical; comments, strings,
variables, parameters and member names are skipped.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from psgate.gate.config import GateConfig
from psgate.util.check_files import CheckResult, FileChecker, FileContent


KEYWORDS = frozenset(
    {
        "begin",
        "break",
        "catch",
        "class",
        "clean",
        "continue",
        "data",
        "define",
        "do",
        "dynamicparam",
        "else",
        "elseif",
        "end",
        "enum",
        "exit",
        "filter",
        "finally",
        "for",
        "foreach",
        "from",
        "function",
        "hidden",
        "if",
        "in",
        "inlinescript",
        "parallel",
        "param",
        "process",
        "return",
        "sequence",
        "static",
        "switch",
        "throw",
        "trap",
        "try",
        "until",
        "using",
        "var",
        "while",
        "workflow",
    }
)

# Previous-token kinds after which a bareword starts a statement
_STATEMENT_START = frozenset(
    {"start", "newline", ";", "{", "}", "(", "=", "&&", "||", "keyword"}
)

_BAREWORD = re.compile(r"[A-Za-z_][\w-]*")
_VARIABLE = re.compile(r"\$(?:\{[^}]*\}|[\w?^$]+(?::\w+)?)")
_PARAMETER = re.compile(r"-[A-Za-z_][\w-]*:?")
_NUMBER = re.compile(r"[0-9][\w.]*")
_HERE_STRING_OPEN = re.compile(r"@([\"'])[ \t]*\r?\n")


@dataclass
class KeywordToken:
    start: int
    end: int
    text: str
    line: int


class _Scanner:
    """Single-pass lexical scan that yields keywords in keyword position."""

    def __init__(self, text: str):
        self.text = text
        self.n = len(text)
        self.i = 0
        self.prev = "start"
        self.line = 1
        # One entry per open '(' : True when it is a foreach header
        self.parens: List[bool] = []
        self.pending_foreach = False

    def _advance_to(self, pos: int) -> None:
        self.line += self.text.count("\n", self.i, pos)
        self.i = pos

    def _skip_until(self, terminator: str, start: int) -> None:
        end = self.text.find(terminator, start)
        self._advance_to(self.n if end == -1 else end + len(terminator))

    def _significant(self, kind: str) -> None:
        if kind != "(":
            self.pending_foreach = False
        self.prev = kind

    def _next_char_on_line(self, pos: int) -> str:
        while pos < self.n and self.text[pos] in " \t":
            pos += 1
        return self.text[pos : pos + 2] if pos < self.n else ""

    def _skip_single_quoted(self) -> None:
        pos = self.i + 1
        while pos < self.n:
            if self.text[pos] == "'":
                if self.text[pos + 1 : pos + 2] == "'":
                    pos += 2
                    continue
                break
            pos += 1
        self._advance_to(min(pos + 1, self.n))

    def _skip_double_quoted(self) -> None:
        pos = self.i + 1
        while pos < self.n:
            ch = self.text[pos]
            if ch == "`":
                pos += 2
                continue
            if ch == '"':
                if self.text[pos + 1 : pos + 2] == '"':
                    pos += 2
                    continue
                break
            pos += 1
        self._advance_to(min(pos + 1, self.n))

    def _word(self) -> Optional[KeywordToken]:
        match = _BAREWORD.match(self.text, self.i)
        assert match is not None
        word = match.group(0)
        start, end = match.span()
        lower = word.lower()
        following = self._next_char_on_line(end)

        is_keyword = False
        if lower in KEYWORDS and not following.startswith(":"):
            hashtable_key = following.startswith("=") and following != "=="
            if lower == "in":
                is_keyword = self.prev == "other" and bool(self.parens) and self.parens[-1]
            elif self.prev in _STATEMENT_START and not hashtable_key:
                is_keyword = True

        token = KeywordToken(start, end, word, self.line) if is_keyword else None
        self._advance_to(end)
        self._significant("keyword" if is_keyword else "other")
        if is_keyword and lower == "foreach":
            self.pending_foreach = True
        return token

    def __iter__(self) -> Iterator[KeywordToken]:
        text = self.text
        while self.i < self.n:
            ch = text[self.i]
            two = text[self.i : self.i + 2]

            if ch in " \t\f":
                self.i += 1
            elif ch == "`":
                # Escape or line continuation; neither starts a statement
                self._advance_to(min(self.i + (3 if two == "`\r" else 2), self.n))
            elif ch == "\n":
                self._advance_to(self.i + 1)
                self._significant("newline")
            elif ch == "\r":
                self.i += 1
            elif two == "<#":
                self._skip_until("#>", self.i + 2)
            elif ch == "#":
                end = text.find("\n", self.i)
                self.i = self.n if end == -1 else end
            elif _HERE_STRING_OPEN.match(text, self.i):
                quote = text[self.i + 1]
                match = re.compile(r"^[ \t]*" + quote + "@", re.MULTILINE).search(
                    text, self.i + 2
                )
                self._advance_to(self.n if match is None else match.end())
                self._significant("other")
            elif ch == "'":
                self._skip_single_quoted()
                self._significant("other")
            elif ch == '"':
                self._skip_double_quoted()
                self._significant("other")
            elif ch == "$" and _VARIABLE.match(text, self.i):
                match = _VARIABLE.match(text, self.i)
                assert match is not None
                self._advance_to(match.end())
                self._significant("other")
            elif ch == "-" and _PARAMETER.match(text, self.i):
                match = _PARAMETER.match(text, self.i)
                assert match is not None
                self.i = match.end()
                self._significant("other")
            elif ch == "." and _BAREWORD.match(text, self.i + 1):
                match = _BAREWORD.match(text, self.i + 1)
                assert match is not None
                self.i = match.end()
                self._significant("other")
            elif ch == "@" and _BAREWORD.match(text, self.i + 1):
                # splatted variable
                match = _BAREWORD.match(text, self.i + 1)
                assert match is not None
                self.i = match.end()
                self._significant("other")
            elif ch.isascii() and (ch.isalpha() or ch == "_"):
                token = self._word()
                if token is not None:
                    yield token
            elif ch in "0123456789":
                match = _NUMBER.match(text, self.i)
                assert match is not None
                self.i = match.end()
                self._significant("other")
            elif two in ("&&", "||"):
                self.i += 2
                self._significant(two)
            elif ch == "(":
                self.parens.append(self.pending_foreach)
                self.i += 1
                self.pending_foreach = False
                self._significant("(")
            elif ch == ")":
                if self.parens:
                    self.parens.pop()
                self.i += 1
                self._significant("other")
            elif ch in ";{}=":
                self.i += 1
                self._significant(ch)
            else:
                self.i += 1
                self._significant("other")


def find_miscased_keywords(text: str) -> List[KeywordToken]:
    """Keywords in keyword position that are not all lowercase."""
    return [tok for tok in _Scanner(text) if tok.text != tok.text.lower()]


class KeywordCasingChecker(FileChecker):
    """Reserved keywords (``if``, ``foreach``, ``function``...) must be lowercase."""

    name = "keyword-casing"

    def __init__(self, config: GateConfig):
        self.config = config

    def should_process_file(self, file_path: Path) -> bool:
        return self.config.is_script(file_path)

    def check_file_content(self, file_content: FileContent, fix: bool) -> CheckResult:
        tokens = find_miscased_keywords(file_content.text)
        if not tokens:
            return CheckResult.ok()

        shown = ", ".join(f"'{t.text}' (line {t.line})" for t in tokens[:5])
        if len(tokens) > 5:
            shown += f", and {len(tokens) - 5} more"

        if fix:
            text = file_content.text
            pieces: List[str] = []
            pos = 0
            for tok in tokens:
                pieces.append(text[pos : tok.start])
                pieces.append(tok.text.lower())
                pos = tok.end
            pieces.append(text[pos:])
            file_content.write("".join(pieces))

        return CheckResult.failed(f"keywords must be lowercase: {shown}", fixed=fix)
