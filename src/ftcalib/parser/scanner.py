"""Character-level scanning for the calibration input grammar.

The :class:`Scanner` owns the input text and the current offset. It skips
whitespace between tokens, recognises the lexical tokens of the language
(numbers, names, keywords, punctuation) and builds :class:`ParseError`
instances that point at the failure position.
"""

import re
from contextlib import contextmanager
from typing import Iterator, List, Optional

from ftcalib.errors import ParseError

SNIPPET_LENGTH = 60

# Characters allowed in an unquoted name
NAME_CHARS = r"\-_a-zA-Z0-9+:;.*/!=<>\[\]"

_WHITESPACE = re.compile(r"\s+")
_FLOAT = re.compile(
    r"[+-]?(?:nan|inf(?:inity)?|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)",
    re.IGNORECASE,
)
_QUOTED_NAME = re.compile(r'"([^"]*)"')
_UNQUOTED_NAME = re.compile(rf"[{NAME_CHARS}]+(?: [{NAME_CHARS}]+)*")
# Axis names sit between two '<' so they cannot use the full name alphabet
_VARIABLE_NAME = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
_WORD_CHAR = re.compile(r"[A-Za-z0-9_]")


class Scanner:
    """
    Cursor over the input text with whitespace skipping between tokens.

    Parameters
    ----------
    text : str
        The full input, comment lines already removed.
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self._rules: List[str] = []

    # -------------------------------------------------------------------------
    # Position helpers
    # -------------------------------------------------------------------------

    def skip_ws(self) -> None:
        m = _WHITESPACE.match(self.text, self.pos)
        if m:
            self.pos = m.end()

    def at_end(self) -> bool:
        self.skip_ws()
        return self.pos >= len(self.text)

    def line_number(self, pos: Optional[int] = None) -> int:
        """1-based line of ``pos`` (default: current position)."""
        if pos is None:
            pos = self.pos
        return self.text.count("\n", 0, pos) + 1

    def snippet(self, pos: Optional[int] = None) -> str:
        if pos is None:
            pos = self.pos
        return self.text[pos:pos + SNIPPET_LENGTH]

    @contextmanager
    def rule(self, name: str) -> Iterator[None]:
        """Name the production being parsed, for error messages."""
        self._rules.append(name)
        try:
            yield
        finally:
            self._rules.pop()

    @property
    def current_rule(self) -> Optional[str]:
        return self._rules[-1] if self._rules else None

    def error(self, expected: str, pos: Optional[int] = None) -> ParseError:
        """Build (not raise) a ParseError for ``expected`` at ``pos``."""
        if pos is None:
            pos = self.pos
        if self.current_rule and self.current_rule not in expected:
            expected = f"{expected} in {self.current_rule}"
        return ParseError(
            expected,
            snippet=self.snippet(pos),
            position=pos,
            message=(
                f"Error! Expecting {expected} at line {self.line_number(pos)} "
                f'here: "{self.snippet(pos)}"'
            ),
        )

    # -------------------------------------------------------------------------
    # Tokens
    # -------------------------------------------------------------------------

    def accept(self, literal: str) -> bool:
        """Consume ``literal`` if it is next; report whether it was."""
        self.skip_ws()
        if self.text.startswith(literal, self.pos):
            self.pos += len(literal)
            return True
        return False

    def expect(self, literal: str) -> None:
        if not self.accept(literal):
            raise self.error(f"'{literal}'")

    def accept_keyword(self, word: str) -> bool:
        """
        Consume ``word`` only when it is not the prefix of a longer word.

        ``meta_data`` must not match the start of ``meta_data_s``.
        """
        self.skip_ws()
        end = self.pos + len(word)
        if not self.text.startswith(word, self.pos):
            return False
        if end < len(self.text) and _WORD_CHAR.match(self.text, end):
            return False
        self.pos = end
        return True

    def float(self, what: str = "number") -> float:
        self.skip_ws()
        m = _FLOAT.match(self.text, self.pos)
        if not m:
            raise self.error(what)
        self.pos = m.end()
        return float(m.group(0))

    def name(self, what: str = "name") -> str:
        """A double-quoted string or an unquoted run of name characters."""
        self.skip_ws()
        m = _QUOTED_NAME.match(self.text, self.pos)
        if m:
            self.pos = m.end()
            return m.group(1)
        m = _UNQUOTED_NAME.match(self.text, self.pos)
        if not m:
            raise self.error(what)
        self.pos = m.end()
        return m.group(0)

    def variable(self) -> str:
        self.skip_ws()
        m = _VARIABLE_NAME.match(self.text, self.pos)
        if not m:
            raise self.error("variable name")
        self.pos = m.end()
        return m.group(0)
