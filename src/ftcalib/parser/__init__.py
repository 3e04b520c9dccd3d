"""Parsing of the calibration input language.

Typical use::

    from ftcalib.parser import parse

    info = parse(text)
    for ana in info.analyses:
        ...
"""

import logging
from typing import IO

from ftcalib.parser.grammar import CalibrationParser, parse_text
from ftcalib.parser.scanner import Scanner
from ftcalib.schema import CalibrationInfo

logger = logging.getLogger(__name__)

COMMENT_CHAR = "#"


def strip_comments(text: str) -> str:
    """
    Blank out every line that starts with '#'.

    The lines are emptied rather than removed so that line numbers in parse
    errors still match the original input.
    """
    return "\n".join(
        "" if line.startswith(COMMENT_CHAR) else line
        for line in text.split("\n")
    )


def parse(text: str) -> CalibrationInfo:
    """
    Parse calibration input text into a :class:`CalibrationInfo`.

    Parameters
    ----------
    text : str
        The raw input. Lines beginning with '#' are comments.

    Returns
    -------
    CalibrationInfo
        Analyses, correlations, defaults and copies in input order.

    Raises
    ------
    ParseError
        If the text does not follow the grammar.
    SemanticParseError
        If a construct is well formed but not allowed (NaN values, a bin
        without exactly one central value, a statistical correlation
        coefficient outside [-1, 1]).
    """
    return parse_text(strip_comments(text))


def parse_stream(stream: IO[str]) -> CalibrationInfo:
    """Read a text stream to the end and parse it."""
    info = parse(stream.read())
    logger.debug(f"Read {len(info.analyses)} analyses from {getattr(stream, 'name', 'stream')}")
    return info


__all__ = [
    "CalibrationParser",
    "Scanner",
    "parse",
    "parse_stream",
    "parse_text",
    "strip_comments",
]
