"""Exception types raised while parsing and validating calibration inputs.

Every failure in this package derives from :class:`CalibrationError`, which is
itself a ``ValueError`` so callers that only care about "bad input" can catch
that. None of these are retried: they describe properties of the input text.
"""

from typing import Optional


class CalibrationError(ValueError):
    """Base class for all calibration input problems."""


# =============================================================================
# Parsing
# =============================================================================

class ParseError(CalibrationError):
    """
    The input text does not match the grammar.

    Attributes
    ----------
    expected : str
        Name of the grammar construct that was expected at the failure point.
    snippet : str
        Unconsumed input text starting at the failure point.
    position : int
        Character offset of the failure point in the parsed text.
    """

    def __init__(self, expected: str, snippet: str = "", position: int = 0,
                 message: Optional[str] = None):
        self.expected = expected
        self.snippet = snippet
        self.position = position
        if message is None:
            message = f'Error! Expecting {expected} here: "{snippet}"'
        super().__init__(message)


class SemanticParseError(ParseError):
    """Syntactically valid input that breaks a rule checked while parsing."""

    def __init__(self, message: str, expected: str = "", snippet: str = "",
                 position: int = 0):
        super().__init__(expected, snippet, position, message=message)


# =============================================================================
# Binning
# =============================================================================

class DuplicateBinError(CalibrationError):
    """Two bins of one analysis have the same bin specification."""


class BinningDefectError(CalibrationError):
    """
    A thin bin, duplicate interval, gap or overlap along a single axis.

    ``low_bin_high`` is the upper edge of the lower interval and
    ``high_bin_low`` the lower edge of the upper interval at the defect.
    """

    def __init__(self, low_bin_high: float, high_bin_low: float, message: str):
        self.low_bin_high = low_bin_high
        self.high_bin_low = high_bin_low
        super().__init__(message)


class BinBoundaryError(CalibrationError):
    """All binning defects found in one analysis, collected into one message."""


class UnknownAxisError(CalibrationError, KeyError):
    """A partition was asked for an axis it does not have."""

    def __str__(self):
        return str(self.args[0]) if self.args else ""


# =============================================================================
# Cross-analysis checks
# =============================================================================

class CrossAnalysisInconsistencyError(CalibrationError):
    """Axis partitions of analyses in one combination group do not line up."""


class CorrelationFlagConflictError(CalibrationError):
    """A systematic is correlated in some analyses and uncorrelated in others."""


class OrthogonalityError(CalibrationError):
    """Two bins overlap on every shared axis (bin-by-bin combination only)."""


class UnknownReferenceError(CalibrationError):
    """A correlation refers to an analysis/bin that does not exist."""
