"""Recursive-descent grammar for calibration input files.

One method per production. The grammar, written loosely::

    file        := (analysis | correlation | default | copy)* EOF
    analysis    := 'Analysis' '(' name x5 ')' '{' (bin | meta_data_s | meta_data)* '}'
    bin         := ('bin' | 'exbin') '(' boundary (',' boundary)* ')'
                   '{' (sys | usys | central_value | meta_data)* '}'
    boundary    := number '<' variable '<' number
    sys         := ('sys' | 'usys') '(' name ',' error ')'
    error       := number '%'?
    central_value := 'central_value' '(' number ',' error ')'
    meta_data   := 'meta_data' '(' name (',' number)+ ')'            # analysis level
                 | 'meta_data' '(' name ',' number (',' number)? ')' # bin level, value + error
    meta_data_s := 'meta_data_s' '(' name ',' name ')'
    correlation := 'Correlation' '(' name x6 ')' '{' cor_bin* '}'
    cor_bin     := 'bin' '(' boundary (',' boundary)* ')' '{' ('statistical' '(' number ')')? '}'
    default     := 'Default' '(' name x5 ')'
    copy        := 'Copy' '(' name x5 ')' '{' ('Analysis' '(' name x5 ')')* '}'

Names are either double-quoted (any character but the quote) or an unquoted
run of name characters with single embedded spaces.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Tuple

from pydantic import ValidationError

from ftcalib.errors import SemanticParseError
from ftcalib.parser.scanner import Scanner
from ftcalib.parser.staging import (
    AliasStaging,
    AnalysisStaging,
    BinStaging,
    CorrelationBinStaging,
    CorrelationStaging,
    ErrorMagnitude,
    StagedCentralValue,
    StagedMetaData,
    StagedSystematic,
)
from ftcalib.schema import (
    AliasAnalysis,
    AnalysisCorrelation,
    BinCorrelation,
    Boundary,
    CalibrationAnalysis,
    CalibrationBin,
    CalibrationInfo,
    DefaultAnalysis,
)

logger = logging.getLogger(__name__)

TOP_LEVEL_BLOCKS = "Analysis, Correlation, Default or Copy block"


class CalibrationParser:
    """
    Parser for one calibration input text.

    A parser instance is single use: construct it with the text and call
    :meth:`parse`. Any failure raises a :class:`~ftcalib.errors.ParseError`
    (or its :class:`~ftcalib.errors.SemanticParseError` subclass) and no
    partial result is returned.

    Parameters
    ----------
    text : str
        Input text with comment lines already removed.
    """

    def __init__(self, text: str):
        self.scanner = Scanner(text)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @contextmanager
    def _semantic_checks(self, start: int) -> Iterator[None]:
        """Attach the position of the enclosing construct to semantic failures."""
        s = self.scanner
        try:
            yield
        except SemanticParseError as e:
            if e.snippet:
                raise
            raise SemanticParseError(
                f"{e} (line {s.line_number(start)})",
                expected=s.current_rule or "",
                snippet=s.snippet(start),
                position=start,
            ) from e
        except ValidationError as e:
            raise SemanticParseError(
                f"Invalid {s.current_rule or 'input'} at line {s.line_number(start)}: {e}",
                expected=s.current_rule or "",
                snippet=s.snippet(start),
                position=start,
            ) from e

    def _header(self, count: int) -> Tuple[str, ...]:
        """``'(' name (',' name){count-1} ')'``"""
        s = self.scanner
        s.expect("(")
        names = [s.name("name")]
        for _ in range(count - 1):
            s.expect(",")
            names.append(s.name("name"))
        s.expect(")")
        return tuple(names)

    # -------------------------------------------------------------------------
    # Leaf productions
    # -------------------------------------------------------------------------

    def boundary(self) -> Boundary:
        s = self.scanner
        start = s.pos
        with s.rule("Boundary"):
            low = s.float("lower bin boundary")
            s.expect("<")
            variable = s.variable()
            s.expect("<")
            high = s.float("upper bin boundary")
            with self._semantic_checks(start):
                return Boundary(variable=variable, low=low, high=high)

    def boundary_list(self) -> List[Boundary]:
        s = self.scanner
        with s.rule("List of Bin Boundaries"):
            s.expect("(")
            spec = [self.boundary()]
            while s.accept(","):
                spec.append(self.boundary())
            s.expect(")")
        return spec

    def error_magnitude(self) -> ErrorMagnitude:
        s = self.scanner
        start = s.pos
        value = s.float("error")
        relative = s.accept("%")
        with self._semantic_checks(start):
            return ErrorMagnitude(value, relative)

    def systematic_error(self, uncorrelated: bool) -> StagedSystematic:
        s = self.scanner
        with s.rule("Systematic Error"):
            s.expect("(")
            name = s.name("systematic error name")
            s.expect(",")
            magnitude = self.error_magnitude()
            s.expect(")")
        return StagedSystematic(name, magnitude, uncorrelated)

    def central_value(self) -> StagedCentralValue:
        s = self.scanner
        with s.rule("Central Value"):
            s.expect("(")
            start = s.pos
            value = s.float("central value")
            s.expect(",")
            error = self.error_magnitude()
            s.expect(")")
            with self._semantic_checks(start):
                return StagedCentralValue(value, error)

    def meta_data(self, allow_error: bool) -> StagedMetaData:
        """
        ``meta_data`` in its two forms.

        Bin-level entries carry one value and an optional error; analysis-level
        entries carry one or more values and no error.
        """
        s = self.scanner
        with s.rule("Meta data"):
            s.expect("(")
            name = s.name("meta data name")
            s.expect(",")
            values = [s.float("meta data value")]
            error = 0.0
            if allow_error:
                if s.accept(","):
                    error = s.float("meta data error")
            else:
                while s.accept(","):
                    values.append(s.float("meta data value"))
            s.expect(")")
        return StagedMetaData(name, tuple(values), error)

    def meta_data_string(self) -> Tuple[str, str]:
        s = self.scanner
        with s.rule("Meta data String"):
            s.expect("(")
            name = s.name("meta data name")
            s.expect(",")
            value = s.name("meta data value")
            s.expect(")")
        return name, value

    # -------------------------------------------------------------------------
    # Blocks
    # -------------------------------------------------------------------------

    def bin(self, is_extended: bool) -> CalibrationBin:
        s = self.scanner
        start = s.pos
        with s.rule("Bin"):
            staging = BinStaging(self.boundary_list(), is_extended=is_extended)
            s.expect("{")
            while True:
                if s.accept_keyword("sys"):
                    staging.systematics.append(self.systematic_error(False))
                elif s.accept_keyword("usys"):
                    staging.systematics.append(self.systematic_error(True))
                elif s.accept_keyword("central_value"):
                    staging.central_values.append(self.central_value())
                elif s.accept_keyword("meta_data"):
                    staging.metadata.append(self.meta_data(allow_error=True))
                elif s.accept("}"):
                    break
                else:
                    raise s.error("sys, usys, central_value, meta_data or '}'")
            with self._semantic_checks(start):
                return staging.finalize()

    def analysis(self) -> CalibrationAnalysis:
        s = self.scanner
        start = s.pos
        with s.rule("Analysis"):
            staging = AnalysisStaging(self._header(5))
            s.expect("{")
            while True:
                if s.accept_keyword("bin"):
                    staging.bins.append(self.bin(is_extended=False))
                elif s.accept_keyword("exbin"):
                    staging.bins.append(self.bin(is_extended=True))
                elif s.accept_keyword("meta_data_s"):
                    name, value = self.meta_data_string()
                    staging.metadata_s[name] = value
                elif s.accept_keyword("meta_data"):
                    md = self.meta_data(allow_error=False)
                    staging.metadata[md.name] = md.values
                elif s.accept("}"):
                    break
                else:
                    raise s.error("bin, exbin, meta_data, meta_data_s or '}'")
            with self._semantic_checks(start):
                return staging.finalize()

    def correlation_bin(self) -> BinCorrelation:
        s = self.scanner
        start = s.pos
        with s.rule("Correlation Bin"):
            staging = CorrelationBinStaging(self.boundary_list())
            s.expect("{")
            if s.accept_keyword("statistical"):
                s.expect("(")
                value_pos = s.pos
                value = s.float("statistical correlation coefficient")
                with self._semantic_checks(value_pos):
                    staging.set_statistical(value)
                s.expect(")")
            s.expect("}")
            with self._semantic_checks(start):
                return staging.finalize()

    def correlation(self) -> AnalysisCorrelation:
        s = self.scanner
        start = s.pos
        with s.rule("Correlation"):
            staging = CorrelationStaging(self._header(6))
            s.expect("{")
            while s.accept_keyword("bin"):
                staging.bins.append(self.correlation_bin())
            if not s.accept("}"):
                raise s.error("bin or '}'")
            with self._semantic_checks(start):
                return staging.finalize()

    def default(self) -> DefaultAnalysis:
        s = self.scanner
        with s.rule("DefaultAnalysis"):
            name, flavor, tagger, op, jet = self._header(5)
        return DefaultAnalysis(
            name=name,
            flavor=flavor,
            tagger=tagger,
            operating_point=op,
            jet_algorithm=jet,
        )

    def copy(self) -> AliasAnalysis:
        s = self.scanner
        start = s.pos
        with s.rule("AliasAnalysis"):
            staging = AliasStaging(self._header(5))
            s.expect("{")
            while s.accept_keyword("Analysis"):
                staging.targets.append(self._header(5))
            if not s.accept("}"):
                raise s.error("Analysis or '}'")
            with self._semantic_checks(start):
                return staging.finalize()

    # -------------------------------------------------------------------------
    # File
    # -------------------------------------------------------------------------

    def parse(self) -> CalibrationInfo:
        """Parse the whole text. Trailing unrecognised content is an error."""
        s = self.scanner
        analyses: List[CalibrationAnalysis] = []
        correlations: List[AnalysisCorrelation] = []
        defaults: List[DefaultAnalysis] = []
        aliases: List[AliasAnalysis] = []
        with s.rule("Calibration Analysis File"):
            while not s.at_end():
                if s.accept_keyword("Analysis"):
                    analyses.append(self.analysis())
                elif s.accept_keyword("Correlation"):
                    correlations.append(self.correlation())
                elif s.accept_keyword("Default"):
                    defaults.append(self.default())
                elif s.accept_keyword("Copy"):
                    aliases.append(self.copy())
                else:
                    raise s.error(f"{TOP_LEVEL_BLOCKS} or end of input")

        logger.debug(
            f"Parsed {len(analyses)} analyses, {len(correlations)} correlations, "
            f"{len(defaults)} defaults and {len(aliases)} copies"
        )
        return CalibrationInfo(
            analyses=analyses,
            correlations=correlations,
            defaults=defaults,
            aliases=aliases,
        )


def parse_text(text: str) -> CalibrationInfo:
    """Parse already comment-stripped text."""
    return CalibrationParser(text).parse()
