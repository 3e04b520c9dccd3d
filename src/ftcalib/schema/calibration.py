"""
Pydantic models for parsed calibration inputs.

The parser produces a :class:`CalibrationInfo`; everything below it is
read-only. Relative systematic errors have already been turned into absolute
values by the time a :class:`CalibrationBin` exists.
"""

import math
from collections import Counter
from typing import Annotated, Dict, List, Optional, Tuple

from pydantic import Field, field_validator, model_validator

from ftcalib.schema.base import AnalysisKeyModel, FrozenModel


def _not_nan(value: float, what: str) -> float:
    if math.isnan(value):
        raise ValueError(f"{what} is NaN during input - not legal!")
    return value


class Boundary(FrozenModel):
    """
    One axis interval ``[low, high)`` tagged with its variable name.

    Ordering is by (variable, low, high), so a sorted list of boundaries is
    grouped by axis.
    """

    variable: Annotated[str, Field(min_length=1, description="Axis name, e.g. 'pt'")]
    low: Annotated[float, Field(description="Lower edge (inclusive)")]
    high: Annotated[float, Field(description="Upper edge (exclusive)")]

    @field_validator("low", "high")
    @classmethod
    def validate_edge(cls, v: float) -> float:
        return _not_nan(v, "bin boundary")

    @property
    def sort_key(self) -> Tuple[str, float, float]:
        return (self.variable, self.low, self.high)

    @property
    def interval(self) -> Tuple[float, float]:
        return (self.low, self.high)

    def __lt__(self, other: "Boundary") -> bool:
        return self.sort_key < other.sort_key

    def __le__(self, other: "Boundary") -> bool:
        return self.sort_key <= other.sort_key

    def __gt__(self, other: "Boundary") -> bool:
        return self.sort_key > other.sort_key

    def __ge__(self, other: "Boundary") -> bool:
        return self.sort_key >= other.sort_key


class SystematicError(FrozenModel):
    """A named systematic uncertainty, already in absolute units."""

    name: str
    value: float
    uncorrelated: Annotated[
        bool,
        Field(default=False, description="True when declared with 'usys'."),
    ]

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: float) -> float:
        return _not_nan(v, "systematic error value")


def _check_unique_axes(spec: Tuple[Boundary, ...]) -> None:
    counts = Counter(b.variable for b in spec)
    repeated = sorted(name for name, n in counts.items() if n > 1)
    if repeated:
        raise ValueError(
            f"Axis '{repeated[0]}' appears more than once in a single bin specification"
        )


class CalibrationBin(FrozenModel):
    """
    One N-dimensional cell of an analysis.

    Attributes
    ----------
    bin_spec : Tuple[Boundary, ...]
        One boundary per axis, in the order they were written.
    central_value, central_value_statistical_error : float
        The measured value and its statistical error.
    systematic_errors : Tuple[SystematicError, ...]
        Named systematic errors, names unique within the bin.
    metadata : Dict[str, Tuple[float, float]]
        Bin-level ``meta_data`` entries as (value, error).
    is_extended : bool
        True for ``exbin`` blocks (extrapolated rather than measured).
    """

    bin_spec: Annotated[Tuple[Boundary, ...], Field(min_length=1)]
    central_value: float
    central_value_statistical_error: float
    systematic_errors: Annotated[Tuple[SystematicError, ...], Field(default=())]
    metadata: Annotated[Dict[str, Tuple[float, float]], Field(default_factory=dict)]
    is_extended: Annotated[bool, Field(default=False)]

    @field_validator("central_value")
    @classmethod
    def validate_central_value(cls, v: float) -> float:
        return _not_nan(v, "central value")

    @field_validator("central_value_statistical_error")
    @classmethod
    def validate_statistical_error(cls, v: float) -> float:
        return _not_nan(v, "central value error")

    @model_validator(mode="after")
    def validate_bin(self) -> "CalibrationBin":
        """Axis names and systematic error names must be unique within the bin."""
        _check_unique_axes(self.bin_spec)
        counts = Counter(e.name for e in self.systematic_errors)
        repeated = sorted(name for name, n in counts.items() if n > 1)
        if repeated:
            raise ValueError(
                f"Systematic error '{repeated[0]}' appears more than once in one bin"
            )
        return self

    @property
    def spec_key(self) -> Tuple[Boundary, ...]:
        """The bin spec ordered by axis, for comparing bins written differently."""
        return tuple(sorted(self.bin_spec))

    def boundary_for(self, variable: str) -> Optional[Boundary]:
        """Return this bin's boundary along ``variable``, or None."""
        for b in self.bin_spec:
            if b.variable == variable:
                return b
        return None

    def systematic(self, name: str) -> Optional[SystematicError]:
        for e in self.systematic_errors:
            if e.name == name:
                return e
        return None


class CalibrationAnalysis(AnalysisKeyModel):
    """A single calibration measurement and its bins."""

    bins: Annotated[Tuple[CalibrationBin, ...], Field(default=())]
    metadata: Annotated[
        Dict[str, Tuple[float, ...]],
        Field(default_factory=dict, description="Analysis-level meta_data"),
    ]
    metadata_s: Annotated[
        Dict[str, str],
        Field(default_factory=dict, description="Analysis-level meta_data_s"),
    ]

    def axis_names(self, ignore_extended: bool = False) -> List[str]:
        """Sorted distinct axis variables used by the (optionally non-extended) bins."""
        names = {
            b.variable
            for cbin in self.bins
            if not (ignore_extended and cbin.is_extended)
            for b in cbin.bin_spec
        }
        return sorted(names)


class BinCorrelation(FrozenModel):
    """One bin entry of a ``Correlation`` block."""

    bin_spec: Annotated[Tuple[Boundary, ...], Field(min_length=1)]
    statistical_correlation: Annotated[
        Optional[float],
        Field(
            default=None,
            ge=-1.0,
            le=1.0,
            description="Statistical correlation coefficient, if one was given.",
        ),
    ]

    @model_validator(mode="after")
    def validate_spec(self) -> "BinCorrelation":
        _check_unique_axes(self.bin_spec)
        return self

    @property
    def has_statistical_correlation(self) -> bool:
        return self.statistical_correlation is not None


class AnalysisCorrelation(FrozenModel):
    """Correlation declared between two analyses of the same group."""

    analysis1_name: str
    analysis2_name: str
    flavor: str
    tagger: str
    operating_point: str
    jet_algorithm: str
    bins: Annotated[Tuple[BinCorrelation, ...], Field(default=())]

    def identity_for(self, analysis_name: str) -> Tuple[str, str, str, str, str]:
        return (
            analysis_name,
            self.flavor,
            self.tagger,
            self.operating_point,
            self.jet_algorithm,
        )


class DefaultAnalysis(AnalysisKeyModel):
    """Marks the analysis to use by default for its group."""


class CopyTarget(AnalysisKeyModel):
    """One ``Analysis(...)`` header inside a ``Copy`` block."""


class AliasAnalysis(AnalysisKeyModel):
    """Copy an existing analysis to one or more other identity keys."""

    copy_targets: Annotated[Tuple[CopyTarget, ...], Field(default=())]


class CalibrationInfo(FrozenModel):
    """Everything found in one or more parsed inputs."""

    analyses: Annotated[List[CalibrationAnalysis], Field(default_factory=list)]
    correlations: Annotated[List[AnalysisCorrelation], Field(default_factory=list)]
    defaults: Annotated[List[DefaultAnalysis], Field(default_factory=list)]
    aliases: Annotated[List[AliasAnalysis], Field(default_factory=list)]

    def __add__(self, other: "CalibrationInfo") -> "CalibrationInfo":
        """Concatenate two parse results, keeping order."""
        return CalibrationInfo(
            analyses=[*self.analyses, *other.analyses],
            correlations=[*self.correlations, *other.correlations],
            defaults=[*self.defaults, *other.defaults],
            aliases=[*self.aliases, *other.aliases],
        )
