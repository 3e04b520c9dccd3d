"""Staging records filled in by the grammar while a construct is open.

Each block of the input (bin, analysis, correlation, copy) is collected into
one of these mutable records and only turned into its read-only schema model
when the closing ``}`` has been read. This is what lets a bin list its
systematic errors before its central value: relative errors are resolved in
:meth:`BinStaging.finalize`, once the central value is known.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ftcalib.errors import SemanticParseError
from ftcalib.schema import (
    AliasAnalysis,
    AnalysisCorrelation,
    BinCorrelation,
    Boundary,
    CalibrationAnalysis,
    CalibrationBin,
    CopyTarget,
    SystematicError,
)

# (name, flavor, tagger, operating point, jet algorithm) as read from a header
Header = Tuple[str, str, str, str, str]


@dataclass(frozen=True)
class ErrorMagnitude:
    """An error as written: ``0.83`` is absolute, ``0.83%`` is relative."""

    value: float
    relative: bool = False

    def __post_init__(self):
        if math.isnan(self.value):
            raise SemanticParseError("error value is NaN during input - not legal!")

    def resolve(self, central_value: float) -> float:
        """Absolute size of this error for a bin with ``central_value``."""
        if self.relative:
            return self.value / 100.0 * central_value
        return self.value


@dataclass(frozen=True)
class StagedSystematic:
    name: str
    magnitude: ErrorMagnitude
    uncorrelated: bool = False


@dataclass(frozen=True)
class StagedCentralValue:
    value: float
    error: ErrorMagnitude

    def __post_init__(self):
        if math.isnan(self.value):
            raise SemanticParseError(
                "Unable to parse a central value for a bin that is NaN"
            )

    @property
    def statistical_error(self) -> float:
        return self.error.resolve(self.value)


@dataclass(frozen=True)
class StagedMetaData:
    """A ``meta_data`` entry; ``error`` is only set by the bin-level form."""

    name: str
    values: Tuple[float, ...]
    error: float = 0.0


@dataclass
class BinStaging:
    bin_spec: List[Boundary]
    is_extended: bool = False
    systematics: List[StagedSystematic] = field(default_factory=list)
    central_values: List[StagedCentralValue] = field(default_factory=list)
    metadata: List[StagedMetaData] = field(default_factory=list)

    def finalize(self) -> CalibrationBin:
        """
        Build the bin, converting relative systematic errors to absolute ones.

        Raises
        ------
        SemanticParseError
            If the bin does not contain exactly one central value.
        """
        if len(self.central_values) != 1:
            raise SemanticParseError(
                "One and only one central value must be present in each bin"
            )
        cv = self.central_values[0]
        return CalibrationBin(
            bin_spec=tuple(self.bin_spec),
            central_value=cv.value,
            central_value_statistical_error=cv.statistical_error,
            systematic_errors=tuple(
                SystematicError(
                    name=s.name,
                    value=s.magnitude.resolve(cv.value),
                    uncorrelated=s.uncorrelated,
                )
                for s in self.systematics
            ),
            metadata={m.name: (m.values[0], m.error) for m in self.metadata},
            is_extended=self.is_extended,
        )


@dataclass
class AnalysisStaging:
    header: Header
    bins: List[CalibrationBin] = field(default_factory=list)
    metadata: Dict[str, Tuple[float, ...]] = field(default_factory=dict)
    metadata_s: Dict[str, str] = field(default_factory=dict)

    def finalize(self) -> CalibrationAnalysis:
        name, flavor, tagger, op, jet = self.header
        return CalibrationAnalysis(
            name=name,
            flavor=flavor,
            tagger=tagger,
            operating_point=op,
            jet_algorithm=jet,
            bins=tuple(self.bins),
            metadata=dict(self.metadata),
            metadata_s=dict(self.metadata_s),
        )


@dataclass
class CorrelationBinStaging:
    bin_spec: List[Boundary]
    statistical: Optional[float] = None

    def set_statistical(self, value: float) -> None:
        if not abs(value) <= 1.0:
            raise SemanticParseError(
                f"The statistical correlation coeff '{value}' is larger than one! Not allowed!"
            )
        self.statistical = value

    def finalize(self) -> BinCorrelation:
        return BinCorrelation(
            bin_spec=tuple(self.bin_spec),
            statistical_correlation=self.statistical,
        )


@dataclass
class CorrelationStaging:
    # analysis1, analysis2, flavor, tagger, op, jet
    header: Tuple[str, str, str, str, str, str]
    bins: List[BinCorrelation] = field(default_factory=list)

    def finalize(self) -> AnalysisCorrelation:
        a1, a2, flavor, tagger, op, jet = self.header
        return AnalysisCorrelation(
            analysis1_name=a1,
            analysis2_name=a2,
            flavor=flavor,
            tagger=tagger,
            operating_point=op,
            jet_algorithm=jet,
            bins=tuple(self.bins),
        )


@dataclass
class AliasStaging:
    header: Header
    targets: List[Header] = field(default_factory=list)

    def finalize(self) -> AliasAnalysis:
        name, flavor, tagger, op, jet = self.header
        return AliasAnalysis(
            name=name,
            flavor=flavor,
            tagger=tagger,
            operating_point=op,
            jet_algorithm=jet,
            copy_targets=tuple(
                CopyTarget(
                    name=t[0],
                    flavor=t[1],
                    tagger=t[2],
                    operating_point=t[3],
                    jet_algorithm=t[4],
                )
                for t in self.targets
            ),
        )
