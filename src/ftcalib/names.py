"""Standard display formats for boundaries, bins and analyses.

These strings appear in every error message and are also what the ``--ignore``
filter matches against, so they must stay stable.

Examples
--------
>>> boundary_name(Boundary(variable="pt", low=20, high=30))
'20-pt-30'
>>> bin_name([Boundary(variable="pt", low=20, high=30),
...           Boundary(variable="abseta", low=0, high=2.5)])
'0-abseta-2.5:20-pt-30'
"""

from typing import Iterable, Union

from ftcalib.schema import (
    AnalysisCorrelation,
    AnalysisKeyModel,
    BinCorrelation,
    Boundary,
    CalibrationBin,
)

BinLike = Union[CalibrationBin, BinCorrelation, Iterable[Boundary]]


def format_number(value: float) -> str:
    """Shortest round-trippable text for a boundary value (``100.0`` -> ``'100'``)."""
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


def boundary_name(boundary: Boundary) -> str:
    return f"{format_number(boundary.low)}-{boundary.variable}-{format_number(boundary.high)}"


def bin_name(cbin: BinLike) -> str:
    """Boundary names sorted by axis and joined with ':'."""
    spec = getattr(cbin, "bin_spec", cbin)
    return ":".join(boundary_name(b) for b in sorted(spec))


def analysis_full_name(ana: AnalysisKeyModel) -> str:
    return "-".join(ana.identity)


def correlation_full_name(cor: AnalysisCorrelation) -> str:
    return "-".join(
        (
            cor.analysis1_name,
            cor.analysis2_name,
            cor.flavor,
            cor.tagger,
            cor.operating_point,
            cor.jet_algorithm,
        )
    )


def bin_identity(identity: Iterable[str], cbin: BinLike) -> str:
    """``ignore_format`` for an analysis given only by its identity key."""
    return f"{'-'.join(identity)}:{bin_name(cbin)}"


def ignore_format(owner: Union[AnalysisKeyModel, AnalysisCorrelation], cbin: BinLike) -> str:
    """
    The ``analysis:bin`` string accepted by the ignore filter.

    Parameters
    ----------
    owner : AnalysisKeyModel or AnalysisCorrelation
        The analysis (or correlation block) the bin belongs to.
    cbin : CalibrationBin, BinCorrelation or iterable of Boundary
        The bin.
    """
    if isinstance(owner, AnalysisCorrelation):
        prefix = correlation_full_name(owner)
    else:
        prefix = analysis_full_name(owner)
    return f"{prefix}:{bin_name(cbin)}"


def combination_group_key(ana: AnalysisKeyModel, include_jet: bool = False) -> str:
    """Key of the combination group: ``flavor:tagger:op`` (``:jet`` optional)."""
    parts = [ana.flavor, ana.tagger, ana.operating_point]
    if include_jet:
        parts.append(ana.jet_algorithm)
    return ":".join(parts)
