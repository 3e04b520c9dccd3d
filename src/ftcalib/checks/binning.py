"""Binning checks that compare several analyses.

Two modes are supported. For a regular combination the analyses of a group
must share compatible axis partitions (:func:`check_consistent_boundaries`).
For a bin-by-bin combination every distinct bin is fitted on its own, so no
two bins may overlap (:func:`check_orthogonal_bins`).
"""

import logging
from itertools import combinations
from typing import Iterable, List, Optional, Sequence, Tuple

from ftcalib.binning import BinBoundaries
from ftcalib.errors import CrossAnalysisInconsistencyError, OrthogonalityError
from ftcalib.filters import list_all_bins
from ftcalib.names import bin_name, format_number
from ftcalib.schema import Boundary, CalibrationAnalysis

logger = logging.getLogger(__name__)

Interval = Tuple[float, float]


def intervals_overlap(a: Interval, b: Interval) -> bool:
    """True when ``[a0, a1)`` and ``[b0, b1)`` share any points."""
    return a[0] < b[1] and b[0] < a[1]


def partially_overlaps(test: Interval, reference: Interval) -> bool:
    """
    True when the intervals overlap without one containing the other.

    An interval that straddles an edge of ``reference`` is the only way two
    partitions can fail to line up.
    """
    if not intervals_overlap(test, reference):
        return False
    test_inside = reference[0] <= test[0] and test[1] <= reference[1]
    reference_inside = test[0] <= reference[0] and reference[1] <= test[1]
    return not (test_inside or reference_inside)


def find_misaligned_bin(
    test_bins: Sequence[Interval], reference_bins: Sequence[Interval]
) -> Optional[Interval]:
    """First interval of ``test_bins`` that cuts across a reference interval."""
    for tbin in test_bins:
        if tbin in reference_bins:
            continue
        if any(partially_overlaps(tbin, rbin) for rbin in reference_bins):
            return tbin
    return None


def check_consistent_boundaries(boundaries: Sequence[BinBoundaries]) -> None:
    """
    Make sure the axis partitions of analyses to be combined line up.

    Every partition must have the same axes as the first one. Along each axis,
    an interval of one analysis that is not identical to an interval of an
    earlier analysis may be finer or coarser than the intervals it overlaps,
    but must not cut across any of their edges. Bins one analysis has and
    another lacks are fine.

    Parameters
    ----------
    boundaries : Sequence[BinBoundaries]
        Partitions of the analyses in one combination group.

    Raises
    ------
    CrossAnalysisInconsistencyError
        On differing axis sets or an interval that partially overlaps another
        analysis' interval.
    """
    if len(boundaries) <= 1:
        return

    proto = boundaries[0]
    proto_names = set(proto.axis_names())
    for current in boundaries[1:]:
        if current.size != proto.size:
            raise CrossAnalysisInconsistencyError(
                "Analyses to combine don't have identical binning: number of binning axes differs"
            )
        for name in current.axis_names():
            if name not in proto_names:
                raise CrossAnalysisInconsistencyError(
                    f"Not all analyses have a bin axis '{name}'."
                )

    for reference, current in combinations(boundaries, 2):
        for name in current.axis_names():
            bad = find_misaligned_bin(current.bins(name), reference.bins(name))
            if bad is not None:
                raise CrossAnalysisInconsistencyError(
                    f"Bins in '{name}' have inconsistent boundaries "
                    f"({format_number(bad[0])}-{name}-{format_number(bad[1])})"
                )
    logger.debug(f"Binning of {len(boundaries)} analyses is consistent")


def _boundary_for(spec: Iterable[Boundary], variable: str) -> Optional[Boundary]:
    for b in spec:
        if b.variable == variable:
            return b
    return None


def no_overlap(b1: Boundary, b2: Boundary) -> bool:
    """True when the boundaries are on different axes or do not overlap."""
    if b1.variable != b2.variable:
        return True
    return b1.low >= b2.high or b2.low >= b1.high


def is_orthogonal(spec1: Iterable[Boundary], spec2: Iterable[Boundary]) -> bool:
    """True when some axis shared by both specs has non-overlapping intervals."""
    spec2 = list(spec2)
    for b1 in spec1:
        b2 = _boundary_for(spec2, b1.variable)
        if b2 is not None and no_overlap(b1, b2):
            return True
    return False


def check_orthogonal_bins(analyses: Sequence[CalibrationAnalysis]) -> None:
    """
    For a bin-by-bin combination: no two distinct bins may overlap.

    Every pair of distinct bin specifications across ``analyses`` must be
    disjoint along at least one shared axis. Identical specifications (the
    same bin measured by several analyses) are what gets combined and are
    not compared.

    Raises
    ------
    OrthogonalityError
        Naming both offending bins.
    """
    all_bins: List = sorted(list_all_bins(analyses), key=lambda spec: bin_name(spec))
    for spec1, spec2 in combinations(all_bins, 2):
        if not is_orthogonal(spec1, spec2):
            raise OrthogonalityError(
                "The following binning boundaries are not compatible in a bin-by-bin fit:\n"
                f"  - {bin_name(spec1)}\n"
                f"  - {bin_name(spec2)}"
            )
    logger.debug(f"{len(all_bins)} distinct bins are pairwise orthogonal")
