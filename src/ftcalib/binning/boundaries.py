"""Bin boundary extraction and per-axis partition building.

Starting from one analysis, collect the intervals used along each axis, make
sure they tile the axis with no gaps, overlaps or zero-width bins, and build a
:class:`BinBoundaries` object with the resulting edge lists.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import hist
import numpy as np

from ftcalib.binning.edges import create_hist_axis, edges_to_intervals, validate_edges
from ftcalib.errors import (
    BinBoundaryError,
    BinningDefectError,
    DuplicateBinError,
    UnknownAxisError,
)
from ftcalib.names import analysis_full_name, bin_name, format_number, ignore_format
from ftcalib.schema import Boundary, CalibrationAnalysis, CalibrationBin

logger = logging.getLogger(__name__)

Interval = Tuple[float, float]

MAX_AXES = 2


class BinBoundaries:
    """
    Edge lists for each axis of one analysis.

    Axes are kept in sorted order of their names; the first is the x axis and
    the second (if any) the y axis.
    """

    def __init__(self, axes: Optional[Dict[str, Sequence[float]]] = None):
        self._axes: Dict[str, List[float]] = {}
        for name, edges in (axes or {}).items():
            self.add_axis(name, edges)

    def add_axis(self, name: str, edges: Sequence[float]) -> None:
        validate_edges(edges)
        self._axes[name] = [float(e) for e in edges]

    def axis_names(self) -> List[str]:
        return sorted(self._axes)

    @property
    def size(self) -> int:
        """Number of axes."""
        return len(self._axes)

    def __len__(self) -> int:
        return self.size

    def __contains__(self, name: str) -> bool:
        return name in self._axes

    def __eq__(self, other) -> bool:
        if not isinstance(other, BinBoundaries):
            return NotImplemented
        return self._axes == other._axes

    def __repr__(self) -> str:
        return f"BinBoundaries({dict(sorted(self._axes.items()))})"

    def get_axis_bins(self, name: str) -> List[float]:
        """Edges of axis ``name``."""
        if name not in self._axes:
            raise UnknownAxisError(f"This analysis has no axis called '{name}'")
        return list(self._axes[name])

    def edges(self, name: str) -> np.ndarray:
        return np.asarray(self.get_axis_bins(name), dtype=float)

    def bins(self, name: str) -> List[Interval]:
        """The ``(low, high)`` intervals along axis ``name``."""
        return edges_to_intervals(self.get_axis_bins(name))

    @property
    def xaxis(self) -> str:
        return self.axis_names()[0]

    @property
    def yaxis(self) -> Optional[str]:
        names = self.axis_names()
        return names[1] if len(names) > 1 else None

    def find_bin(self, name: str, bin_spec: Iterable[Boundary]) -> int:
        """
        1-based histogram bin number along ``name`` for a bin specification.

        Raises
        ------
        UnknownAxisError
            If neither the partition nor the bin specification has the axis.
        ValueError
            If no edge matches the bin's lower boundary on that axis.
        """
        edges = self.get_axis_bins(name)
        spec = next((b for b in bin_spec if b.variable == name), None)
        if spec is None:
            raise UnknownAxisError(f"Bin has no boundary along axis '{name}'")
        for ibin, edge in enumerate(edges[:-1]):
            if spec.low == edge:
                return ibin + 1
        raise ValueError(
            f"Unable to find bin with lower boundary '{format_number(spec.low)}' "
            f"in axis '{name}'."
        )

    def to_hist_axis(self, name: str, label: Optional[str] = None) -> hist.axis.Variable:
        return create_hist_axis(self.get_axis_bins(name), name=name, label=label or name)


def extract_bins(
    ana: CalibrationAnalysis, ignore_extended: bool = False
) -> Dict[str, List[Interval]]:
    """
    Distinct ``(low, high)`` intervals used along each axis of an analysis.

    Intervals repeat along an axis for any 2-D analysis and are kept once.
    Two bins with the same specification are always an input error.

    Parameters
    ----------
    ana : CalibrationAnalysis
        Analysis to scan.
    ignore_extended : bool
        Skip ``exbin`` bins.

    Raises
    ------
    DuplicateBinError
        If two bins have identical boundaries on every axis.
    """
    result: Dict[str, List[Interval]] = {}
    seen = set()
    for cbin in ana.bins:
        if ignore_extended and cbin.is_extended:
            continue

        if cbin.spec_key in seen:
            raise DuplicateBinError(
                f"The bin {bin_name(cbin)} has been seen twice in the analysis "
                f"{analysis_full_name(ana)}"
            )
        seen.add(cbin.spec_key)

        for bound in cbin.bin_spec:
            intervals = result.setdefault(bound.variable, [])
            if bound.interval not in intervals:
                intervals.append(bound.interval)
    return result


def build_axis_edges(intervals: Iterable[Interval]) -> List[float]:
    """
    Turn the intervals seen on one axis into an ordered edge list.

    Parameters
    ----------
    intervals : Iterable[Tuple[float, float]]
        ``(low, high)`` pairs in any order.

    Returns
    -------
    List[float]
        Edges ``[e0, ..., en]`` with interval *i* equal to ``(e_i, e_{i+1})``.

    Raises
    ------
    BinningDefectError
        On a zero-width interval, a repeated interval, or when one interval
        does not start exactly where the previous one ends (gap or overlap).
    """
    ordered = sorted(intervals, key=lambda iv: iv[0])
    result: List[float] = []
    last: Optional[Interval] = None
    for current in ordered:
        low, high = current
        if low == high:
            raise BinningDefectError(
                low,
                high,
                "Bins can't be infinitely thin - lower and upper have the same "
                f"boundary: {format_number(low)}",
            )
        if low > high:
            raise BinningDefectError(
                low,
                high,
                f"Bin lower boundary ({format_number(low)}) is above its upper "
                f"boundary ({format_number(high)})",
            )
        if last is None:
            result.append(low)
        else:
            if current == last:
                raise BinningDefectError(last[0], last[1], "Duplicate bin boundaries!")
            if last[1] != low:
                raise BinningDefectError(
                    last[1],
                    low,
                    "Bins must be adjacent and exclusive - lower bin's upper boundary "
                    f"({format_number(last[1])}) and upper bins' lower boundary "
                    f"({format_number(low)}) need to be the same",
                )
            result.append(low)
        last = current

    if last is not None:
        result.append(last[1])
    return result


def get_all_bins_matching(
    ana: CalibrationAnalysis, axis: str, low_bin_high: float, high_bin_low: float
) -> List[CalibrationBin]:
    """
    Bins that may be responsible for a defect reported on ``axis``.

    A bin matches when its lower edge is the defect's ``high_bin_low`` or its
    upper edge is the defect's ``low_bin_high``. For gaps spanning several
    bins this can list bins that are not at fault: it is a list of candidates,
    not a minimal diagnosis.
    """
    result = []
    for cbin in ana.bins:
        b = cbin.boundary_for(axis)
        if b is None:
            continue
        if b.low == high_bin_low or b.high == low_bin_high:
            result.append(cbin)
    return result


def _check_axis_usage(ana: CalibrationAnalysis, ignore_extended: bool) -> None:
    axis_sets = {
        tuple(sorted(b.variable for b in cbin.bin_spec))
        for cbin in ana.bins
        if not (ignore_extended and cbin.is_extended)
    }
    if len(axis_sets) > 1:
        described = "; ".join(", ".join(axes) for axes in sorted(axis_sets))
        raise BinBoundaryError(
            f"Analysis '{ana.name}' mixes bins with different axes ({described})"
        )


def calc_boundaries(ana: CalibrationAnalysis, ignore_extended: bool = False) -> BinBoundaries:
    """
    Build the axis partitions of one analysis.

    Every axis is checked; all defects found are reported together in one
    :class:`BinBoundaryError`, each followed by the bins that may be at fault
    in the format accepted by ``--ignore``.

    Parameters
    ----------
    ana : CalibrationAnalysis
        Analysis to build partitions for.
    ignore_extended : bool
        Leave extrapolated bins out of the partitions.

    Returns
    -------
    BinBoundaries

    Raises
    ------
    DuplicateBinError
        If two bins have identical specifications.
    BinBoundaryError
        If the analysis has no axes, more than two, mixes axis sets between
        bins, or any axis has binning defects.
    """
    raw_bins = extract_bins(ana, ignore_extended)
    if len(raw_bins) > MAX_AXES:
        raise BinBoundaryError(f"Analysis '{ana.name}' has more than {MAX_AXES} binning axes!")
    if len(raw_bins) == 0:
        raise BinBoundaryError(f"Analysis '{ana.name}' has no bins!")
    _check_axis_usage(ana, ignore_extended)

    result = BinBoundaries()
    problems: List[str] = []
    for axis, intervals in raw_bins.items():
        try:
            result.add_axis(axis, build_axis_edges(intervals))
        except BinningDefectError as e:
            lines = [
                f"    {e}",
                "      One of the following analysis/bins is in error - please use --ignore",
            ]
            for bad in get_all_bins_matching(ana, axis, e.low_bin_high, e.high_bin_low):
                lines.append(f"      -> {ignore_format(ana, bad)}")
            problems.append("\n".join(lines))

    if problems:
        logger.debug(f"{len(problems)} binning problem(s) in {analysis_full_name(ana)}")
        raise BinBoundaryError("Found problems with binning: \n" + "\n".join(problems))

    return result
