"""Axis partitions derived from the bins of an analysis."""

from ftcalib.binning.boundaries import (
    BinBoundaries,
    build_axis_edges,
    calc_boundaries,
    extract_bins,
    get_all_bins_matching,
)
from ftcalib.binning.edges import create_hist_axis, edges_to_intervals, validate_edges

__all__ = [
    "BinBoundaries",
    "build_axis_edges",
    "calc_boundaries",
    "create_hist_axis",
    "edges_to_intervals",
    "extract_bins",
    "get_all_bins_matching",
    "validate_edges",
]
