"""Consistency checks run on parsed calibration inputs before combination."""

from ftcalib.checks.analyses import check_consistent_analyses, check_valid_correlations
from ftcalib.checks.binning import (
    check_consistent_boundaries,
    check_orthogonal_bins,
    is_orthogonal,
    partially_overlaps,
)
from ftcalib.checks.pipeline import ValidationReport, prepare, validate

__all__ = [
    "ValidationReport",
    "check_consistent_analyses",
    "check_consistent_boundaries",
    "check_orthogonal_bins",
    "check_valid_correlations",
    "is_orthogonal",
    "partially_overlaps",
    "prepare",
    "validate",
]
