"""Checks on systematic error flags and declared correlations."""

import logging
from typing import Dict, Sequence

from ftcalib.errors import CorrelationFlagConflictError, UnknownReferenceError
from ftcalib.filters import group_by_combination
from ftcalib.names import bin_identity, ignore_format
from ftcalib.schema import CalibrationAnalysis, CalibrationInfo

logger = logging.getLogger(__name__)


def check_consistent_analyses(analyses: Sequence[CalibrationAnalysis]) -> None:
    """
    A systematic error must be either correlated or uncorrelated everywhere
    within a combination group (flavor, tagger, operating point).

    Raises
    ------
    CorrelationFlagConflictError
        Naming the first systematic error seen with both flags.
    """
    for group, members in group_by_combination(analyses, include_jet=False).items():
        uncorrelated_by_name: Dict[str, bool] = {}
        for ana in members:
            for cbin in ana.bins:
                for err in cbin.systematic_errors:
                    seen = uncorrelated_by_name.setdefault(err.name, err.uncorrelated)
                    if seen != err.uncorrelated:
                        raise CorrelationFlagConflictError(
                            f"Systematic error '{err.name}' marked as correlated in some "
                            f"analyses and uncorrelated in others (group {group})! "
                            "It must be consistent."
                        )


def check_valid_correlations(info: CalibrationInfo) -> None:
    """
    Every bin of every ``Correlation`` block must exist in both named analyses.

    Raises
    ------
    UnknownReferenceError
        If a correlation names the same analysis twice, or refers to an
        analysis/bin pair that was not parsed.
    """
    known = {
        ignore_format(ana, cbin)
        for ana in info.analyses
        for cbin in ana.bins
    }

    for cor in info.correlations:
        if cor.analysis1_name == cor.analysis2_name:
            raise UnknownReferenceError(
                f"Can't have a correlation between the same analyses: "
                f"'{cor.analysis1_name}' ({cor.flavor}, {cor.tagger}, "
                f"{cor.operating_point}, {cor.jet_algorithm})"
            )
        for cbin in cor.bins:
            for ana_name in (cor.analysis1_name, cor.analysis2_name):
                if bin_identity(cor.identity_for(ana_name), cbin) not in known:
                    raise UnknownReferenceError(
                        f"The '{ana_name}' analysis for the correlation "
                        f"{ignore_format(cor, cbin)} is not known."
                    )
    logger.debug(f"{len(info.correlations)} correlation blocks reference known bins")
