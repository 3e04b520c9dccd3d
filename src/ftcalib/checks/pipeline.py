"""Running all consistency checks on a parsed calibration input.

Only an input that passes :func:`validate` should be handed to the
combination engine.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ftcalib.binning import BinBoundaries, calc_boundaries
from ftcalib.checks.analyses import check_consistent_analyses, check_valid_correlations
from ftcalib.checks.binning import check_consistent_boundaries, check_orthogonal_bins
from ftcalib.filters import (
    combine_same_analyses,
    expand_aliases,
    filter_analyses,
    group_by_combination,
)
from ftcalib.names import analysis_full_name
from ftcalib.schema import CalibrationInfo, ValidationConfig

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """
    Result of a successful validation.

    Attributes
    ----------
    info : CalibrationInfo
        The validated input.
    boundaries : Dict[str, BinBoundaries]
        Axis partitions keyed by analysis full name.
    groups : Dict[str, List[str]]
        Analysis full names per combination group (flavor:tagger:op:jet).
    bin_by_bin : bool
        Whether the bin-by-bin checks were used.
    """

    info: CalibrationInfo
    boundaries: Dict[str, BinBoundaries] = field(default_factory=dict)
    groups: Dict[str, List[str]] = field(default_factory=dict)
    bin_by_bin: bool = False

    @property
    def n_analyses(self) -> int:
        return len(self.info.analyses)

    @property
    def n_bins(self) -> int:
        return sum(len(ana.bins) for ana in self.info.analyses)


def prepare(info: CalibrationInfo, config: Optional[ValidationConfig] = None) -> CalibrationInfo:
    """
    Apply copies, the ignore list and merging, in that order.

    Copies come first so that copied bins can be ignored by their new name.
    """
    config = config or ValidationConfig()
    if config.expand_aliases:
        info = expand_aliases(info)
    info = filter_analyses(info, config.ignore)
    if config.merge_same_analyses:
        info = info.model_copy(update={"analyses": combine_same_analyses(info.analyses)})
    return info


def validate(info: CalibrationInfo, config: Optional[ValidationConfig] = None) -> ValidationReport:
    """
    Run every consistency check on ``info``.

    Steps, each stopping at the first failure:

    1. axis partitions for each analysis (all defects of one analysis are
       reported together);
    2. per combination group, matching partitions, or pairwise orthogonal
       bins when ``config.bin_by_bin`` is set;
    3. uniform correlated/uncorrelated flags per systematic error;
    4. correlations refer to existing analysis bins.

    Parameters
    ----------
    info : CalibrationInfo
        Parsed (and usually :func:`prepare`-d) input.
    config : ValidationConfig, optional
        Check selection; defaults apply when omitted.

    Returns
    -------
    ValidationReport

    Raises
    ------
    CalibrationError
        The first problem found, as the matching subclass.
    """
    config = config or ValidationConfig()
    report = ValidationReport(info=info, bin_by_bin=config.bin_by_bin)

    logger.debug("Building axis partitions")
    for ana in info.analyses:
        report.boundaries[analysis_full_name(ana)] = calc_boundaries(
            ana, ignore_extended=config.ignore_extended
        )

    for group, members in group_by_combination(info.analyses).items():
        report.groups[group] = [analysis_full_name(ana) for ana in members]
        if config.bin_by_bin:
            logger.debug(f"Checking bin orthogonality in {group}")
            check_orthogonal_bins(members)
        else:
            logger.debug(f"Checking binning consistency in {group}")
            check_consistent_boundaries(
                [report.boundaries[analysis_full_name(ana)] for ana in members]
            )

    logger.debug("Checking systematic error correlation flags")
    check_consistent_analyses(info.analyses)

    logger.debug("Checking correlation references")
    check_valid_correlations(info)

    logger.info(
        f"Validated {report.n_analyses} analyses ({report.n_bins} bins) "
        f"in {len(report.groups)} combination groups"
    )
    return report
