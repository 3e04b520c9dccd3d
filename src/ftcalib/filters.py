"""Preparing a parsed input for validation: ignore lists, copies and merging."""

import logging
from typing import Dict, FrozenSet, Iterable, List, Optional

from ftcalib.names import (
    analysis_full_name,
    bin_identity,
    combination_group_key,
    correlation_full_name,
    ignore_format,
)
from ftcalib.schema import Boundary, CalibrationAnalysis, CalibrationInfo, IdentityKey

logger = logging.getLogger(__name__)


def group_by_combination(
    analyses: Iterable[CalibrationAnalysis], include_jet: bool = True
) -> Dict[str, List[CalibrationAnalysis]]:
    """Analyses grouped by combination group key, in first-seen order.

    Args:
        analyses: Analyses to group.
        include_jet: Also split groups by jet algorithm.

    Returns:
        Mapping of ``flavor:tagger:op[:jet]`` to the analyses in that group.
    """
    groups: Dict[str, List[CalibrationAnalysis]] = {}
    for ana in analyses:
        groups.setdefault(combination_group_key(ana, include_jet), []).append(ana)
    return groups


def list_all_bins(analyses: Iterable[CalibrationAnalysis]) -> List[FrozenSet[Boundary]]:
    """Distinct bin specifications across all analyses, in first-seen order."""
    result: List[FrozenSet[Boundary]] = []
    seen = set()
    for ana in analyses:
        for cbin in ana.bins:
            spec = frozenset(cbin.bin_spec)
            if spec not in seen:
                seen.add(spec)
                result.append(spec)
    return result


def filter_analyses(info: CalibrationInfo, ignore: Iterable[str]) -> CalibrationInfo:
    """Remove bins named in ``ignore`` (``--ignore`` format).

    Analyses that lose all their bins are removed as well. Correlation bins
    that refer to an ignored bin of either analysis are dropped, and so are
    correlations left with no bins.

    Examples:
        >>> filtered = filter_analyses(info, ["ptrel-bottom-SV0-0.5-AntiKt4Topo:20-pt-30"])
    """
    to_ignore = set(ignore)
    if not to_ignore:
        return info

    analyses = []
    removed = 0
    for ana in info.analyses:
        kept = tuple(b for b in ana.bins if ignore_format(ana, b) not in to_ignore)
        removed += len(ana.bins) - len(kept)
        if not kept:
            logger.info(f"Dropping analysis {analysis_full_name(ana)}: all bins ignored")
            continue
        analyses.append(ana if len(kept) == len(ana.bins) else ana.model_copy(update={"bins": kept}))

    correlations = []
    for cor in info.correlations:
        kept_cor = tuple(
            b for b in cor.bins
            if not any(
                bin_identity(cor.identity_for(name), b) in to_ignore
                for name in (cor.analysis1_name, cor.analysis2_name)
            )
        )
        if cor.bins and not kept_cor:
            logger.info(f"Dropping correlation {correlation_full_name(cor)}: all bins ignored")
            continue
        correlations.append(
            cor if len(kept_cor) == len(cor.bins) else cor.model_copy(update={"bins": kept_cor})
        )

    logger.info(f"Ignored {removed} bins ({len(to_ignore)} requested)")
    return info.model_copy(update={"analyses": analyses, "correlations": correlations})


def expand_aliases(info: CalibrationInfo) -> CalibrationInfo:
    """Apply every ``Copy`` directive.

    Each target gets a copy of the source analysis under the target's identity
    key. Copies whose source is not present are skipped with a warning.
    """
    if not info.aliases:
        return info

    by_key = {ana.identity: ana for ana in info.analyses}
    analyses = list(info.analyses)
    for alias in info.aliases:
        source = by_key.get(alias.identity)
        if source is None:
            logger.warning(
                f"Copy source analysis {analysis_full_name(alias)} not found; skipping"
            )
            continue
        for target in alias.copy_targets:
            analyses.append(
                source.model_copy(
                    update={
                        "name": target.name,
                        "flavor": target.flavor,
                        "tagger": target.tagger,
                        "operating_point": target.operating_point,
                        "jet_algorithm": target.jet_algorithm,
                    }
                )
            )
            logger.debug(
                f"Copied {analysis_full_name(source)} to {analysis_full_name(target)}"
            )
    return info.model_copy(update={"analyses": analyses})


def combine_same_analyses(analyses: Iterable[CalibrationAnalysis]) -> List[CalibrationAnalysis]:
    """Merge analyses that share an identity key.

    Bins are concatenated in input order and metadata merged with later
    entries winning. The result keeps the order in which keys first appear.
    """
    merged: Dict[IdentityKey, CalibrationAnalysis] = {}
    for ana in analyses:
        existing = merged.get(ana.identity)
        if existing is None:
            merged[ana.identity] = ana
            continue
        merged[ana.identity] = existing.model_copy(
            update={
                "bins": existing.bins + ana.bins,
                "metadata": {**existing.metadata, **ana.metadata},
                "metadata_s": {**existing.metadata_s, **ana.metadata_s},
            }
        )
        logger.debug(f"Merged a second {analysis_full_name(ana)} block")
    return list(merged.values())


def find_default(
    info: CalibrationInfo, flavor: str, tagger: str, operating_point: str, jet_algorithm: str
) -> Optional[str]:
    """Name of the analysis marked ``Default`` for a group, or None."""
    for d in info.defaults:
        if (d.flavor, d.tagger, d.operating_point, d.jet_algorithm) == (
            flavor,
            tagger,
            operating_point,
            jet_algorithm,
        ):
            return d.name
    return None
