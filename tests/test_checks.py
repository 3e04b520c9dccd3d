"""
Unit tests for the cross-analysis consistency checks and the validation
pipeline.
"""

import pytest

from ftcalib.binning import BinBoundaries, calc_boundaries
from ftcalib.checks import (
    check_consistent_analyses,
    check_consistent_boundaries,
    check_orthogonal_bins,
    check_valid_correlations,
    is_orthogonal,
    partially_overlaps,
    prepare,
    validate,
)
from ftcalib.errors import (
    BinBoundaryError,
    CorrelationFlagConflictError,
    CrossAnalysisInconsistencyError,
    OrthogonalityError,
    UnknownReferenceError,
)
from ftcalib.parser import parse
from ftcalib.schema import (
    AnalysisCorrelation,
    BinCorrelation,
    Boundary,
    CalibrationInfo,
    SystematicError,
    ValidationConfig,
)

from conftest import make_analysis, make_bin


def pt_boundaries(*edges):
    return BinBoundaries({"pt": list(edges)})


class TestConsistentBoundaries:
    """Partitions of analyses combined together must line up."""

    def test_identical(self):
        check_consistent_boundaries([pt_boundaries(0, 100, 200), pt_boundaries(0, 100, 200)])

    def test_finer_binning_allowed(self):
        check_consistent_boundaries([pt_boundaries(0, 100, 200), pt_boundaries(0, 50, 100, 200)])

    def test_coarser_binning_allowed(self):
        check_consistent_boundaries([pt_boundaries(0, 50, 100, 200), pt_boundaries(0, 100, 200)])

    def test_subset_allowed(self):
        check_consistent_boundaries([pt_boundaries(0, 100, 200, 300), pt_boundaries(100, 200)])

    def test_straddling_edge_rejected(self):
        with pytest.raises(CrossAnalysisInconsistencyError, match=r"inconsistent boundaries \(75-pt-200\)"):
            check_consistent_boundaries([pt_boundaries(0, 100, 200), pt_boundaries(0, 75, 200)])

    def test_later_pairs_compared(self):
        with pytest.raises(CrossAnalysisInconsistencyError):
            check_consistent_boundaries(
                [pt_boundaries(0, 300), pt_boundaries(0, 100, 200), pt_boundaries(0, 150, 300)]
            )

    def test_axis_count_mismatch(self):
        two_axes = BinBoundaries({"pt": [0, 100], "eta": [0, 2.5]})
        with pytest.raises(CrossAnalysisInconsistencyError, match="number of binning axes differs"):
            check_consistent_boundaries([pt_boundaries(0, 100), two_axes])

    def test_axis_name_mismatch(self):
        eta = BinBoundaries({"eta": [0, 2.5]})
        with pytest.raises(CrossAnalysisInconsistencyError, match="bin axis 'eta'"):
            check_consistent_boundaries([pt_boundaries(0, 100), eta])

    def test_single_analysis(self):
        check_consistent_boundaries([pt_boundaries(0, 100)])
        check_consistent_boundaries([])

    @pytest.mark.parametrize(
        "test, reference, expected",
        [
            ((0, 50), (0, 100), False),
            ((0, 200), (0, 100), False),
            ((50, 150), (0, 100), True),
            ((100, 200), (0, 100), False),
            ((0, 100), (0, 100), False),
        ],
    )
    def test_partially_overlaps(self, test, reference, expected):
        assert partially_overlaps(test, reference) is expected


class TestCorrelationFlags:
    """Systematics must keep their correlated/uncorrelated flag within a group."""

    def test_conflict(self):
        a = make_analysis("a", bins=[make_bin(("pt", 0, 1), systematics=[SystematicError(name="JES", value=0.1)])])
        b = make_analysis(
            "b",
            bins=[make_bin(("pt", 0, 1), systematics=[SystematicError(name="JES", value=0.1, uncorrelated=True)])],
        )
        with pytest.raises(CorrelationFlagConflictError, match="'JES'"):
            check_consistent_analyses([a, b])

    def test_same_flags(self):
        sys_err = SystematicError(name="JES", value=0.1, uncorrelated=True)
        a = make_analysis("a", bins=[make_bin(("pt", 0, 1), systematics=[sys_err])])
        b = make_analysis("b", bins=[make_bin(("pt", 0, 1), systematics=[sys_err])])
        check_consistent_analyses([a, b])

    def test_other_groups_independent(self):
        a = make_analysis("a", bins=[make_bin(("pt", 0, 1), systematics=[SystematicError(name="JES", value=0.1)])])
        b = make_analysis(
            "b",
            tagger="MV1",
            bins=[make_bin(("pt", 0, 1), systematics=[SystematicError(name="JES", value=0.1, uncorrelated=True)])],
        )
        check_consistent_analyses([a, b])


class TestCorrelationReferences:
    """Correlations must point at existing analysis bins."""

    def _correlation(self, a1, a2, bins):
        return AnalysisCorrelation(
            analysis1_name=a1,
            analysis2_name=a2,
            flavor="bottom",
            tagger="SV0",
            operating_point="0.50",
            jet_algorithm="AntiKt4Topo",
            bins=tuple(bins),
        )

    def test_valid(self, full_info):
        check_valid_correlations(full_info)

    def test_self_correlation_without_bins(self):
        info = CalibrationInfo(correlations=[self._correlation("ptrel", "ptrel", [])])
        with pytest.raises(UnknownReferenceError, match="same analyses"):
            check_valid_correlations(info)

    def test_unknown_analysis(self, full_info):
        cor = self._correlation(
            "ptrel", "s8", [BinCorrelation(bin_spec=(Boundary(variable="pt", low=20, high=30),))]
        )
        info = full_info.model_copy(update={"correlations": [cor]})
        with pytest.raises(UnknownReferenceError, match="'s8' analysis for the correlation"):
            check_valid_correlations(info)

    def test_unknown_bin(self, full_info):
        cor = self._correlation(
            "ptrel", "system8", [BinCorrelation(bin_spec=(Boundary(variable="pt", low=60, high=200),))]
        )
        info = full_info.model_copy(update={"correlations": [cor]})
        with pytest.raises(UnknownReferenceError, match="ptrel-system8-bottom-SV0-0.50-AntiKt4Topo:60-pt-200"):
            check_valid_correlations(info)


class TestOrthogonality:
    """Bin-by-bin mode: distinct bins may not overlap."""

    def test_orthogonal(self):
        a = make_analysis("a", edges=[0, 50, 100])
        b = make_analysis("b", edges=[100, 200])
        check_orthogonal_bins([a, b])

    def test_same_bin_in_two_analyses(self):
        check_orthogonal_bins([make_analysis("a", edges=[0, 50]), make_analysis("b", edges=[0, 50])])

    def test_overlap(self):
        a = make_analysis("a", edges=[0, 100])
        b = make_analysis("b", edges=[50, 150])
        with pytest.raises(OrthogonalityError) as excinfo:
            check_orthogonal_bins([a, b])
        assert "0-pt-100" in str(excinfo.value)
        assert "50-pt-150" in str(excinfo.value)

    def test_is_orthogonal_two_axes(self):
        s1 = [Boundary(variable="pt", low=0, high=10), Boundary(variable="eta", low=0, high=1)]
        s2 = [Boundary(variable="pt", low=0, high=10), Boundary(variable="eta", low=1, high=2)]
        s3 = [Boundary(variable="pt", low=5, high=15), Boundary(variable="eta", low=0.5, high=1.5)]
        assert is_orthogonal(s1, s2)
        assert not is_orthogonal(s1, s3)


class TestPipeline:
    """prepare() and validate() end to end."""

    def test_validate_full_input(self, full_info):
        report = validate(prepare(full_info))
        assert report.n_analyses == 3
        assert set(report.groups) == {
            "bottom:SV0:0.50:AntiKt4Topo",
            "bottom:SV0:0.50:AntiKt6Topo",
        }
        assert report.boundaries["ptrel-bottom-SV0-0.50-AntiKt6Topo"].get_axis_bins("pt") == [
            20, 30, 60, 200,
        ]

    def test_extended_bins_ignored(self, full_info):
        report = validate(full_info, ValidationConfig(ignore_extended=True))
        assert report.boundaries["ptrel-bottom-SV0-0.50-AntiKt4Topo"].get_axis_bins("pt") == [20, 30, 60]

    def test_inconsistent_group(self):
        info = CalibrationInfo(
            analyses=[make_analysis("a", edges=[0, 100, 200]), make_analysis("b", edges=[0, 75, 200])]
        )
        with pytest.raises(CrossAnalysisInconsistencyError):
            validate(info)

    def test_bin_by_bin_skips_partition_comparison(self):
        info = CalibrationInfo(
            analyses=[make_analysis("a", edges=[0, 100]), make_analysis("b", edges=[100, 200])]
        )
        validate(info, ValidationConfig(bin_by_bin=True))

    def test_bin_by_bin_overlap(self):
        info = CalibrationInfo(
            analyses=[make_analysis("a", edges=[0, 100, 200]), make_analysis("b", edges=[0, 75, 200])]
        )
        with pytest.raises(OrthogonalityError):
            validate(info, ValidationConfig(bin_by_bin=True))

    def test_ignore_fixes_binning(self):
        text = """
        Analysis(a, b, c, d, e) {
          bin(0 < pt < 100) { central_value(1, 0.1) }
          bin(50 < pt < 150) { central_value(1, 0.1) }
        }
        """
        info = parse(text)
        with pytest.raises(BinBoundaryError):
            validate(prepare(info))
        config = ValidationConfig(ignore=["a-b-c-d-e:50-pt-150"])
        report = validate(prepare(info, config), config)
        assert report.n_bins == 1

    def test_merge_same_analyses(self):
        text = """
        Analysis(a, b, c, d, e) { bin(0 < pt < 100) { central_value(1, 0.1) } }
        Analysis(a, b, c, d, e) { bin(100 < pt < 200) { central_value(1, 0.1) } }
        """
        report = validate(prepare(parse(text)))
        assert report.n_analyses == 1
        assert report.boundaries["a-b-c-d-e"].get_axis_bins("pt") == [0, 100, 200]

    def test_ignore_also_applies_to_correlations(self):
        text = """
        Analysis(a, b, SV0, 0.5, J) {
          bin(0 < pt < 100) { central_value(1, 0.1) }
          bin(50 < pt < 150) { central_value(1, 0.1) }
        }
        Analysis(c, b, SV0, 0.5, J) {
          bin(0 < pt < 100) { central_value(1, 0.1) }
        }
        Correlation(a, c, b, SV0, 0.5, J) {
          bin(0 < pt < 100) { statistical(0.5) }
          bin(50 < pt < 150) { statistical(0.5) }
        }
        """
        config = ValidationConfig(ignore=["a-b-SV0-0.5-J:50-pt-150"])
        report = validate(prepare(parse(text), config), config)
        assert len(report.info.correlations[0].bins) == 1
