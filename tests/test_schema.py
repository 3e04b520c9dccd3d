"""
Unit tests for the read-only calibration models.
"""

import pytest

from ftcalib.schema import Boundary

from conftest import make_analysis


class TestFrozenModels:
    """Parsed entities cannot be changed after construction."""

    def test_item_assignment_rejected(self):
        boundary = Boundary(variable="pt", low=0, high=10)
        with pytest.raises(TypeError, match="Boundary is read-only"):
            boundary["low"] = 5
        assert boundary.low == 0

    def test_pop_rejected(self):
        ana = make_analysis(edges=[0, 10])
        with pytest.raises(TypeError, match="CalibrationAnalysis is read-only"):
            ana.pop("bins")
        assert len(ana.bins) == 1

    def test_read_access(self):
        boundary = Boundary(variable="pt", low=0, high=10)
        assert boundary["variable"] == "pt"
        assert boundary.get("missing", 1) == 1
        assert "high" in boundary

    def test_boundaries_sort_by_axis(self):
        b1 = Boundary(variable="pt", low=0, high=10)
        b2 = Boundary(variable="eta", low=5, high=10)
        assert sorted([b1, b2]) == [b2, b1]
        assert len({b1, Boundary(variable="pt", low=0, high=10)}) == 1
