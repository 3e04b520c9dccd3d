"""
Unit tests for display names.
"""

import pytest

from ftcalib.names import (
    analysis_full_name,
    bin_name,
    boundary_name,
    combination_group_key,
    format_number,
    ignore_format,
)
from ftcalib.schema import Boundary

from conftest import make_analysis, make_bin


@pytest.mark.parametrize(
    "value, expected",
    [(100.0, "100"), (2.5, "2.5"), (-0.5, "-0.5"), (0.0, "0"), (1e-7, "1e-07")],
)
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_format_number_keeps_precision():
    assert float(format_number(0.1234567891)) == 0.1234567891


@pytest.mark.parametrize(
    "value, expected",
    [(1234567.0, "1234567"), (1234567.5, "1234567.5"), (1e16, "1e+16")],
)
def test_format_number_single_rule(value, expected):
    assert format_number(value) == expected


def test_boundary_name():
    assert boundary_name(Boundary(variable="pt", low=20, high=30)) == "20-pt-30"


def test_bin_name_sorted_by_axis():
    cbin = make_bin(("pt", 20, 30), ("abseta", 0, 2.5))
    assert bin_name(cbin) == "0-abseta-2.5:20-pt-30"
    assert bin_name(cbin.bin_spec) == bin_name(cbin)


def test_full_and_ignore_names():
    ana = make_analysis("ptrel", edges=[20, 30])
    assert analysis_full_name(ana) == "ptrel-bottom-SV0-0.50-AntiKt4Topo"
    assert ignore_format(ana, ana.bins[0]) == "ptrel-bottom-SV0-0.50-AntiKt4Topo:20-pt-30"


def test_correlation_ignore_name(full_info):
    cor = full_info.correlations[0]
    assert ignore_format(cor, cor.bins[0]) == "ptrel-system8-bottom-SV0-0.50-AntiKt4Topo:20-pt-30"


def test_combination_group_key():
    ana = make_analysis(edges=[0, 1])
    assert combination_group_key(ana) == "bottom:SV0:0.50"
    assert combination_group_key(ana, include_jet=True) == "bottom:SV0:0.50:AntiKt4Topo"
