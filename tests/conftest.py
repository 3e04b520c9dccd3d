"""
Pytest configuration and shared fixtures.

Provides small calibration inputs as text and as parsed objects, plus helpers
to build analyses directly from bin edges.
"""

from typing import Iterable, Optional, Sequence

import pytest

from ftcalib.parser import parse
from ftcalib.schema import Boundary, CalibrationAnalysis, CalibrationBin, SystematicError


SIMPLE_ANALYSIS = """
Analysis(ptrel, bottom, SV0, 0.50, AntiKt4Topo) {
  bin(20 < pt < 30, 0 < abseta < 2.5) {
    central_value(0.9, 0.1)
    sys(JES, 1%)
    usys(MCstat, 0.02)
  }
  bin(30 < pt < 60, 0 < abseta < 2.5) {
    central_value(0.95, 0.08)
    sys(JES, 0.01)
    usys(MCstat, 0.03)
  }
}
"""

FULL_INPUT = """
# Two analyses of the same group with a correlation between them
Analysis(ptrel, bottom, SV0, 0.50, AntiKt4Topo) {
  meta_data_s(Hadronization, Pythia)
  meta_data(mcStats, 0.1, 0.2)
  bin(20 < pt < 30) {
    central_value(0.9, 0.1)
    sys(JES, 1%)
    meta_data(frac, 0.3, 0.01)
  }
  bin(30 < pt < 60) {
    central_value(0.95, 0.08)
    sys(JES, 0.01)
  }
  exbin(60 < pt < 200) {
    central_value(0.95, 0.2)
    sys(extrapolation, 5%)
  }
}
Analysis(system8, bottom, SV0, 0.50, AntiKt4Topo) {
  bin(20 < pt < 30) {
    central_value(0.92, 0.05)
    sys(JES, 0.02)
  }
  bin(30 < pt < 60) {
    central_value(0.97, 0.06)
    sys(JES, 0.02)
  }
}
Correlation(ptrel, system8, bottom, SV0, 0.50, AntiKt4Topo) {
  bin(20 < pt < 30) { statistical(0.3) }
  bin(30 < pt < 60) { }
}
Default(ptrel, bottom, SV0, 0.50, AntiKt4Topo)
Copy(ptrel, bottom, SV0, 0.50, AntiKt4Topo) {
  Analysis(ptrel, bottom, SV0, 0.50, AntiKt6Topo)
}
"""


@pytest.fixture
def simple_text() -> str:
    return SIMPLE_ANALYSIS


@pytest.fixture
def full_text() -> str:
    return FULL_INPUT


@pytest.fixture
def full_info():
    return parse(FULL_INPUT)


def make_bin(
    *boundaries: Sequence,
    central_value: float = 1.0,
    stat: float = 0.1,
    systematics: Iterable[SystematicError] = (),
    is_extended: bool = False,
) -> CalibrationBin:
    """Build a bin from ``(variable, low, high)`` triples."""
    return CalibrationBin(
        bin_spec=tuple(Boundary(variable=v, low=lo, high=hi) for v, lo, hi in boundaries),
        central_value=central_value,
        central_value_statistical_error=stat,
        systematic_errors=tuple(systematics),
        is_extended=is_extended,
    )


def make_analysis(
    name: str = "ptrel",
    edges: Optional[Sequence[float]] = None,
    variable: str = "pt",
    bins: Optional[Iterable[CalibrationBin]] = None,
    flavor: str = "bottom",
    tagger: str = "SV0",
    operating_point: str = "0.50",
    jet_algorithm: str = "AntiKt4Topo",
) -> CalibrationAnalysis:
    """Build a one-axis analysis from edges, or an analysis from explicit bins."""
    if bins is None:
        bins = [
            make_bin((variable, lo, hi))
            for lo, hi in zip(edges[:-1], edges[1:])
        ]
    return CalibrationAnalysis(
        name=name,
        flavor=flavor,
        tagger=tagger,
        operating_point=operating_point,
        jet_algorithm=jet_algorithm,
        bins=tuple(bins),
    )
