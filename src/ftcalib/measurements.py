"""Measurement records handed to the combination engine.

Each non-extrapolated bin of a validated analysis becomes one
:class:`Measurement` of the quantity ``what``; measurements of the same
``what`` from different analyses are what the engine combines.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ftcalib.names import bin_name, combination_group_key
from ftcalib.schema import CalibrationAnalysis


class NameSequence:
    """
    Hands out unique measurement names per base name.

    ``next_name("x")`` returns ``m_x_0``, then ``m_x_1``, and so on. Counters
    are independent per base name and live only as long as the instance.

    Examples
    --------
    >>> names = NameSequence()
    >>> names.next_name("eff"), names.next_name("eff"), names.next_name("sf")
    ('m_eff_0', 'm_eff_1', 'm_sf_0')
    """

    def __init__(self):
        self._next_index: Dict[str, int] = {}

    def next_name(self, base: str) -> str:
        index = self._next_index.get(base, 0)
        self._next_index[base] = index + 1
        return f"m_{base}_{index}"


@dataclass
class Measurement:
    """One bin's value with its errors, ready for the fit."""

    name: str
    what: str
    value: float
    statistical_error: float
    systematic_errors: Dict[str, float] = field(default_factory=dict)
    analysis: str = ""


def build_measurements(
    analyses: Iterable[CalibrationAnalysis], names: Optional[NameSequence] = None
) -> List[Measurement]:
    """
    Turn every measured bin into a :class:`Measurement`.

    Parameters
    ----------
    analyses : Iterable[CalibrationAnalysis]
        Validated analyses.
    names : NameSequence, optional
        Source of measurement names. A fresh sequence is used when omitted,
        so repeated calls give the same names.

    Returns
    -------
    List[Measurement]
        In analysis then bin order. Extrapolated bins are skipped.
    """
    names = names or NameSequence()
    result = []
    for ana in analyses:
        group = combination_group_key(ana, include_jet=True)
        for cbin in ana.bins:
            if cbin.is_extended:
                continue
            what = f"{group}:{bin_name(cbin)}"
            result.append(
                Measurement(
                    name=names.next_name(what),
                    what=what,
                    value=cbin.central_value,
                    statistical_error=cbin.central_value_statistical_error,
                    systematic_errors={e.name: e.value for e in cbin.systematic_errors},
                    analysis=ana.name,
                )
            )
    return result
