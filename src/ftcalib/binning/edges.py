"""Utilities for working with explicit bin edge lists.

An axis partition is stored as its ordered edges ``[e0, e1, ..., en]`` where
bin *i* is ``[e_i, e_{i+1})``. This module converts between that form, the
list of ``(low, high)`` intervals, and ``hist`` axes.
"""

from typing import List, Sequence, Tuple

import hist
import numpy as np


def validate_edges(edges: Sequence[float]) -> Sequence[float]:
    """Check that an edge list describes at least one bin in ascending order.

    Parameters
    ----------
    edges : Sequence[float]
        Bin edges to validate

    Returns
    -------
    Sequence[float]
        The validated edges (unchanged)

    Raises
    ------
    ValueError
        If there are fewer than two edges or they are not strictly increasing

    Examples
    --------
    >>> validate_edges([0, 20, 50, 100])
    [0, 20, 50, 100]
    """
    if len(edges) < 2:
        raise ValueError(
            f"Binning edges must have at least 2 values, got {len(edges)}"
        )
    steps = np.diff(np.asarray(edges, dtype=float))
    if not np.all(steps > 0):
        i = int(np.argmax(steps <= 0))
        raise ValueError(
            f"Binning edges must be in ascending order, "
            f"but edge[{i}]={edges[i]} >= edge[{i+1}]={edges[i + 1]}"
        )
    return edges


def edges_to_intervals(edges: Sequence[float]) -> List[Tuple[float, float]]:
    """Adjacent edge pairs.

    Examples
    --------
    >>> edges_to_intervals([0, 50, 100])
    [(0, 50), (50, 100)]
    """
    return [(edges[i], edges[i + 1]) for i in range(len(edges) - 1)]


def create_hist_axis(
    edges: Sequence[float],
    name: str = "observable",
    label: str = "observable",
) -> hist.axis.Variable:
    """Create a variable-width hist axis from explicit bin edges.

    Parameters
    ----------
    edges : Sequence[float]
        Explicit bin edges
    name : str, default="observable"
        Axis name for histogramming
    label : str, default="observable"
        Axis label for plots

    Returns
    -------
    hist.axis.Variable

    Examples
    --------
    >>> axis = create_hist_axis([20, 30, 60, 90, 140], name="pt")
    >>> list(axis.edges)
    [20.0, 30.0, 60.0, 90.0, 140.0]
    """
    validate_edges(edges)
    return hist.axis.Variable(list(edges), name=name, label=label)
