"""Flavour-tagging calibration input parsing and validation.

Reads the text format used to describe calibration analyses and checks
them before they are combined:
- Parsing of Analysis, Correlation, Default and Copy blocks
- Per-analysis axis partitions with aggregated binning diagnostics
- Cross-analysis binning, correlation-flag and reference checks
- Measurement records for the combination engine
"""

__version__ = "1.0.0"

__all__ = []
