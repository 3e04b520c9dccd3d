"""
Tests for the rich logging helpers.
"""

import io
import logging

from rich.console import Console

from ftcalib.binning import calc_boundaries
from ftcalib.utils.logging import (
    build_analysis_table,
    display_analysis_table,
    log_banner,
    setup_logging,
)


def test_log_banner():
    banner = log_banner("parsing")
    assert banner.startswith("[magenta]")
    assert "PARSING" in banner
    assert banner.count("=" * 80) == 2


def test_setup_logging_is_idempotent():
    root = logging.getLogger()
    setup_logging("DEBUG")
    count = len(root.handlers)
    setup_logging("WARNING")
    assert len(root.handlers) == count
    assert root.level == logging.WARNING


def test_analysis_table(full_info):
    table = build_analysis_table(full_info.analyses)
    assert table.row_count == 2
    assert len(table.columns) == 4


def test_display_analysis_table(full_info):
    stream = io.StringIO()
    console = Console(file=stream, width=200)
    ana = full_info.analyses[0]
    boundaries = {"ptrel-bottom-SV0-0.50-AntiKt4Topo": calc_boundaries(ana)}
    display_analysis_table(full_info.analyses, boundaries, console=console)
    output = stream.getvalue()
    assert "ptrel-bottom-SV0-0.50-AntiKt4Topo" in output
    assert "pt (3)" in output
