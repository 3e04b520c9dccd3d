import logging
from typing import Dict, Iterable, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from ftcalib.binning import BinBoundaries
from ftcalib.names import analysis_full_name
from ftcalib.schema import CalibrationAnalysis


# =============================================================================
# Console Management
# =============================================================================

_console = None

def get_console() -> Console:
    """Get the global Rich console instance for direct Rich output."""
    global _console
    if _console is None:
        custom_theme = Theme({
            "repr.path": "default",   # no color for paths
            "repr.filename": "default",
            "log.message": "default",
        })
        _console = Console(theme=custom_theme)
    return _console


# =============================================================================
# Analysis Summary Display
# =============================================================================

def build_analysis_table(
    analyses: Iterable[CalibrationAnalysis],
    boundaries: Optional[Dict[str, BinBoundaries]] = None,
    table_width: Optional[int] = None,
) -> Table:
    """
    Build a Rich table with one row per analysis.

    Args:
        analyses: Analyses to list.
        boundaries: Optional axis partitions keyed by analysis full name; when
            given, the number of bins per axis is shown.
        table_width: Optional fixed width. If None, uses 120.

    Returns:
        The populated table.
    """
    table = Table(title="Calibration Analyses", width=table_width or 120, expand=False)
    table.add_column("Analysis", style="bold cyan", justify="left", min_width=20, max_width=60)
    table.add_column("Bins", justify="right", min_width=5)
    table.add_column("Extrapolated", justify="right", min_width=5)
    table.add_column("Axes", justify="left", min_width=20, no_wrap=False)

    for ana in analyses:
        full_name = analysis_full_name(ana)
        n_extended = sum(1 for b in ana.bins if b.is_extended)
        partition = (boundaries or {}).get(full_name)
        if partition is not None:
            axes = ", ".join(
                f"{name} ({len(partition.get_axis_bins(name)) - 1})"
                for name in partition.axis_names()
            )
        else:
            axes = ", ".join(ana.axis_names())
        table.add_row(
            escape(full_name),
            str(len(ana.bins)),
            str(n_extended) if n_extended else "[dim]0[/dim]",
            escape(axes),
        )
    return table


def display_analysis_table(
    analyses: Iterable[CalibrationAnalysis],
    boundaries: Optional[Dict[str, BinBoundaries]] = None,
    console: Optional[Console] = None,
) -> None:
    """Print the analysis summary table to the console."""
    (console or get_console()).print(build_analysis_table(analyses, boundaries))


# =============================================================================
# Specialized Logging Functions
# =============================================================================

def log_banner(text: str) -> str:
    """
    Returns a magenta-colored banner string for use with logger.

    This function creates a formatted banner with Rich markup that will be
    properly rendered by the RichHandler when logged.

    Parameters
    ----------
    text : str
        The text to display in the banner.

    Returns
    -------
    str
        Formatted banner string with Rich markup.
    """
    # Escape the text to prevent Rich from interpreting it as markup
    upper_text = text.upper()
    escaped_text = escape(upper_text)

    # Use original text length for centering calculation
    banner_text = (f"{'=' * 80}\n"
                   f"{ ' ' * ((80 - len(upper_text)) // 2)}{escaped_text}\n"
                   f"{ '=' * 80}"
                  )
    return f"[magenta]{banner_text}[/magenta]"


# =============================================================================
# Logger Setup
# =============================================================================

def setup_logging(level: str = "INFO") -> None:
    """
    Sets up logging with RichHandler configured for this project.

    The RichHandler is configured with markup enabled to support colored
    banners and tables, but regular log messages should avoid using markup
    unless specifically intended. Bin names contain '[' and ']' so anything
    derived from input text is escaped before logging.

    Parameters
    ----------
    level : str, optional
        The logging level, by default "INFO"
    """
    log = logging.getLogger()

    # Check if handlers already exist to avoid duplicate logging
    if log.handlers:
        log.setLevel(level)
        return

    # Use the global console instance for consistency
    console = get_console()

    handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        show_time=True,
        markup=True,  # Enable markup for banners and tables
        log_time_format="%H:%M:%S",
    )
    handler.setFormatter(
        logging.Formatter("%(message)s")
    )
    log.addHandler(handler)
    log.setLevel(level)
