#!/usr/bin/env python3

"""
Command line checker for calibration input files.

Parses every file given, applies copies, the ignore list and merging, then
runs the consistency checks. Exits with status 0 when the input may be handed
to the combination engine and 1 otherwise.
"""
import argparse
import logging
import sys
from typing import List, Optional

from rich.markup import escape

from ftcalib.checks import prepare, validate
from ftcalib.errors import CalibrationError
from ftcalib.parser import parse_stream
from ftcalib.schema import CalibrationInfo, load_config_with_overrides
from ftcalib.utils.logging import display_analysis_table, log_banner, setup_logging

logger = logging.getLogger("CalibrationCheck")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ftcalib-check",
        description="Parse flavour-tagging calibration inputs and check them for consistency.",
    )
    parser.add_argument("files", nargs="+", help="Calibration input files.")
    parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="NAME",
        help="Drop a bin before checking, as printed in binning error messages. Repeatable.",
    )
    parser.add_argument(
        "--bin-by-bin",
        action="store_true",
        help="Require pairwise orthogonal bins instead of identical binning.",
    )
    parser.add_argument(
        "--ignore-extended",
        action="store_true",
        help="Leave extrapolated (exbin) bins out of the binning checks.",
    )
    parser.add_argument(
        "--set",
        action="append",
        default=[],
        dest="overrides",
        metavar="KEY=VALUE",
        help="Override a validation setting. Repeatable.",
    )
    return parser


def read_inputs(paths: List[str]) -> CalibrationInfo:
    """Parse each file and concatenate the results in command line order."""
    info = CalibrationInfo()
    for path in paths:
        logger.info(f"Reading {escape(path)}")
        with open(path, "r") as stream:
            info = info + parse_stream(stream)
    return info


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    base_cfg = {
        "bin_by_bin": args.bin_by_bin,
        "ignore_extended": args.ignore_extended,
        "ignore": list(args.ignore),
    }
    try:
        config = load_config_with_overrides(base_cfg, args.overrides)
    except (KeyError, ValueError) as err:
        setup_logging()
        logger.error(escape(str(err)))
        return 1

    setup_logging(config.log_level)

    try:
        logger.info(log_banner("parsing"))
        info = read_inputs(args.files)

        logger.info(log_banner("validation"))
        info = prepare(info, config)
        report = validate(info, config)
    except OSError as err:
        logger.error(f"Unable to read input: {escape(str(err))}")
        return 1
    except CalibrationError as err:
        logger.error(escape(str(err)))
        return 1

    display_analysis_table(report.info.analyses, report.boundaries)
    logger.info("All checks passed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
