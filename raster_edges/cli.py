#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Main entry point for the Robert's cross edge filter.

This script reads a raster, applies the Robert's cross edge-detection filter
in parallel, optionally clips the output distribution tails, and writes the
result.
"""
import sys
import time
import argparse
from typing import List, Optional

from raster_edges import __version__
from raster_edges.core import config
from raster_edges.core.exceptions import ConfigurationError, RasterIOError
from raster_edges.core.logging_config import setup_logging, get_module_logger
from raster_edges.filters.roberts import (
    TOOL_DESCRIPTION, TOOL_EXAMPLE_USAGE, run_roberts_cross_tool
)

# Initialize logger
logger = get_module_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """
    Build the command line parser.

    Returns
    -------
    argparse.ArgumentParser
        Parser for the filter arguments.
    """
    parser = argparse.ArgumentParser(
        description=TOOL_DESCRIPTION,
        epilog=f"Example: {TOOL_EXAMPLE_USAGE}"
    )

    # Required arguments (checked in run_filter)
    parser.add_argument(
        "--input", "-i",
        help="Input raster file"
    )

    parser.add_argument(
        "--output", "-o",
        help="Output raster file"
    )

    # Optional arguments
    parser.add_argument(
        "-clip", "--clip",
        default=None,
        help="Amount to clip the distribution tails by, in percent (default: 0.0)"
    )

    parser.add_argument(
        "--wd",
        help="Working directory for input and output file names without a path"
    )

    parser.add_argument(
        "--workers", "-w",
        default=None,
        help="Number of worker threads (default: one per processing unit)"
    )

    parser.add_argument(
        "--config",
        help="Path to a YAML configuration file"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--save-metadata", "-m",
        nargs="?",
        const="",
        metavar="{json,yaml}",
        help="Save a metadata sidecar next to the output (default format from config: json)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show progress while filtering"
    )

    # Version information
    parser.add_argument(
        "--version",
        action="version",
        version=f"Robert's Cross Filter v{__version__}"
    )

    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Returns
    -------
    argparse.Namespace
        Parsed command line arguments.
    """
    return build_parser().parse_args(argv)


def parse_worker_count(value) -> Optional[int]:
    """Convert the --workers value; None keeps the configured default."""
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Worker count must be an integer, got {value!r}") from e


def run_filter(args: argparse.Namespace) -> int:
    """
    Run the filter for parsed arguments.

    Parameters
    ----------
    args : argparse.Namespace
        Command line arguments.

    Returns
    -------
    int
        Exit code.
    """
    if not args.input:
        raise ConfigurationError("Input raster file not specified (--input)")
    if not args.output:
        raise ConfigurationError("Output raster file not specified (--output)")

    clip_amount = args.clip if args.clip is not None else config.FILTER_CONFIG.get("clip_amount", 0.0)
    n_jobs = parse_worker_count(args.workers)
    metadata_format = args.save_metadata
    if metadata_format == "":
        metadata_format = config.EXPORT_CONFIG.get("metadata_format", "json")

    start_time = time.time()
    run_roberts_cross_tool(
        args.input,
        args.output,
        clip_amount=clip_amount,
        n_jobs=n_jobs,
        working_directory=args.wd,
        verbose=args.verbose,
        metadata_format=metadata_format
    )

    elapsed_time = time.time() - start_time
    logger.info(f"Filter completed in {elapsed_time:.2f} seconds")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function to run the edge filter.

    Returns
    -------
    int
        0 on success, 1 on a configuration or raster I/O error.
    """
    args = parse_arguments(argv)

    try:
        if args.config:
            config.load_config(args.config)
        setup_logging(log_level=args.log_level)
        return run_filter(args)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except RasterIOError as e:
        cause = f" ({e.__cause__})" if e.__cause__ else ""
        logger.error(f"{e}{cause}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
