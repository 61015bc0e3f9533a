#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Robert's cross edge-detection filter.

This module computes the Robert's cross gradient magnitude of a raster,

    |z1 - z4| + |z2 - z3|

where z1 is the cell, z2 its right neighbour, z3 the cell below and z4 the
cell below-right. Neighbours that are nodata (including those outside the
grid) take the value of z1; nodata cells stay nodata.

Rows are split into blocks and processed by a pool of worker threads that
share the read-only input grid. Each worker sends ``(row, values)`` pairs on
a queue, and a single collector writes them into the output grid by row
index, so arrival order does not matter.
"""
import os
import json
import time
import queue
from enum import Enum
from pathlib import Path
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Union
import numpy as np
from tqdm import tqdm

from raster_edges.core.config import FILTER_CONFIG, resolve_worker_count
from raster_edges.core.exceptions import ConfigurationError
from raster_edges.core.io import (
    create_like, log_raster_stats, open_raster, save_metadata, write_raster
)
from raster_edges.core.logging_config import get_module_logger
from raster_edges.core.raster import Raster, is_nodata, nodata_mask
from raster_edges.filters.clip import clip_raster, parse_clip_amount
from raster_edges.filters.partition import RowBlock, partition_rows
from raster_edges.utils.utils import format_elapsed, timer

# Initialize logger
logger = get_module_logger(__name__)

TOOL_PARAMETERS: List[Dict[str, Any]] = [
    {
        "name": "Input File",
        "flags": ["-i", "--input"],
        "description": "Input raster file.",
        "parameter_type": {"ExistingFile": "Raster"},
        "default_value": None,
        "optional": False,
    },
    {
        "name": "Output File",
        "flags": ["-o", "--output"],
        "description": "Output raster file.",
        "parameter_type": {"NewFile": "Raster"},
        "default_value": None,
        "optional": False,
    },
    {
        "name": "Distribution Tail Clip Amount (Percent)",
        "flags": ["-clip", "--clip"],
        "description": "Optional amount to clip the distribution tails by, in percent.",
        "parameter_type": "Float",
        "default_value": "0.0",
        "optional": True,
    },
]

TOOL_DESCRIPTION = "Performs a Robert's cross edge-detection filter on an image."

TOOL_BOX = "Image Processing Tools/Filters"

TOOL_EXAMPLE_USAGE = (
    f">>raster-edges --wd=\"{os.sep}path{os.sep}to{os.sep}data{os.sep}\" "
    "-i=image.tif -o=output.tif --clip=1.0"
)


class FilterStage(Enum):
    INITIALIZED = "initialized"
    PARTITIONED = "partitioned"
    DISPATCHED = "dispatched"
    COLLECTING = "collecting"
    CLIP_PENDING = "clip_pending"
    CLIP_SKIPPED = "clip_skipped"
    COMPLETE = "complete"


def get_tool_parameters() -> str:
    """Tool parameter descriptions as a JSON document."""
    return json.dumps({"parameters": TOOL_PARAMETERS})


def get_tool_info() -> Dict[str, Any]:
    """Name, description, toolbox and example usage of the tool."""
    return {
        "name": FILTER_CONFIG.get("tool_name", "RobertsCrossFilter"),
        "description": TOOL_DESCRIPTION,
        "toolbox": TOOL_BOX,
        "example_usage": TOOL_EXAMPLE_USAGE,
    }


def roberts_cross_cell(raster: Raster, row: int, col: int) -> float:
    """
    Robert's cross value of a single cell.

    Uses bounds-safe reads, so cells on the last row or column see nodata
    neighbours, which are replaced by the cell's own value.
    """
    nodata = raster.nodata
    z1 = raster.cell(row, col)
    if is_nodata(z1, nodata):
        return nodata

    z2 = raster.cell(row, col + 1)
    if is_nodata(z2, nodata):
        z2 = z1
    z3 = raster.cell(row + 1, col)
    if is_nodata(z3, nodata):
        z3 = z1
    z4 = raster.cell(row + 1, col + 1)
    if is_nodata(z4, nodata):
        z4 = z1

    return abs(z1 - z4) + abs(z2 - z3)


def roberts_cross_row(raster: Raster, row: int) -> np.ndarray:
    """
    Robert's cross values for one row of `raster`.

    Vectorised form of `roberts_cross_cell`; both give identical results.

    Returns
    -------
    np.ndarray
        1D array of length ``raster.columns``.
    """
    nodata = raster.nodata
    if raster.columns == 0:
        return np.empty(0, dtype=np.float64)

    z1 = raster.row(row)
    below = raster.row(row + 1)

    # Shift left by one column; the column past the edge reads as nodata
    z2 = np.append(z1[1:], nodata)
    z3 = below
    z4 = np.append(below[1:], nodata)

    z2 = np.where(nodata_mask(z2, nodata), z1, z2)
    z3 = np.where(nodata_mask(z3, nodata), z1, z3)
    z4 = np.where(nodata_mask(z4, nodata), z1, z4)

    with np.errstate(invalid='ignore', over='ignore'):
        data = np.abs(z1 - z4) + np.abs(z2 - z3)
    data[nodata_mask(z1, nodata)] = nodata
    return data


def process_row_block(raster: Raster, block: RowBlock, results: queue.Queue) -> int:
    """
    Worker body: compute every row of `block` and send it to `results`.

    Returns the number of rows sent.
    """
    for row in block.rows():
        results.put((row, roberts_cross_row(raster, row)))
    logger.debug(f"Worker finished rows {block.start}-{block.end}")
    return block.size


def _forward_worker_failure(block: RowBlock, results: queue.Queue) -> Callable[[Future], None]:
    """Done callback putting a failed worker's exception on the results queue."""
    def callback(future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            results.put((block.start, exc))
    return callback


def collect_rows(
    results: queue.Queue,
    output: Raster,
    rows: int,
    verbose: bool = False
) -> int:
    """
    Receive exactly `rows` row results and write them into `output`.

    Results may arrive in any order; each is written at its own row index.
    This is the only writer of `output` during the filter pass.

    Returns
    -------
    int
        Number of messages consumed, always equal to `rows`.

    Raises
    ------
    RuntimeError
        If a worker failed; the worker's exception is the cause.
    """
    received = 0
    with tqdm(total=rows, desc="Progress", unit="row", disable=not verbose) as progress:
        for _ in range(rows):
            row, values = results.get()
            if isinstance(values, BaseException):
                raise RuntimeError(f"Worker starting at row {row} failed") from values
            output.set_row(row, values)
            received += 1
            progress.update(1)
    return received


def _advance(stage: FilterStage) -> None:
    logger.debug(f"Filter stage: {stage.value}")


@timer
def roberts_cross_filter(
    raster: Raster,
    clip_amount: float = 0.0,
    n_jobs: Optional[int] = None,
    output: Optional[Raster] = None,
    verbose: bool = False
) -> Raster:
    """
    Apply the Robert's cross edge-detection filter to a raster.

    Parameters
    ----------
    raster : Raster
        Input raster. It is not modified.
    clip_amount : float, optional
        Percentage clipped off each tail of the output distribution,
        by default 0.0 (no clipping). Negative values are treated as 0.0.
    n_jobs : int, optional
        Number of worker threads. If None, uses N_JOBS from config;
        -1 uses every available processing unit.
    output : Raster, optional
        Output raster with the same shape as `raster`. If None, one is
        allocated with `create_like`.
    verbose : bool, optional
        Show a progress bar while collecting rows.

    Returns
    -------
    Raster
        The output raster.
    """
    _advance(FilterStage.INITIALIZED)
    clip_amount = parse_clip_amount(clip_amount)
    worker_count = resolve_worker_count(n_jobs)

    if output is None:
        output = create_like(None, raster)
    elif output.shape != raster.shape:
        raise ConfigurationError(
            f"Output shape {output.shape} does not match input shape {raster.shape}"
        )

    source = raster.read_only_view()
    rows = source.rows

    blocks = partition_rows(rows, worker_count)
    _advance(FilterStage.PARTITIONED)
    logger.info(f"Filtering {rows} rows in {len(blocks)} blocks with {worker_count} workers")

    results: queue.Queue = queue.Queue()
    with ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix="roberts") as executor:
        for block in blocks:
            future = executor.submit(process_row_block, source, block, results)
            future.add_done_callback(_forward_worker_failure(block, results))
        _advance(FilterStage.DISPATCHED)

        _advance(FilterStage.COLLECTING)
        collect_rows(results, output, rows, verbose=verbose)

    if clip_amount > 0.0:
        _advance(FilterStage.CLIP_PENDING)
        logger.info("Clipping output...")
        clip_raster(output, clip_amount)
    else:
        _advance(FilterStage.CLIP_SKIPPED)

    _advance(FilterStage.COMPLETE)
    return output


def resolve_path(path: Union[str, Path], working_directory: Optional[Union[str, Path]] = None) -> Path:
    """
    Join bare file names (no path separator) to the working directory.
    """
    path = str(path)
    if working_directory and os.sep not in path and (os.altsep is None or os.altsep not in path):
        return Path(working_directory) / path
    return Path(path)


def run_roberts_cross_tool(
    input_path: Optional[Union[str, Path]],
    output_path: Optional[Union[str, Path]],
    clip_amount: Any = 0.0,
    n_jobs: Optional[int] = None,
    working_directory: Optional[Union[str, Path]] = None,
    verbose: bool = False,
    metadata_format: Optional[str] = None
) -> Raster:
    """
    Read a raster, filter it and write the result with descriptive metadata.

    Parameters
    ----------
    input_path, output_path : str or Path
        Input and output raster files. Bare file names are resolved against
        `working_directory`.
    clip_amount : float or str, optional
        Distribution tail clip amount in percent, by default 0.0.
    n_jobs : int, optional
        Number of worker threads, see `roberts_cross_filter`.
    working_directory : str or Path, optional
        Directory for bare file names.
    verbose : bool, optional
        Show a progress bar.
    metadata_format : str, optional
        If given ('json' or 'yaml'), also save a metadata sidecar next to
        the output raster.

    Returns
    -------
    Raster
        The written output raster.

    Raises
    ------
    ConfigurationError
        Missing paths or an invalid clip amount.
    RasterIOError
        The input could not be read or the output could not be written.
    """
    if not input_path:
        raise ConfigurationError("Input raster file not specified")
    if not output_path:
        raise ConfigurationError("Output raster file not specified")

    if metadata_format and metadata_format.lower() not in ("json", "yaml"):
        raise ConfigurationError(f"Unsupported metadata format: {metadata_format}")

    clip_amount = parse_clip_amount(clip_amount)
    input_path = resolve_path(input_path, working_directory)
    output_path = resolve_path(output_path, working_directory)
    tool_name = FILTER_CONFIG.get("tool_name", "RobertsCrossFilter")

    logger.info(f"Running {tool_name} on {input_path}")
    raster = open_raster(input_path)
    log_raster_stats(raster)

    start_time = time.time()
    output = create_like(output_path, raster)
    roberts_cross_filter(raster, clip_amount, n_jobs=n_jobs, output=output, verbose=verbose)
    elapsed = format_elapsed(time.time() - start_time)

    output.palette = FILTER_CONFIG.get("palette", "grey.plt")
    output.add_metadata_entry(f"Created by raster_edges' {tool_name} tool")
    output.add_metadata_entry(f"Input file: {input_path}")
    output.add_metadata_entry(f"Clip amount: {clip_amount}")
    output.add_metadata_entry(f"Elapsed Time (excluding I/O): {elapsed}")

    logger.info("Saving data...")
    write_raster(output)
    logger.info(f"Output file written, elapsed time (excluding I/O): {elapsed}")

    if metadata_format:
        metadata_path = output_path.with_suffix(f".{metadata_format.lower()}")
        save_metadata(output, metadata_path, format=metadata_format)

    return output
