#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Input/output handling for the raster edge filter.

This module handles loading rasters, allocating output rasters with matching
geometry, writing them back to disk with their descriptive tags, and
exporting metadata sidecar files.
"""
import os
import json
from pathlib import Path
from typing import Dict, Optional, Union, Any
from datetime import datetime
import numpy as np
import rasterio
from rasterio.drivers import driver_from_extension
from rasterio.errors import RasterioError
import yaml

from raster_edges.core.config import DEFAULT_NODATA_VALUE, EXPORT_CONFIG
from raster_edges.core.exceptions import ConfigurationError, RasterIOError
from raster_edges.core.logging_config import get_module_logger
from raster_edges.core.raster import Raster

# Initialize logger
logger = get_module_logger(__name__)

# Profile keys describing raster geometry, carried from input to output
GEOMETRY_KEYS = ("transform", "crs")


def open_raster(path: Union[str, Path]) -> Raster:
    """
    Load the first band of a raster file.

    Parameters
    ----------
    path : str or Path
        Path to any raster format readable by rasterio (GeoTIFF, ASCII grid, ...).

    Returns
    -------
    Raster
        Grid of float64 values with its nodata sentinel and source profile.

    Raises
    ------
    RasterIOError
        If the file is missing or cannot be decoded.
    """
    logger.info(f"Loading raster from {path}")

    try:
        with rasterio.open(path) as src:
            arr = src.read(1).astype(np.float64)
            nodata = src.nodata
            if nodata is None:
                nodata = DEFAULT_NODATA_VALUE
                logger.warning(f"No nodata value found, using default: {nodata}")
            profile = dict(src.profile)
    except (RasterioError, OSError) as e:
        raise RasterIOError(f"Failed to load raster: {path}") from e

    raster = Raster(arr, nodata, profile=profile, path=path)
    logger.info(f"Loaded raster with shape {raster.shape}, "
                f"{int(np.sum(raster.valid_mask()))} valid cells")
    return raster


def create_like(path: Union[str, Path], template: Raster) -> Raster:
    """
    Allocate an output raster with the same geometry as `template`.

    Every cell is initialised to the template's nodata value.
    """
    data = np.full(template.shape, template.nodata, dtype=np.float64)
    return Raster(data, template.nodata, profile=template.profile, path=path)


def _output_driver(raster: Raster) -> str:
    driver = EXPORT_CONFIG.get("driver")
    if driver:
        return driver
    try:
        return driver_from_extension(str(raster.path))
    except ValueError:
        return raster.profile.get("driver") or EXPORT_CONFIG.get("fallback_driver", "GTiff")


def raster_tags(raster: Raster) -> Dict[str, str]:
    """Dataset tags holding the palette and metadata entries of `raster`."""
    tags = {}
    if raster.palette:
        tags["PALETTE"] = raster.palette
    for i, entry in enumerate(raster.metadata, start=1):
        tags[f"METADATA_{i:03d}"] = entry
    return tags


def write_raster(raster: Raster) -> None:
    """
    Write a raster to its path.

    The driver is taken from EXPORT_CONFIG, else inferred from the file
    extension, else the source driver. Palette and metadata entries are
    stored as dataset tags.

    Raises
    ------
    RasterIOError
        If the raster has no path or the write fails.
    """
    if raster.path is None:
        raise RasterIOError("Output raster has no path")

    profile = {
        "driver": _output_driver(raster),
        "height": raster.rows,
        "width": raster.columns,
        "count": 1,
        "dtype": "float64",
        "nodata": raster.nodata,
    }
    for key in GEOMETRY_KEYS:
        if raster.profile.get(key) is not None:
            profile[key] = raster.profile[key]

    logger.info(f"Writing {profile['driver']} raster to {raster.path}")
    try:
        output_dir = os.path.dirname(str(raster.path))
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)

        with rasterio.open(raster.path, 'w', **profile) as dst:
            dst.write(raster.data, 1)
            dst.update_tags(**raster_tags(raster))
    except (RasterioError, OSError) as e:
        raise RasterIOError(f"Failed to write raster: {raster.path}") from e


def raster_statistics(raster: Raster) -> Dict[str, Any]:
    """Summary statistics of the valid cells of `raster`."""
    mask = raster.valid_mask()
    valid_values = raster.data[mask]
    total = int(raster.data.size)
    count = int(valid_values.size)

    if count == 0:
        return {
            'min': None, 'max': None, 'mean': None, 'std': None, 'median': None,
            'count': 0, 'total_cells': total, 'valid_percentage': 0.0,
        }

    return {
        'min': float(np.min(valid_values)),
        'max': float(np.max(valid_values)),
        'mean': float(np.mean(valid_values)),
        'std': float(np.std(valid_values)),
        'median': float(np.median(valid_values)),
        'count': count,
        'total_cells': total,
        'valid_percentage': float(count / total * 100) if total else 0.0,
    }


def save_metadata(
    raster: Raster,
    output_path: Union[str, Path],
    format: Optional[str] = None
) -> None:
    """
    Save a metadata sidecar describing an output raster.

    Parameters
    ----------
    raster : Raster
        The raster to describe.
    output_path : str or Path
        Path to the sidecar file.
    format : str, optional
        'json' or 'yaml'. If None, uses EXPORT_CONFIG['metadata_format'].
    """
    format = (format or EXPORT_CONFIG.get("metadata_format", "json")).lower()
    if format not in ("json", "yaml"):
        raise ConfigurationError(f"Unsupported metadata format: {format}")

    nodata = None if np.isnan(raster.nodata) else raster.nodata
    metadata = {
        'timestamp': datetime.now().isoformat(),
        'raster_info': {
            'path': str(raster.path) if raster.path else None,
            'shape': list(raster.shape),
            'nodata': nodata,
            'palette': raster.palette,
            'stats': raster_statistics(raster),
        },
        'metadata_entries': list(raster.metadata),
    }

    output_dir = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(output_dir, exist_ok=True)

    with open(output_path, 'w') as f:
        if format == 'json':
            json.dump(metadata, f, indent=2)
        else:
            yaml.safe_dump(metadata, f, default_flow_style=False)

    logger.info(f"Saved metadata to {output_path}")


def log_raster_stats(raster: Raster) -> None:
    """Log basic statistics about the raster."""
    stats = raster_statistics(raster)

    logger.info(f"Raster shape: {raster.shape}")
    logger.info(f"Valid cells: {stats['count']} / {stats['total_cells']} "
                f"({stats['valid_percentage']:.2f}%)")
    if stats['count']:
        logger.info(f"Value range: {stats['min']:.2f} to {stats['max']:.2f}")
