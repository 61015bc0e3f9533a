#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Distribution tail clipping for filter outputs.

Clipping is a global post-pass: the cutoffs depend on the whole output
distribution, so they are computed in one scan over the finished grid and
applied in a second.
"""
from typing import Optional, Tuple
import numpy as np

from raster_edges.core.config import FILTER_CONFIG
from raster_edges.core.exceptions import ConfigurationError
from raster_edges.core.logging_config import get_module_logger
from raster_edges.core.raster import Raster, nodata_mask

# Initialize logger
logger = get_module_logger(__name__)


def parse_clip_amount(value) -> float:
    """
    Convert a clip amount (percent) to a float in ``[0, max_clip_amount]``.

    Negative amounts become 0.0.

    Raises
    ------
    ConfigurationError
        If the value is not a number.
    """
    try:
        clip = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Clip amount must be a number, got {value!r}") from e
    if np.isnan(clip):
        raise ConfigurationError("Clip amount must be a number, got NaN")

    clip = max(0.0, clip)
    max_clip = FILTER_CONFIG.get("max_clip_amount", 50.0)
    if clip > max_clip:
        logger.warning(f"Clip amount {clip}% exceeds {max_clip}%, using {max_clip}%")
        clip = max_clip
    return clip


def tail_cutoffs(values: np.ndarray, percent: float) -> Tuple[float, float]:
    """
    Low and high cutoff values for clipping `percent` off each tail.

    Parameters
    ----------
    values : np.ndarray
        1D array of valid (non-nodata) values, not empty.
    percent : float
        Percentage of the distribution removed from each end.

    Returns
    -------
    tuple
        (low, high) at the `percent` and ``100 - percent`` percentiles.
    """
    low, high = np.percentile(values, [percent, 100.0 - percent])
    return float(low), float(high)


def clip_min_and_max_by_percent(
    data: np.ndarray,
    nodata: float,
    percent: float
) -> Optional[Tuple[float, float]]:
    """
    Clamp the tails of a grid's value distribution in place.

    Values below the low cutoff are raised to it and values above the high
    cutoff are lowered to it. Nodata cells are excluded from the cutoff
    computation and left untouched.

    Parameters
    ----------
    data : np.ndarray
        2D grid, modified in place.
    nodata : float
        Nodata sentinel of the grid.
    percent : float
        Tail percentage; nothing happens when it is not positive.

    Returns
    -------
    tuple or None
        The (low, high) cutoffs applied, or None if clipping was skipped.
    """
    percent = parse_clip_amount(percent)
    if percent <= 0.0:
        return None

    valid = ~nodata_mask(data, nodata)
    values = data[valid]
    if values.size == 0:
        logger.warning("No valid cells to clip")
        return None

    low, high = tail_cutoffs(values, percent)
    data[valid] = np.clip(values, low, high)

    logger.info(f"Clipped {percent}% from each tail: cutoffs {low:.4f} to {high:.4f}")
    return low, high


def clip_raster(raster: Raster, percent: float) -> Optional[Tuple[float, float]]:
    """Clip the tails of `raster` in place. See `clip_min_and_max_by_percent`."""
    return clip_min_and_max_by_percent(raster.data, raster.nodata, percent)
