#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
In-memory single-band raster grid.

A `Raster` holds a 2D float64 array together with its nodata sentinel, the
rasterio profile describing its geometry, and the descriptive metadata that
is written alongside it. Reads through `cell` and `row` are bounds-safe and
return the nodata sentinel outside the grid.
"""
import math
from typing import Any, Dict, List, Optional, Sequence, Union
from pathlib import Path
import numpy as np


def nodata_mask(values: np.ndarray, nodata: float) -> np.ndarray:
    """
    Boolean mask of cells equal to the nodata sentinel.

    Comparison is exact; a NaN sentinel matches NaN cells.
    """
    if np.isnan(nodata):
        return np.isnan(values)
    return values == nodata


def is_nodata(value: float, nodata: float) -> bool:
    """Scalar form of `nodata_mask`."""
    if math.isnan(nodata):
        return math.isnan(value)
    return value == nodata


class Raster:
    """
    Single-band raster held entirely in memory.

    Parameters
    ----------
    data : array_like
        2D array of cell values, converted to float64.
    nodata : float
        Sentinel value marking missing cells.
    profile : dict, optional
        rasterio profile (driver, transform, crs, ...) of the source dataset.
    path : str or Path, optional
        File the raster was read from or will be written to.
    copy : bool, optional
        Copy `data` (default). When False a float64 array is used as is.
    """

    def __init__(
        self,
        data: Any,
        nodata: float,
        profile: Optional[Dict[str, Any]] = None,
        path: Optional[Union[str, Path]] = None,
        copy: bool = True
    ):
        if copy:
            arr = np.array(data, dtype=np.float64)
        else:
            arr = np.asarray(data, dtype=np.float64)
        if arr.ndim != 2:
            raise ValueError(f"Raster data must be 2D, got shape {arr.shape}")

        self.data = arr
        self.nodata = float(nodata)
        self.profile: Dict[str, Any] = dict(profile or {})
        self.path = Path(path) if path is not None else None
        self.metadata: List[str] = []
        self.palette: Optional[str] = None

    @property
    def rows(self) -> int:
        return self.data.shape[0]

    @property
    def columns(self) -> int:
        return self.data.shape[1]

    @property
    def shape(self):
        return self.data.shape

    def cell(self, row: int, col: int) -> float:
        """Value at (row, col), or nodata outside the grid."""
        if 0 <= row < self.rows and 0 <= col < self.columns:
            return float(self.data[row, col])
        return self.nodata

    def row(self, row: int) -> np.ndarray:
        """Read-only view of one row, or a nodata row outside the grid."""
        if 0 <= row < self.rows:
            return self.data[row]
        return np.full(self.columns, self.nodata, dtype=np.float64)

    def valid_mask(self) -> np.ndarray:
        """Boolean mask, True where cells hold real values."""
        return ~nodata_mask(self.data, self.nodata)

    def set_row(self, row: int, values: Sequence[float]) -> None:
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (self.columns,):
            raise ValueError(
                f"Row {row} has {values.shape} values, expected ({self.columns},)"
            )
        self.data[row, :] = values

    def read_only_view(self) -> "Raster":
        """
        Raster sharing this grid's memory through a non-writeable view.

        The view can be handed to any number of worker threads; the original
        raster keeps its own write access.
        """
        view = self.data.view()
        view.flags.writeable = False
        return Raster(view, self.nodata, profile=self.profile, path=self.path, copy=False)

    def add_metadata_entry(self, entry: str) -> None:
        self.metadata.append(entry)

    def __repr__(self) -> str:
        return f"Raster(shape={self.shape}, nodata={self.nodata}, path={self.path})"
