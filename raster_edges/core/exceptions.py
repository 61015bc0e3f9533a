#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exception types raised at the boundaries of the edge filter pipeline.
"""


class RasterEdgesError(Exception):
    """Base class for all errors raised by the package."""


class ConfigurationError(RasterEdgesError, ValueError):
    """
    Invalid run configuration.

    Raised for missing input/output paths, numeric flags that fail to parse,
    invalid worker counts, log levels or configuration files. Always raised
    before any raster processing has started.
    """


class RasterIOError(RasterEdgesError, OSError):
    """Failure opening the input raster or writing the output raster."""
