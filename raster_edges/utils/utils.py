#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility functions for the raster edge filter.

This module provides timing helpers used by the filter pipeline and the CLI.
"""
import time
import functools
from typing import Callable

from raster_edges.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)


def timer(func: Callable) -> Callable:
    """
    Decorator to time function execution.

    Parameters
    ----------
    func : Callable
        Function to time.

    Returns
    -------
    Callable
        Wrapped function with timing.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        elapsed = time.time() - start_time
        logger.debug(f"Function {func.__name__} took {elapsed:.2f} seconds to run")
        return result
    return wrapper


def format_elapsed(seconds: float) -> str:
    """
    Format a duration for metadata entries and log messages.

    >>> format_elapsed(0.25)
    '250ms'
    >>> format_elapsed(75.5)
    '1min 15.500s'
    """
    if seconds < 1.0:
        return f"{seconds * 1000:.0f}ms"
    minutes, secs = divmod(seconds, 60.0)
    if minutes >= 1:
        return f"{int(minutes)}min {secs:.3f}s"
    return f"{secs:.3f}s"
