#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration settings for the raster edge filter.

This module centralizes all configuration parameters used across the filter
modules, making it easier to modify settings in one place. Settings can be
overridden from a YAML file with `load_config`.
"""
from typing import Dict, Any, Optional, Union
import os
from pathlib import Path
import yaml

from raster_edges.core.exceptions import ConfigurationError

# General configuration
DEFAULT_NODATA_VALUE: float = -9999.0
N_JOBS: int = -1         # Number of worker threads (-1 = all cores)

# Path configuration
PROJECT_ROOT: Path = Path(__file__).parent.absolute()
DEFAULT_OUTPUT_DIR: Path = PROJECT_ROOT / "output"

# Filter configuration
FILTER_CONFIG: Dict[str, Any] = {
    "tool_name": "RobertsCrossFilter",
    "clip_amount": 0.0,        # Percent clipped from each distribution tail
    "max_clip_amount": 50.0,   # Both cutoffs meet at the median
    "palette": "grey.plt",
}

# Export configuration
EXPORT_CONFIG: Dict[str, Any] = {
    "driver": None,              # None = infer from the output file extension
    "fallback_driver": "GTiff",
    "metadata_format": "json",   # Options: 'json', 'yaml'
}

# Logging configuration
LOGGING_CONFIG: Dict[str, Any] = {
    "level": "INFO",  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    "log_to_file": False,
    "log_file": DEFAULT_OUTPUT_DIR / "roberts_filter.log",
    "log_format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

_SECTIONS: Dict[str, Dict[str, Any]] = {
    "filter": FILTER_CONFIG,
    "export": EXPORT_CONFIG,
    "logging": LOGGING_CONFIG,
}


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML configuration file and apply it to the module settings.

    Parameters
    ----------
    path : str or Path
        Path to a YAML file. Top-level keys are ``filter``, ``export``,
        ``logging`` (mappings merged into the matching dictionaries) and
        ``n_jobs`` (integer).

    Returns
    -------
    dict
        The parsed configuration.

    Raises
    ------
    ConfigurationError
        If the file cannot be read, is not valid YAML or has unknown sections.
    """
    global N_JOBS

    try:
        with open(path, 'r') as f:
            config = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file {path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")

    for key, value in config.items():
        if key == "n_jobs":
            try:
                N_JOBS = int(value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"n_jobs must be an integer, got {value!r}") from e
        elif key in _SECTIONS:
            if not isinstance(value, dict):
                raise ConfigurationError(f"Section '{key}' must be a mapping")
            _SECTIONS[key].update(value)
        else:
            raise ConfigurationError(f"Unknown configuration section: {key}")

    return config


def resolve_worker_count(n_jobs: Optional[int] = None) -> int:
    """
    Resolve the number of worker threads.

    ``None`` uses `N_JOBS`; ``-1`` (or any value below 1) means one worker
    per available processing unit.
    """
    if n_jobs is None:
        n_jobs = N_JOBS
    if n_jobs < 1:
        return os.cpu_count() or 1
    return n_jobs
