#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Logging configuration for the raster edge filter.

This module provides centralized configuration for the logging system
used throughout the application.
"""
import logging
import os
from typing import Optional

from raster_edges.core import config
from raster_edges.core.exceptions import ConfigurationError

ROOT_LOGGER_NAME = "roberts_filter"


def setup_logging(log_level: Optional[str] = None,
                  log_file: Optional[str] = None,
                  module_name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Configure and return a logger with the specified settings.

    Parameters
    ----------
    log_level : str, optional
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        If None, uses the level from config.py.
    log_file : str, optional
        Path to log file. If None, uses the path from config.py when
        file logging is enabled there.
    module_name : str, optional
        Name of the logger, by default "roberts_filter".

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(module_name)

    level = log_level or config.LOGGING_CONFIG.get("level", "INFO")
    numeric_level = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric_level, int):
        raise ConfigurationError(f"Invalid log level: {level}")
    logger.setLevel(numeric_level)

    log_format = config.LOGGING_CONFIG.get("log_format",
                                           "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    formatter = logging.Formatter(log_format)

    # Console handler, attached once; later calls re-apply the format
    if not logger.handlers:
        logger.addHandler(logging.StreamHandler())
    for handler in logger.handlers:
        handler.setFormatter(formatter)

    # File handler (optional), one per log file
    log_to_file = log_file is not None or config.LOGGING_CONFIG.get("log_to_file", False)
    log_file_path = log_file or config.LOGGING_CONFIG.get("log_file")
    if log_to_file and log_file_path:
        log_file_path = os.path.abspath(str(log_file_path))
        attached = {
            h.baseFilename for h in logger.handlers if isinstance(h, logging.FileHandler)
        }
        if log_file_path not in attached:
            log_dir = os.path.dirname(log_file_path)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)

            file_handler = logging.FileHandler(log_file_path)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    logger.debug(f"Logging initialized at level: {level}")
    return logger


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Parameters
    ----------
    module_name : str
        Name of the module, typically __name__.

    Returns
    -------
    logging.Logger
        Logger for the module, a child of the package logger.
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_name}")


# Initialize the package logger
root_logger = setup_logging()
