#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Raster Edges Package.

A parallel Robert's cross edge-detection filter for single-band rasters,
with optional clipping of the output distribution tails.
"""

__version__ = "0.1.0"
__author__ = "Elena Project Team"
__email__ = "user@example.com"
