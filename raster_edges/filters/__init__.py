#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Filter modules for raster data.

This package contains the row partitioning, the Robert's cross edge kernel
with its worker pool, and the distribution tail clipping post-pass.
"""
