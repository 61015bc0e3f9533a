#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility modules for the raster edge filter.

This package contains timing helpers shared by the filter and the CLI.
"""
