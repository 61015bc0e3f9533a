#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for raster input/output.
"""
import os
import json
import tempfile
import unittest
import numpy as np
import rasterio
import yaml

from raster_edges.core.config import DEFAULT_NODATA_VALUE
from raster_edges.core.exceptions import ConfigurationError, RasterIOError
from raster_edges.core.io import (
    create_like, open_raster, raster_statistics, save_metadata, write_raster
)
from raster_edges.core.raster import Raster
from synthetic import create_synthetic_raster, save_synthetic_raster


class TestRaster(unittest.TestCase):
    """Test the in-memory raster."""

    def setUp(self):
        self.raster = Raster([[1, 2], [3, -9999.0]], -9999.0)

    def test_cell_out_of_bounds_is_nodata(self):
        self.assertEqual(self.raster.cell(0, 1), 2.0)
        for row, col in [(-1, 0), (0, -1), (2, 0), (0, 2), (5, 5)]:
            self.assertEqual(self.raster.cell(row, col), -9999.0)

    def test_row_out_of_bounds_is_nodata(self):
        np.testing.assert_array_equal(self.raster.row(2), [-9999.0, -9999.0])

    def test_valid_mask(self):
        np.testing.assert_array_equal(self.raster.valid_mask(), [[True, True], [True, False]])

    def test_set_row_checks_length(self):
        with self.assertRaises(ValueError):
            self.raster.set_row(0, [1.0, 2.0, 3.0])

    def test_read_only_view_shares_memory(self):
        view = self.raster.read_only_view()
        self.assertFalse(view.data.flags.writeable)
        self.assertTrue(np.shares_memory(view.data, self.raster.data))
        self.raster.set_row(0, [7.0, 8.0])
        self.assertEqual(view.cell(0, 0), 7.0)

    def test_rejects_non_2d(self):
        with self.assertRaises(ValueError):
            Raster([1.0, 2.0], -9999.0)


class TestRasterIO(unittest.TestCase):
    """Test reading and writing rasters with rasterio."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.grid = create_synthetic_raster(shape=(20, 15), seed=11)
        self.input_path = save_synthetic_raster(
            os.path.join(self.tmpdir.name, "dem.tif"), self.grid
        )

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_open_raster(self):
        raster = open_raster(self.input_path)
        self.assertEqual(raster.shape, (20, 15))
        self.assertEqual(raster.nodata, -9999.0)
        np.testing.assert_array_equal(raster.data, self.grid)
        self.assertIsNotNone(raster.profile.get("transform"))

    def test_missing_nodata_uses_default(self):
        path = save_synthetic_raster(
            os.path.join(self.tmpdir.name, "no_nodata.tif"), self.grid, nodata_value=None
        )
        self.assertEqual(open_raster(path).nodata, DEFAULT_NODATA_VALUE)

    def test_open_missing_file(self):
        with self.assertRaises(RasterIOError):
            open_raster(os.path.join(self.tmpdir.name, "missing.tif"))

    def test_open_corrupt_file(self):
        path = os.path.join(self.tmpdir.name, "corrupt.tif")
        with open(path, "w") as f:
            f.write("not a raster")
        with self.assertRaises(RasterIOError):
            open_raster(path)

    def test_create_like(self):
        template = open_raster(self.input_path)
        output = create_like(os.path.join(self.tmpdir.name, "out.tif"), template)
        self.assertEqual(output.shape, template.shape)
        self.assertTrue(np.all(output.data == template.nodata))
        self.assertEqual(output.profile["transform"], template.profile["transform"])

    def test_write_round_trip_with_tags(self):
        template = open_raster(self.input_path)
        output_path = os.path.join(self.tmpdir.name, "nested", "out.tif")
        output = create_like(output_path, template)
        output.set_row(0, np.arange(15, dtype=float))
        output.palette = "grey.plt"
        output.add_metadata_entry("Clip amount: 0")
        write_raster(output)

        with rasterio.open(output_path) as src:
            np.testing.assert_array_equal(src.read(1), output.data)
            self.assertEqual(src.nodata, template.nodata)
            self.assertEqual(src.transform, template.profile["transform"])
            tags = src.tags()
        self.assertEqual(tags["PALETTE"], "grey.plt")
        self.assertEqual(tags["METADATA_001"], "Clip amount: 0")

    def test_write_without_path(self):
        with self.assertRaises(RasterIOError):
            write_raster(Raster([[1.0]], -9999.0))

    def test_write_to_unwritable_location(self):
        blocker = os.path.join(self.tmpdir.name, "blocker")
        with open(blocker, "w") as f:
            f.write("")
        output = Raster([[1.0]], -9999.0, path=os.path.join(blocker, "out.tif"))
        with self.assertRaises(RasterIOError):
            write_raster(output)


class TestMetadata(unittest.TestCase):
    """Test metadata sidecars."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.raster = Raster([[1.0, 3.0], [-9999.0, 5.0]], -9999.0, path="edges.tif")
        self.raster.add_metadata_entry("Input file: dem.tif")

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_statistics_ignore_nodata(self):
        stats = raster_statistics(self.raster)
        self.assertEqual(stats['count'], 3)
        self.assertEqual(stats['min'], 1.0)
        self.assertEqual(stats['max'], 5.0)
        self.assertEqual(stats['mean'], 3.0)

    def test_statistics_all_nodata(self):
        stats = raster_statistics(Raster([[-1.0]], -1.0))
        self.assertEqual(stats['count'], 0)
        self.assertIsNone(stats['min'])

    def test_save_json(self):
        path = os.path.join(self.tmpdir.name, "edges.json")
        save_metadata(self.raster, path, format="json")
        with open(path) as f:
            metadata = json.load(f)
        self.assertEqual(metadata['raster_info']['shape'], [2, 2])
        self.assertEqual(metadata['metadata_entries'], ["Input file: dem.tif"])

    def test_save_yaml(self):
        path = os.path.join(self.tmpdir.name, "edges.yaml")
        save_metadata(self.raster, path, format="yaml")
        with open(path) as f:
            metadata = yaml.safe_load(f)
        self.assertEqual(metadata['raster_info']['stats']['count'], 3)

    def test_unsupported_format(self):
        with self.assertRaises(ConfigurationError):
            save_metadata(self.raster, os.path.join(self.tmpdir.name, "x.xml"), format="xml")


if __name__ == '__main__':
    unittest.main()
