#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for configuration, logging and utility helpers.
"""
import os
import copy
import logging
import tempfile
import unittest
from unittest import mock

from raster_edges.core import config
from raster_edges.core.exceptions import ConfigurationError
from raster_edges.core.logging_config import get_module_logger, setup_logging
from raster_edges.utils.utils import format_elapsed, timer


class ConfigTestCase(unittest.TestCase):
    """Restores the module configuration after each test."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self._saved = {
            name: copy.deepcopy(getattr(config, name))
            for name in ("FILTER_CONFIG", "EXPORT_CONFIG", "LOGGING_CONFIG")
        }
        self._saved_n_jobs = config.N_JOBS

    def tearDown(self):
        for name, value in self._saved.items():
            section = getattr(config, name)
            section.clear()
            section.update(value)
        config.N_JOBS = self._saved_n_jobs
        self.tmpdir.cleanup()

    def write_config(self, text):
        path = os.path.join(self.tmpdir.name, "config.yaml")
        with open(path, "w") as f:
            f.write(text)
        return path


class TestLoadConfig(ConfigTestCase):

    def test_sections_update_settings(self):
        path = self.write_config(
            "filter:\n  clip_amount: 2.5\n"
            "export:\n  metadata_format: yaml\n"
            "n_jobs: 3\n"
        )
        config.load_config(path)
        self.assertEqual(config.FILTER_CONFIG["clip_amount"], 2.5)
        self.assertEqual(config.FILTER_CONFIG["palette"], "grey.plt")
        self.assertEqual(config.EXPORT_CONFIG["metadata_format"], "yaml")
        self.assertEqual(config.N_JOBS, 3)
        self.assertEqual(config.resolve_worker_count(), 3)

    def test_empty_file(self):
        self.assertEqual(config.load_config(self.write_config("")), {})

    def test_unknown_section(self):
        with self.assertRaises(ConfigurationError):
            config.load_config(self.write_config("kernel:\n  size: 3\n"))

    def test_invalid_yaml(self):
        with self.assertRaises(ConfigurationError):
            config.load_config(self.write_config("filter: [unclosed\n"))

    def test_bad_n_jobs(self):
        with self.assertRaises(ConfigurationError):
            config.load_config(self.write_config("n_jobs: many\n"))

    def test_missing_file(self):
        with self.assertRaises(ConfigurationError):
            config.load_config(os.path.join(self.tmpdir.name, "missing.yaml"))


class TestResolveWorkerCount(ConfigTestCase):

    def test_all_cores(self):
        with mock.patch("raster_edges.core.config.os.cpu_count", return_value=6):
            self.assertEqual(config.resolve_worker_count(-1), 6)
            self.assertEqual(config.resolve_worker_count(0), 6)

    def test_unknown_cpu_count(self):
        with mock.patch("raster_edges.core.config.os.cpu_count", return_value=None):
            self.assertEqual(config.resolve_worker_count(-1), 1)

    def test_explicit(self):
        self.assertEqual(config.resolve_worker_count(4), 4)


class TestLogging(ConfigTestCase):

    def test_module_logger_is_child(self):
        logger = get_module_logger("raster_edges.filters.roberts")
        self.assertEqual(logger.parent.name, "roberts_filter")

    def test_setup_logging_sets_level(self):
        logger = setup_logging(log_level="WARNING")
        self.assertEqual(logger.level, logging.WARNING)
        setup_logging(log_level="INFO")

    def test_config_format_and_file_applied_on_later_call(self):
        log_file = os.path.join(self.tmpdir.name, "filter.log")
        config.LOGGING_CONFIG.update(
            log_to_file=True, log_file=log_file, log_format="%(levelname)s:%(message)s"
        )
        logger = setup_logging()
        try:
            get_module_logger("tests").warning("edge check")
            with open(log_file) as f:
                self.assertEqual(f.read().strip(), "WARNING:edge check")
        finally:
            for handler in list(logger.handlers):
                if isinstance(handler, logging.FileHandler):
                    logger.removeHandler(handler)
                    handler.close()
            config.LOGGING_CONFIG.clear()
            config.LOGGING_CONFIG.update(self._saved["LOGGING_CONFIG"])
            setup_logging()

    def test_invalid_level(self):
        with self.assertRaises(ConfigurationError):
            setup_logging(log_level="LOUD")


class TestUtils(unittest.TestCase):

    def test_format_elapsed(self):
        self.assertEqual(format_elapsed(0.25), "250ms")
        self.assertEqual(format_elapsed(2.5), "2.500s")
        self.assertEqual(format_elapsed(75.5), "1min 15.500s")

    def test_timer_preserves_result(self):
        @timer
        def add(a, b):
            return a + b

        self.assertEqual(add(2, 3), 5)
        self.assertEqual(add.__name__, "add")


if __name__ == '__main__':
    unittest.main()
