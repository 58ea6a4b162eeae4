"""Tests for the logging helpers."""

import logging
import os

from utils.logger import get_logger, setup_logging


class TestLogger:

    def test_setup_is_idempotent(self):
        first = setup_logging()
        second = setup_logging(base_name="other")
        assert first == second
        assert os.path.isdir(os.path.dirname(first))

    def test_logs_go_to_configured_directory(self):
        path = setup_logging()
        assert path.startswith(os.environ["PARAMSEARCH_LOG_DIR"])

    def test_named_logger(self):
        logger = get_logger("paramsearch.optimization.tests")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "paramsearch.optimization.tests"

    def test_default_name_is_calling_module(self):
        assert get_logger().name == __name__
