"""Tests for logging_config.py."""

import logging
import os
import sys
from unittest.mock import patch

from images_crawler.core.logging_config import PACKAGE_LOGGER, get_logger, logger, setup_logger


class TestSetupLogger:
    """Tests for setup_logger."""

    def test_default_logger(self):
        with patch.dict(os.environ, {}, clear=True):
            crawler_logger = setup_logger()
        assert crawler_logger.name == "images_crawler"
        assert crawler_logger.level == logging.INFO
        assert len(crawler_logger.handlers) == 1
        assert not crawler_logger.propagate

    def test_level_parameter(self):
        assert setup_logger(name="test-level-param", level="DEBUG").level == logging.DEBUG

    def test_level_from_env(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}):
            assert setup_logger(name="test-env-level").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        assert setup_logger(name="test-bad-level", level="LOUD").level == logging.INFO

    def test_structured_format(self):
        with patch.dict(os.environ, {}, clear=True):
            crawler_logger = setup_logger(name="test-structured", format_type="structured")
        format_string = crawler_logger.handlers[0].formatter._fmt
        assert "%(filename)s:%(lineno)d" in format_string
        assert "%(funcName)s()" in format_string

    def test_format_from_env_wins(self):
        """LOG_FORMAT overrides the format_type argument."""
        with patch.dict(os.environ, {"LOG_FORMAT": "simple"}):
            crawler_logger = setup_logger(name="test-env-format", format_type="structured")
        format_string = crawler_logger.handlers[0].formatter._fmt
        assert "%(filename)s" not in format_string
        assert "%(message)s" in format_string

    def test_no_duplicate_handlers(self):
        first = setup_logger(name="test-no-duplicates")
        second = setup_logger(name="test-no-duplicates")
        assert first is second
        assert len(first.handlers) == 1

    def test_writes_to_stdout(self):
        assert setup_logger(name="test-stdout").handlers[0].stream is sys.stdout


class TestGetLogger:
    """Tests for get_logger."""

    def test_default_name(self):
        assert get_logger().name == PACKAGE_LOGGER
        assert get_logger(PACKAGE_LOGGER) is get_logger()

    def test_short_name_is_a_package_child(self):
        named = get_logger("crawler")
        assert named.name == "images_crawler.crawler"
        assert named.parent is logging.getLogger(PACKAGE_LOGGER)
        assert named.handlers == []
        assert named.propagate

    def test_module_name_kept(self):
        assert get_logger("images_crawler.core.throttle").name == "images_crawler.core.throttle"

    def test_lookup_does_not_reset_package_level(self):
        """A module asking for its logger leaves the configured level alone."""
        package = logging.getLogger(PACKAGE_LOGGER)
        previous = package.level
        try:
            setup_logger(level="DEBUG")
            get_logger()
            get_logger("transform")
            assert package.level == logging.DEBUG
            assert get_logger("transform").getEffectiveLevel() == logging.DEBUG
        finally:
            package.setLevel(previous)

    def test_module_logger(self):
        assert isinstance(logger, logging.Logger)
        assert logger.name == "images_crawler"
