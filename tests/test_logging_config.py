"""Tests for deadwood logging setup."""

import logging

import pytest
from rich.logging import RichHandler

from deadwood.logging_config import get_logger, log_level, setup_logging


class TestLogLevel:
    @pytest.mark.parametrize(
        "verbose,quiet,expected",
        [
            (False, False, logging.WARNING),
            (True, False, logging.DEBUG),
            (False, True, logging.ERROR),
            (True, True, logging.ERROR),
        ],
    )
    def test_flags(self, verbose, quiet, expected):
        assert log_level(verbose, quiet) == expected


class TestSetupLogging:
    def test_returns_package_logger_at_level(self):
        logger = setup_logging(verbose=True)
        assert logger.name == "deadwood"
        assert logger.level == logging.DEBUG

    def test_single_stderr_handler_without_markup(self):
        setup_logging()
        setup_logging(quiet=True)
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RichHandler)
        assert handlers[0].console.stderr
        assert not handlers[0].markup


class TestGetLogger:
    def test_root(self):
        assert get_logger().name == "deadwood"

    def test_module_names_are_namespaced(self):
        assert get_logger("graph.cycles").name == "deadwood.graph.cycles"
        assert get_logger("deadwood.snapshot").name == "deadwood.snapshot"
