"""Unit tests for logging configuration module.

Tests verify that the logging configuration functions work correctly with different
scenarios including various log levels, formats, and file logging options.
"""

import logging
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from emotions_app.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    setup_logging,
)


def _console_handler() -> logging.Handler:
    root_logger = logging.getLogger()
    handler = next(
        (h for h in root_logger.handlers if type(h) is logging.StreamHandler),
        None,
    )
    assert handler is not None
    return handler


class TestSetupLoggingLogLevels:
    """Test setup_logging with different log levels."""

    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("debug", logging.DEBUG),
        ],
    )
    def test_setup_logging_with_different_levels(self, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False)
        assert _console_handler().level == expected_level

    def test_root_logger_level_is_debug(self):
        setup_logging(log_level="ERROR", enable_file=False)
        assert logging.getLogger().level == logging.DEBUG


class TestSetupLoggingFormats:
    """Test setup_logging with different formats."""

    @pytest.mark.parametrize(
        "log_format,expected_format",
        [
            ("simple", SIMPLE_FORMAT),
            ("detailed", DETAILED_FORMAT),
            ("json", JSON_FORMAT),
            ("unknown", DETAILED_FORMAT),
        ],
    )
    def test_setup_logging_with_different_formats(self, log_format, expected_format):
        setup_logging(log_format=log_format, enable_file=False)
        assert _console_handler().formatter._fmt == expected_format


class TestSetupLoggingFileHandling:
    """Test file logging behaviour."""

    def test_file_handler_added_when_enabled(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir) / "logs"
            with patch("emotions_app.core.logging_config.LOG_FILE_DIR", str(log_dir)):
                with patch("emotions_app.core.logging_config.ENABLE_FILE_LOGGING", True):
                    setup_logging(enable_file=True)
                    file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
                    assert len(file_handlers) == 1
                    assert file_handlers[0].level == logging.DEBUG
                    assert log_dir.exists()
                    for handler in file_handlers:
                        handler.close()
            setup_logging(enable_file=False)

    def test_no_file_handler_when_disabled(self):
        setup_logging(enable_file=False)
        assert not [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]

    def test_setup_logging_replaces_existing_handlers(self):
        setup_logging(enable_file=False)
        setup_logging(enable_file=False)
        assert len(logging.getLogger().handlers) == 1


class TestModuleLogLevels:
    @pytest.mark.parametrize(
        "module_name,expected_level",
        [
            ("emotions_app.core", logging.INFO),
            ("emotions_app.server.api", logging.DEBUG),
            ("emotions_app.server.services", logging.DEBUG),
            ("sqlalchemy.engine", logging.WARNING),
            ("httpx", logging.WARNING),
        ],
    )
    def test_module_specific_log_levels(self, module_name, expected_level):
        setup_logging(enable_file=False)
        assert logging.getLogger(module_name).level == expected_level

    def test_all_module_log_levels_configured(self):
        setup_logging(enable_file=False)
        for module_name, level in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(module_name).level == getattr(logging, level)


class TestGetLogger:
    def test_get_logger_returns_named_logger(self):
        logger = get_logger("emotions_app.server.services.appointments")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "emotions_app.server.services.appointments"

    def test_get_logger_same_name_returns_same_instance(self):
        assert get_logger("emotions_app.core") is get_logger("emotions_app.core")
