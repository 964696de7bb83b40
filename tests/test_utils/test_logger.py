"""Tests for logging configuration."""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

import pytest

from stockpulse.utils.logger import configure_logging


class TestConfigureLogging:
    def teardown_method(self):
        """Clean up logger handlers after each test."""
        logger = logging.getLogger("stockpulse")
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    def test_creates_logger_with_specified_level(self):
        configure_logging(level="DEBUG", log_file=None)
        logger = logging.getLogger("stockpulse")
        assert logger.level == logging.DEBUG

    def test_creates_logger_with_info_level_by_default(self):
        configure_logging(log_file=None)
        logger = logging.getLogger("stockpulse")
        assert logger.level == logging.INFO

    def test_level_is_case_insensitive(self):
        configure_logging(level="warning", log_file=None)
        assert logging.getLogger("stockpulse").level == logging.WARNING

    def test_console_handler_only_shows_errors(self):
        configure_logging(log_file=None)
        logger = logging.getLogger("stockpulse")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)
        assert logger.handlers[0].level == logging.ERROR

    def test_attaches_rotating_file_handler(self, tmp_path):
        log_file = str(tmp_path / "test.log")
        configure_logging(log_file=log_file)
        logger = logging.getLogger("stockpulse")
        assert len(logger.handlers) == 2
        file_handlers = [h for h in logger.handlers if isinstance(h, TimedRotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].when == "MIDNIGHT"
        assert file_handlers[0].backupCount == 7

    def test_clears_existing_handlers_on_repeated_calls(self):
        configure_logging(log_file=None)
        configure_logging(log_file=None)
        logger = logging.getLogger("stockpulse")
        # Should have exactly 1 handler, not 2
        assert len(logger.handlers) == 1

    def test_invalid_level_raises_value_error(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="VERBOSE")

    def test_creates_parent_directories_for_log_file(self, tmp_path):
        log_file = str(tmp_path / "subdir" / "nested" / "test.log")
        configure_logging(log_file=log_file)
        assert Path(log_file).parent.exists()

    def test_quiets_scheduler_logs(self):
        logging.getLogger("apscheduler").setLevel(logging.DEBUG)
        configure_logging(log_file=None)
        assert logging.getLogger("apscheduler").level == logging.WARNING

    def test_log_message_format(self, tmp_path):
        log_file = str(tmp_path / "test.log")
        configure_logging(log_file=log_file)
        logger = logging.getLogger("stockpulse.test")
        logger.info("test message")

        content = Path(log_file).read_text()
        assert "[INFO] [stockpulse.test] test message" in content

    def test_retention_days(self, tmp_path):
        configure_logging(log_file=str(tmp_path / "test.log"), retention_days=30)
        logger = logging.getLogger("stockpulse")
        file_handler = next(h for h in logger.handlers if isinstance(h, TimedRotatingFileHandler))
        assert file_handler.backupCount == 30
