"""Tests for log context management using contextvars."""

import logging
from pathlib import Path

import pytest

from stockpulse.utils.log_context import (
    get_job_name,
    get_session_state,
    get_ticker,
    log_context,
    reset_context,
    set_context,
)
from stockpulse.utils.logger import configure_logging


class TestSetAndGetContext:
    def teardown_method(self):
        reset_context()

    def test_defaults_are_none(self):
        reset_context()
        assert get_session_state() is None
        assert get_job_name() is None
        assert get_ticker() is None

    def test_set_and_get_session_state(self):
        set_context(session_state="OPEN")
        assert get_session_state() == "OPEN"

    def test_set_and_get_job_name(self):
        set_context(job_name="price_poll")
        assert get_job_name() == "price_poll"

    def test_set_and_get_ticker(self):
        set_context(ticker="TSLA")
        assert get_ticker() == "TSLA"

    def test_partial_update_preserves_other_fields(self):
        set_context(session_state="OPEN", job_name="price_poll")
        set_context(ticker="OKLO")
        assert get_session_state() == "OPEN"
        assert get_job_name() == "price_poll"
        assert get_ticker() == "OKLO"

    def test_none_values_are_skipped(self):
        set_context(ticker="TSLA")
        set_context(ticker=None)
        # None is skipped, so the value should remain
        assert get_ticker() == "TSLA"

    def test_reset_clears_all(self):
        set_context(session_state="CLOSED", job_name="news_poll", ticker="TSLA")
        reset_context()
        assert get_session_state() is None
        assert get_job_name() is None
        assert get_ticker() is None

    def test_unknown_field_raises_value_error(self):
        with pytest.raises(ValueError, match="Unknown context field"):
            set_context(unknown_field="value")


class TestLogContext:
    def teardown_method(self):
        reset_context()

    async def test_sets_context_inside(self):
        async with log_context(ticker="TSLA"):
            assert get_ticker() == "TSLA"

    async def test_resets_after_exit(self):
        async with log_context(ticker="TSLA"):
            pass
        assert get_ticker() is None

    async def test_preserves_outer_context(self):
        set_context(session_state="OPEN")
        async with log_context(ticker="TSLA"):
            assert get_session_state() == "OPEN"
            assert get_ticker() == "TSLA"
        assert get_session_state() == "OPEN"
        assert get_ticker() is None

    async def test_nests_correctly(self):
        async with log_context(ticker="OUTER"):
            assert get_ticker() == "OUTER"
            async with log_context(ticker="INNER"):
                assert get_ticker() == "INNER"
            assert get_ticker() == "OUTER"

    async def test_resets_on_exception(self):
        with pytest.raises(RuntimeError):
            async with log_context(ticker="TSLA"):
                raise RuntimeError("test error")
        assert get_ticker() is None

    async def test_unknown_field_leaves_context_untouched(self):
        with pytest.raises(ValueError, match="Unknown context field"):
            async with log_context(job_name="price_poll", bad_field="value"):
                pass
        assert get_job_name() is None


class TestFormatterIntegration:
    def teardown_method(self):
        reset_context()
        logger = logging.getLogger("stockpulse")
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    def test_shows_dash_without_context(self, tmp_path):
        log_file = str(tmp_path / "test.log")
        configure_logging(log_file=log_file)
        logger = logging.getLogger("stockpulse.test")
        logger.info("no context")

        content = Path(log_file).read_text()
        assert "[-] [-] [-] [INFO]" in content

    def test_shows_values_with_context(self, tmp_path):
        log_file = str(tmp_path / "test.log")
        configure_logging(log_file=log_file)
        logger = logging.getLogger("stockpulse.test")
        set_context(session_state="FINAL_CAPTURE", job_name="price_poll", ticker="TSLA")
        logger.info("with context")

        content = Path(log_file).read_text()
        assert "[FINAL_CAPTURE] [price_poll] [TSLA] [INFO]" in content
