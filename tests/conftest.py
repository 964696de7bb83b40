"""Shared test fixtures for StockPulse."""

from datetime import datetime

import pytest

from stockpulse.market.clock import SessionClock
from stockpulse.utils.constants import ET


class FakeTimeSource:
    """Clock source returning a settable instant."""

    def __init__(self, value: datetime) -> None:
        self.value = value

    def __call__(self) -> datetime:
        return self.value

    def set(self, value: datetime) -> None:
        self.value = value


@pytest.fixture
def et():
    """Factory building exchange-local (America/New_York) datetimes."""

    def _et(year, month, day, hour=0, minute=0, second=0):
        return datetime(year, month, day, hour, minute, second, tzinfo=ET)

    return _et


@pytest.fixture
def no_holidays():
    """Holiday predicate for an exchange that never closes on weekdays."""
    return lambda d: False


@pytest.fixture
def make_clock():
    """Factory returning ``(SessionClock, FakeTimeSource)`` frozen at *value*."""

    def _make(value: datetime):
        source = FakeTimeSource(value)
        return SessionClock(source=source), source

    return _make


@pytest.fixture
def clean_env(monkeypatch):
    """Remove StockPulse settings from the environment so defaults apply."""
    for name in (
        "LOG_LEVEL",
        "LOG_FILE",
        "LOG_RETENTION_DAYS",
        "MARKET_TIMEZONE",
        "EXTRA_MARKET_CLOSURES",
        "TICKERS",
        "QUOTE_SOURCE",
        "NEWS_SOURCE",
        "PRICE_POLL_INTERVAL_MS",
        "NEWS_POLL_INTERVAL_OPEN_MS",
        "NEWS_POLL_INTERVAL_CLOSED_MS",
        "SCHEDULER_FALLBACK_MS",
    ):
        monkeypatch.delenv(name, raising=False)
