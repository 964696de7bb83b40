"""Application configuration loaded from environment variables."""

from datetime import date

from pydantic import Field, ImportString, model_validator
from pydantic_settings import BaseSettings

from stockpulse.market.polling import PollingIntervals
from stockpulse.utils.constants import (
    DEFAULT_TICKERS,
    EXCHANGE_TIMEZONE,
    NEWS_INTERVAL_CLOSED_MS,
    NEWS_INTERVAL_OPEN_MS,
    PRICE_INTERVAL_LIVE_MS,
    SCHEDULER_FALLBACK_MS,
)


class AppConfig(BaseSettings):
    """Application configuration loaded from .env file and environment variables."""

    # Logging
    log_level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_file: str | None = Field(default="log/stockpulse.log", description="Path to the rotating log file")
    log_retention_days: int = Field(default=7, description="Rotated log files to keep")

    # Market
    market_timezone: str = Field(default=EXCHANGE_TIMEZONE, description="IANA zone of the exchange")
    extra_market_closures: list[date] = Field(
        default_factory=list,
        description="Unscheduled full-day closures missing from the NYSE calendar",
    )

    # Dashboard
    tickers: list[str] = Field(default_factory=lambda: list(DEFAULT_TICKERS))
    quote_source: ImportString | None = Field(
        default=None,
        description="Import path of the async quote fetcher, e.g. mypkg.feeds:fetch_quotes",
    )
    news_source: ImportString | None = Field(
        default=None,
        description="Import path of the async news fetcher, e.g. mypkg.feeds:fetch_news",
    )

    # Polling (milliseconds)
    price_poll_interval_ms: int = Field(default=PRICE_INTERVAL_LIVE_MS, description="Price polling while open")
    news_poll_interval_open_ms: int = Field(default=NEWS_INTERVAL_OPEN_MS, description="News polling while open")
    news_poll_interval_closed_ms: int = Field(default=NEWS_INTERVAL_CLOSED_MS, description="News polling while closed")
    scheduler_fallback_ms: int = Field(
        default=SCHEDULER_FALLBACK_MS,
        description="Re-check delay when the transition scheduler degrades",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @model_validator(mode="after")
    def _validate_intervals(self) -> "AppConfig":
        for name in (
            "price_poll_interval_ms",
            "news_poll_interval_open_ms",
            "news_poll_interval_closed_ms",
            "scheduler_fallback_ms",
        ):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        return self

    @property
    def polling_intervals(self) -> PollingIntervals:
        return PollingIntervals(
            live_price_ms=self.price_poll_interval_ms,
            news_open_ms=self.news_poll_interval_open_ms,
            news_closed_ms=self.news_poll_interval_closed_ms,
        )
