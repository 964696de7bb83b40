"""StockPulse application entry point."""

import asyncio
import logging
import signal as signal_module
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from stockpulse.config import AppConfig
from stockpulse.events import EventBus
from stockpulse.market.calendar import NyseHolidayCalendar
from stockpulse.market.clock import SessionClock
from stockpulse.market.monitor import MarketMonitor
from stockpulse.scheduler.lifecycle import NewsSource, QuoteSource, StockPulseApp
from stockpulse.scheduler.scheduler import TransitionScheduler
from stockpulse.utils.constants import ET
from stockpulse.utils.logger import configure_logging

logger = logging.getLogger(__name__)


def create_app(
    config: AppConfig,
    *,
    quote_source: QuoteSource | None = None,
    news_source: NewsSource | None = None,
    event_bus: EventBus | None = None,
) -> StockPulseApp:
    """Wire all components together and return a StockPulseApp.

    Sources passed here take precedence over the import paths in *config*.
    """
    calendar = NyseHolidayCalendar(extra_closures=config.extra_market_closures)
    clock = SessionClock(timezone=config.market_timezone)
    monitor = MarketMonitor(
        clock=clock,
        is_holiday=calendar,
        intervals=config.polling_intervals,
        fallback_ms=config.scheduler_fallback_ms,
    )

    try:
        tz = ZoneInfo(config.market_timezone)
    except ZoneInfoNotFoundError:
        logger.warning("Unknown timezone %s; scheduling in %s", config.market_timezone, ET.key)
        tz = ET
    scheduler = TransitionScheduler(tz=tz)

    return StockPulseApp(
        monitor=monitor,
        scheduler=scheduler,
        event_bus=event_bus or EventBus(),
        quote_source=quote_source if quote_source is not None else config.quote_source,
        news_source=news_source if news_source is not None else config.news_source,
        tickers=config.tickers,
    )


async def main() -> None:
    """Application entry point."""
    config = AppConfig()
    configure_logging(
        level=config.log_level,
        log_file=config.log_file,
        retention_days=config.log_retention_days,
    )

    app = create_app(config)

    loop = asyncio.get_running_loop()
    stop_requested = asyncio.Event()

    for sig in (signal_module.SIGINT, signal_module.SIGTERM):
        loop.add_signal_handler(sig, stop_requested.set)

    await app.startup()

    try:
        while not stop_requested.is_set():
            await asyncio.sleep(1)
    except asyncio.CancelledError:
        pass
    finally:
        await app.shutdown()
        for sig in (signal_module.SIGINT, signal_module.SIGTERM):
            loop.remove_signal_handler(sig)


def run() -> None:
    """Console-script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
