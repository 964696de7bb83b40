"""Update orchestrator: keeps quotes and news fresh at the market's cadence."""

import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from typing import Any

from stockpulse.events import (
    EventBus,
    MarketStateChangedEvent,
    NewsUpdatedEvent,
    QuotesUpdatedEvent,
)
from stockpulse.market.models import MarketSnapshot, PollingPolicy, SessionState
from stockpulse.market.monitor import MarketMonitor
from stockpulse.market.session import minutes_since_midnight
from stockpulse.scheduler.scheduler import CancelHandle, TransitionScheduler
from stockpulse.utils.constants import (
    DEFAULT_TICKERS,
    FETCH_MAX_RETRIES,
    NEWS_POLL_JOB_ID,
    PRICE_POLL_JOB_ID,
)
from stockpulse.utils.log_context import log_context, reset_context, set_context
from stockpulse.utils.retry import with_retry

logger = logging.getLogger(__name__)

QuoteSource = Callable[[list[str]], Awaitable[dict[str, Any]]]
NewsSource = Callable[[list[str]], Awaitable[list[Any]]]


class StockPulseApp:
    """Main application orchestrator.

    Owns the wake handle for the next market transition and the recurring
    poll jobs. Each wake recomputes the market snapshot, adjusts polling to
    the new policy and arms a fresh wake from a fresh plan.
    """

    def __init__(
        self,
        *,
        monitor: MarketMonitor,
        scheduler: TransitionScheduler,
        event_bus: EventBus | None = None,
        quote_source: QuoteSource | None = None,
        news_source: NewsSource | None = None,
        tickers: Sequence[str] = DEFAULT_TICKERS,
    ) -> None:
        self._monitor = monitor
        self._scheduler = scheduler
        self._event_bus = event_bus
        self._quote_source = quote_source
        self._news_source = news_source
        self._tickers = list(tickers)
        # Internal state
        self._snapshot: MarketSnapshot | None = None
        self._active_policy: PollingPolicy | None = None
        self._wake: CancelHandle | None = None
        self._quotes: dict[str, Any] = {}
        self._news: list[Any] = []
        self._last_update_time: datetime | None = None

    @property
    def snapshot(self) -> MarketSnapshot | None:
        return self._snapshot

    @property
    def wake_handle(self) -> CancelHandle | None:
        return self._wake

    @property
    def quotes(self) -> dict[str, Any]:
        return dict(self._quotes)

    @property
    def news(self) -> list[Any]:
        return list(self._news)

    @property
    def last_update_time(self) -> datetime | None:
        return self._last_update_time

    async def startup(self) -> None:
        """Start the scheduler, apply the current market state and arm the first wake.

        Prices and news are fetched once before returning. Interval jobs only
        run one interval after they are added.
        """
        logger.info("Starting StockPulse for %s", ", ".join(self._tickers))
        self._scheduler.start()
        self._snapshot = self._monitor.snapshot()
        set_context(session_state=self._snapshot.state.name)
        try:
            self._configure_polling(self._snapshot.policy)
            self._schedule_next_check()
            await self.poll_prices()
            await self.poll_news()
            logger.info(
                "StockPulse startup complete: market %s (%s)",
                self._snapshot.state.name,
                self._snapshot.reason,
            )
        finally:
            reset_context()

    async def shutdown(self) -> None:
        """Cancel the outstanding wake and stop all jobs."""
        logger.info("Shutting down StockPulse...")
        self._scheduler.cancel(self._wake)
        self._wake = None
        self._scheduler.shutdown()
        self._active_policy = None
        logger.info("StockPulse shutdown complete")

    async def on_market_state_change(self) -> None:
        """Wake callback: refresh the snapshot, repoint polling, re-arm."""
        set_context(job_name="market_state_change")
        expected = self._wake.predicted_state if self._wake else None
        previous = self._snapshot.state if self._snapshot else None
        try:
            reading = self._monitor.now()
            snapshot = self._monitor.snapshot()
            self._snapshot = snapshot
            set_context(session_state=snapshot.state.name)

            if expected is not None and expected is not snapshot.state:
                logger.info("Expected %s, observed %s", expected.name, snapshot.state.name)

            if (
                expected is SessionState.FINAL_CAPTURE
                and snapshot.state is SessionState.CLOSED
                and minutes_since_midnight(reading) > self._monitor.window.final_capture_minute
            ):
                logger.warning("Final capture window missed; taking closing prices now")
                await self.poll_prices()

            if snapshot.state is not previous:
                logger.info(
                    "Market state %s -> %s",
                    previous.name if previous else "-",
                    snapshot.state.name,
                )
                self._configure_polling(snapshot.policy)
                if self._event_bus is not None:
                    await self._event_bus.emit(
                        MarketStateChangedEvent(previous=previous, snapshot=snapshot)
                    )
                if snapshot.state in (SessionState.OPEN, SessionState.FINAL_CAPTURE):
                    await self.poll_prices()
        finally:
            self._schedule_next_check()
            reset_context()

    def _schedule_next_check(self) -> None:
        plan = self._monitor.get_next_transition_plan()
        self._wake = self._scheduler.arm_once(plan, self.on_market_state_change)

    def _configure_polling(self, policy: PollingPolicy) -> None:
        if policy == self._active_policy:
            return
        if policy.price_interval_ms is None:
            self._scheduler.remove(PRICE_POLL_JOB_ID)
            logger.info("Price polling stopped (showing last known prices)")
        else:
            self._scheduler.schedule_interval(
                PRICE_POLL_JOB_ID, self.poll_prices, policy.price_interval_ms
            )
        self._scheduler.schedule_interval(NEWS_POLL_JOB_ID, self.poll_news, policy.news_interval_ms)
        self._active_policy = policy

    async def poll_prices(self) -> None:
        """Fetch quotes for all tickers; failures keep the last known quotes."""
        if self._quote_source is None:
            logger.warning("Skipping price poll: no quote source configured")
            return
        async with log_context(job_name="price_poll"):
            try:
                quotes = await self._fetch_quotes()
            except Exception:
                logger.exception("Price poll failed; keeping %d cached quotes", len(self._quotes))
                return
            fetched_at = self._monitor.now()
            self._quotes = dict(quotes)
            self._last_update_time = fetched_at
            logger.info("Updated quotes for %d tickers", len(self._quotes))
            if self._event_bus is not None:
                await self._event_bus.emit(QuotesUpdatedEvent(quotes=self.quotes, fetched_at=fetched_at))

    async def poll_news(self) -> None:
        """Fetch news for all tickers; failures keep the last known items."""
        if self._news_source is None:
            logger.warning("Skipping news poll: no news source configured")
            return
        async with log_context(job_name="news_poll"):
            try:
                items = await self._fetch_news()
            except Exception:
                logger.exception("News poll failed; keeping %d cached items", len(self._news))
                return
            fetched_at = self._monitor.now()
            self._news = list(items)
            logger.info("Updated %d news items", len(self._news))
            if self._event_bus is not None:
                await self._event_bus.emit(NewsUpdatedEvent(fetched_at=fetched_at, items=self.news))

    async def refresh(self) -> None:
        """Manual refetch of prices and news regardless of the market state."""
        state = self._snapshot.state.name if self._snapshot else "-"
        logger.info("Manual refresh requested (market %s)", state)
        await self.poll_prices()
        await self.poll_news()

    @with_retry(max_retries=FETCH_MAX_RETRIES, base_delay=1.0)
    async def _fetch_quotes(self) -> dict[str, Any]:
        return await self._quote_source(list(self._tickers))

    @with_retry(max_retries=FETCH_MAX_RETRIES, base_delay=1.0)
    async def _fetch_news(self) -> list[Any]:
        return await self._news_source(list(self._tickers))
