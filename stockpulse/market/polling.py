"""Polling cadence per session state."""

from dataclasses import dataclass

from stockpulse.market.models import PollingPolicy, SessionState
from stockpulse.utils.constants import (
    NEWS_INTERVAL_CLOSED_MS,
    NEWS_INTERVAL_OPEN_MS,
    PRICE_INTERVAL_LIVE_MS,
)


@dataclass(frozen=True)
class PollingIntervals:
    """Interval constants (milliseconds) the policy table is built from."""

    live_price_ms: int = PRICE_INTERVAL_LIVE_MS
    news_open_ms: int = NEWS_INTERVAL_OPEN_MS
    news_closed_ms: int = NEWS_INTERVAL_CLOSED_MS


DEFAULT_INTERVALS = PollingIntervals()


def policy_for(
    state: SessionState, intervals: PollingIntervals = DEFAULT_INTERVALS
) -> PollingPolicy:
    """Return the polling policy for *state*.

    The final capture minute polls like the open session so closing prices
    are picked up; closed and weekend states disable price polling.
    """
    if state in (SessionState.OPEN, SessionState.FINAL_CAPTURE):
        return PollingPolicy(
            price_interval_ms=intervals.live_price_ms,
            news_interval_ms=intervals.news_open_ms,
            should_poll=True,
        )
    return PollingPolicy(
        price_interval_ms=None,
        news_interval_ms=intervals.news_closed_ms,
        should_poll=False,
    )


def format_polling_interval(interval_ms: int | None) -> str:
    """Format an interval for display: ``"Disabled"``, ``"30s"`` or ``"15m"``."""
    if interval_ms is None:
        return "Disabled"
    minutes = interval_ms // 60_000
    if minutes < 1:
        return f"{interval_ms // 1000}s"
    return f"{minutes}m"
