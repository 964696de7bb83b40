"""Trading-session classification from an exchange-local clock reading."""

from datetime import date, datetime, time, timedelta

from stockpulse.market.calendar import HolidayPredicate, safe_is_holiday
from stockpulse.market.models import SessionState, SessionWindow
from stockpulse.utils.constants import MARKET_CLOSE, MARKET_OPEN, MAX_LOOKAHEAD_DAYS

DEFAULT_SESSION_WINDOW = SessionWindow.from_times(MARKET_OPEN, MARKET_CLOSE)


def minutes_since_midnight(value: datetime | time) -> int:
    """Wall-clock minutes since midnight; seconds are ignored."""
    return value.hour * 60 + value.minute


def is_trading_day(
    d: date,
    is_holiday: HolidayPredicate,
    window: SessionWindow = DEFAULT_SESSION_WINDOW,
) -> bool:
    """Check if *d* is a trading weekday that the calendar does not close."""
    return window.is_trading_weekday(d.weekday()) and not safe_is_holiday(is_holiday, d)


def next_trading_day(
    d: date,
    is_holiday: HolidayPredicate,
    window: SessionWindow = DEFAULT_SESSION_WINDOW,
) -> date:
    """Return the first trading day strictly after *d*.

    Raises:
        LookupError: If no trading day exists within ``MAX_LOOKAHEAD_DAYS``.
    """
    candidate = d
    for _ in range(MAX_LOOKAHEAD_DAYS):
        candidate += timedelta(days=1)
        if is_trading_day(candidate, is_holiday, window):
            return candidate
    raise LookupError(f"No trading day within {MAX_LOOKAHEAD_DAYS} days after {d}")


def classify(
    reading: datetime,
    is_holiday: HolidayPredicate,
    window: SessionWindow = DEFAULT_SESSION_WINDOW,
) -> SessionState:
    """Map an exchange-local reading to its session state.

    Holidays win over weekends, weekends over the time-of-day window. The
    close minute itself is outside the session; the minute after it is the
    final capture window.
    """
    if safe_is_holiday(is_holiday, reading.date()):
        return SessionState.CLOSED
    if not window.is_trading_weekday(reading.weekday()):
        return SessionState.WEEKEND

    minute = minutes_since_midnight(reading)
    if window.open_minute <= minute < window.close_minute:
        return SessionState.OPEN
    if minute == window.final_capture_minute:
        return SessionState.FINAL_CAPTURE
    return SessionState.CLOSED
