"""Market session model: calendar, clock, state machine, polling and transitions."""

from stockpulse.market.calendar import HolidayPredicate, NyseHolidayCalendar, safe_is_holiday
from stockpulse.market.clock import SessionClock
from stockpulse.market.models import (
    DataStatus,
    MarketSnapshot,
    PollingPolicy,
    SessionState,
    SessionWindow,
    TimeUntilOpen,
    TransitionPlan,
    Weekday,
)
from stockpulse.market.monitor import MarketMonitor
from stockpulse.market.polling import PollingIntervals, format_polling_interval, policy_for
from stockpulse.market.session import DEFAULT_SESSION_WINDOW, classify
from stockpulse.market.transitions import next_transition

__all__ = [
    "DEFAULT_SESSION_WINDOW",
    "DataStatus",
    "HolidayPredicate",
    "MarketMonitor",
    "MarketSnapshot",
    "NyseHolidayCalendar",
    "PollingIntervals",
    "PollingPolicy",
    "SessionClock",
    "SessionState",
    "SessionWindow",
    "TimeUntilOpen",
    "TransitionPlan",
    "Weekday",
    "classify",
    "format_polling_interval",
    "next_transition",
    "policy_for",
    "safe_is_holiday",
]
