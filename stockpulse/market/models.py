"""Session model: states, weekdays, the session window and derived records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from enum import Enum, IntEnum

MINUTES_PER_DAY = 24 * 60


class SessionState(Enum):
    """Discrete trading-session phase at a given instant."""

    OPEN = "open"                    # Regular session, [open, close)
    CLOSED = "closed"                # Outside the session, or a holiday
    FINAL_CAPTURE = "final_capture"  # The single minute after close
    WEEKEND = "weekend"              # Non-trading weekday index


class Weekday(IntEnum):
    """Day-of-week indices as returned by ``date.weekday()``."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


def minute_of(value: time) -> int:
    return value.hour * 60 + value.minute


@dataclass(frozen=True)
class SessionWindow:
    """Regular session hours in exchange-local minutes since midnight.

    The final capture window is always one minute wide and starts at close.
    ``first_trading_day`` and ``last_trading_day`` form an inclusive range.
    """

    open_minute: int
    close_minute: int
    first_trading_day: Weekday = Weekday.MONDAY
    last_trading_day: Weekday = Weekday.FRIDAY

    def __post_init__(self) -> None:
        if not 0 <= self.open_minute < self.close_minute:
            raise ValueError(
                f"Session open ({self.open_minute}) must be before close ({self.close_minute})"
            )
        if self.final_capture_minute >= MINUTES_PER_DAY:
            raise ValueError(
                f"Final capture minute {self.final_capture_minute} does not fit in one day"
            )
        if self.first_trading_day > self.last_trading_day:
            raise ValueError(
                f"Empty trading week: {self.first_trading_day.name}..{self.last_trading_day.name}"
            )

    @classmethod
    def from_times(
        cls,
        open_time: time,
        close_time: time,
        first_trading_day: Weekday = Weekday.MONDAY,
        last_trading_day: Weekday = Weekday.FRIDAY,
    ) -> SessionWindow:
        return cls(minute_of(open_time), minute_of(close_time), first_trading_day, last_trading_day)

    @property
    def final_capture_minute(self) -> int:
        return self.close_minute + 1

    def is_trading_weekday(self, weekday: int) -> bool:
        return self.first_trading_day <= weekday <= self.last_trading_day


@dataclass(frozen=True)
class PollingPolicy:
    """Refresh cadence for one session state.

    ``price_interval_ms`` is ``None`` when price polling is disabled.
    """

    price_interval_ms: int | None
    news_interval_ms: int
    should_poll: bool


@dataclass(frozen=True)
class TransitionPlan:
    """Duration until the next session-state change and the state expected then."""

    milliseconds_until_change: int
    predicted_next_state: SessionState
    description: str
    degraded: bool = False


@dataclass(frozen=True)
class TimeUntilOpen:
    days: int
    hours: int
    minutes: int
    total_minutes: int


@dataclass(frozen=True)
class DataStatus:
    """Freshness of the dashboard data: LIVE, UPDATING or CLOSED."""

    label: str
    is_live: bool
    last_update: str


@dataclass(frozen=True)
class MarketSnapshot:
    """Complete market state handed to the update orchestrator."""

    state: SessionState
    is_open: bool
    policy: PollingPolicy
    data_status: DataStatus
    time_until_open: TimeUntilOpen
    reason: str
    is_holiday: bool
