"""Market monitor: the session model bundled behind one clock reading."""

from __future__ import annotations

import logging
from datetime import date, datetime

from stockpulse.market.calendar import HolidayPredicate, safe_is_holiday
from stockpulse.market.clock import SessionClock
from stockpulse.market.models import (
    DataStatus,
    MarketSnapshot,
    PollingPolicy,
    SessionState,
    SessionWindow,
    TimeUntilOpen,
    TransitionPlan,
)
from stockpulse.market.polling import DEFAULT_INTERVALS, PollingIntervals, policy_for
from stockpulse.market.session import (
    DEFAULT_SESSION_WINDOW,
    classify,
    is_trading_day,
    minutes_since_midnight,
    next_trading_day,
)
from stockpulse.market.transitions import at_minute, milliseconds_between, next_transition
from stockpulse.utils.constants import SCHEDULER_FALLBACK_MS

logger = logging.getLogger(__name__)

_DATA_LABELS = {
    SessionState.OPEN: "LIVE",
    SessionState.FINAL_CAPTURE: "UPDATING",
    SessionState.CLOSED: "CLOSED",
    SessionState.WEEKEND: "CLOSED",
}

_ZERO_WAIT = TimeUntilOpen(days=0, hours=0, minutes=0, total_minutes=0)


class MarketMonitor:
    """Answers session questions for the current instant.

    Every public method takes one reading from the clock; ``snapshot()``
    derives all of its fields from that single reading so they agree.
    """

    def __init__(
        self,
        clock: SessionClock,
        is_holiday: HolidayPredicate,
        window: SessionWindow = DEFAULT_SESSION_WINDOW,
        intervals: PollingIntervals = DEFAULT_INTERVALS,
        fallback_ms: int = SCHEDULER_FALLBACK_MS,
    ) -> None:
        self._clock = clock
        self._is_holiday = is_holiday
        self._window = window
        self._intervals = intervals
        self._fallback_ms = fallback_ms

    @property
    def window(self) -> SessionWindow:
        return self._window

    def now(self) -> datetime:
        return self._clock.now()

    def _holiday_checker(self) -> HolidayPredicate:
        """Guarded predicate that asks the calendar at most once per date."""
        seen: dict[date, bool] = {}

        def check(d: date) -> bool:
            if d not in seen:
                seen[d] = safe_is_holiday(self._is_holiday, d)
            return seen[d]

        return check

    def get_session_state(self) -> SessionState:
        return classify(self._clock.now(), self._holiday_checker(), self._window)

    def get_polling_policy(self) -> PollingPolicy:
        return policy_for(self.get_session_state(), self._intervals)

    def get_next_transition_plan(self) -> TransitionPlan:
        return next_transition(
            self._clock.now(), self._holiday_checker(), self._window, fallback_ms=self._fallback_ms
        )

    def time_until_open(self, reading: datetime | None = None) -> TimeUntilOpen:
        """Time left until the next regular open; all zeros while open."""
        reading = reading or self._clock.now()
        checker = self._holiday_checker()
        return self._time_until_open(reading, classify(reading, checker, self._window), checker)

    def _time_until_open(
        self, reading: datetime, state: SessionState, checker: HolidayPredicate
    ) -> TimeUntilOpen:
        if state is SessionState.OPEN:
            return _ZERO_WAIT

        today = reading.date()
        try:
            if (
                is_trading_day(today, checker, self._window)
                and minutes_since_midnight(reading) < self._window.open_minute
            ):
                target = today
            else:
                target = next_trading_day(today, checker, self._window)
        except LookupError:
            logger.warning("No upcoming trading day found after %s", today)
            return _ZERO_WAIT

        elapsed_ms = milliseconds_between(
            reading, at_minute(reading, target, self._window.open_minute)
        )
        total_minutes = elapsed_ms // 60_000
        return TimeUntilOpen(
            days=total_minutes // (24 * 60),
            hours=(total_minutes % (24 * 60)) // 60,
            minutes=total_minutes % 60,
            total_minutes=total_minutes,
        )

    def data_status(self, reading: datetime | None = None) -> DataStatus:
        reading = reading or self._clock.now()
        return _data_status(reading, classify(reading, self._holiday_checker(), self._window))

    def status_reason(self, reading: datetime | None = None) -> str:
        reading = reading or self._clock.now()
        checker = self._holiday_checker()
        return _status_reason(
            classify(reading, checker, self._window), checker(reading.date())
        )

    def snapshot(self) -> MarketSnapshot:
        """Return the complete market state for one clock reading.

        The calendar is consulted once per date, so an outage logs one error
        per snapshot rather than one per field.
        """
        reading = self._clock.now()
        checker = self._holiday_checker()
        state = classify(reading, checker, self._window)
        holiday = checker(reading.date())
        snapshot = MarketSnapshot(
            state=state,
            is_open=state in (SessionState.OPEN, SessionState.FINAL_CAPTURE),
            policy=policy_for(state, self._intervals),
            data_status=_data_status(reading, state),
            time_until_open=self._time_until_open(reading, state, checker),
            reason=_status_reason(state, holiday),
            is_holiday=holiday,
        )
        logger.debug("Market %s at %s (%s)", state.name, reading.isoformat(), snapshot.reason)
        return snapshot


def _data_status(reading: datetime, state: SessionState) -> DataStatus:
    return DataStatus(
        label=_DATA_LABELS[state],
        is_live=state in (SessionState.OPEN, SessionState.FINAL_CAPTURE),
        last_update=reading.strftime("%H:%M:%S"),
    )


def _status_reason(state: SessionState, holiday: bool) -> str:
    if holiday:
        return "NYSE Holiday"
    if state is SessionState.WEEKEND:
        return "Weekend"
    if state is SessionState.OPEN:
        return "Market Open"
    if state is SessionState.FINAL_CAPTURE:
        return "Final Capture"
    return "Outside Market Hours"
