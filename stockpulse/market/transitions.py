"""Exact timing of the next session-state change.

Branching is done on exchange-local minutes since midnight. Target instants
are whole minutes on the exchange's wall clock; the returned duration is the
real elapsed time to the target, so a DST switch over a weekend does not
shift the wake-up by an hour.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone

from stockpulse.market.calendar import HolidayPredicate
from stockpulse.market.models import SessionState, SessionWindow, TransitionPlan
from stockpulse.market.session import (
    DEFAULT_SESSION_WINDOW,
    classify,
    is_trading_day,
    minutes_since_midnight,
    next_trading_day,
)
from stockpulse.utils.constants import ET_LABEL, SCHEDULER_FALLBACK_MS

logger = logging.getLogger(__name__)

_ONE_MS = timedelta(milliseconds=1)


def _format_minute(minute: int) -> str:
    clock_time = time(minute // 60, minute % 60)
    return f"{clock_time.strftime('%I:%M %p').lstrip('0')} {ET_LABEL}"


def _day_label(today: date, target: date) -> str:
    if target == today + timedelta(days=1):
        return "tomorrow"
    return target.strftime("%A")


def at_minute(reading: datetime, day: date, minute: int) -> datetime:
    """Build the exchange-local instant at *minute* on *day*, in *reading*'s zone."""
    return datetime(
        day.year, day.month, day.day, minute // 60, minute % 60, tzinfo=reading.tzinfo
    )


def milliseconds_between(start: datetime, end: datetime) -> int:
    # Aware datetimes sharing a tzinfo subtract as wall time; go through UTC.
    if start.tzinfo is not None:
        start = start.astimezone(timezone.utc)
        end = end.astimezone(timezone.utc)
    return -(-(end - start) // _ONE_MS)


def _plan(
    reading: datetime, day: date, minute: int, state: SessionState, description: str
) -> TransitionPlan:
    return TransitionPlan(
        milliseconds_until_change=milliseconds_between(reading, at_minute(reading, day, minute)),
        predicted_next_state=state,
        description=description,
    )


def _compute_plan(
    reading: datetime, is_holiday: HolidayPredicate, window: SessionWindow
) -> TransitionPlan:
    today = reading.date()
    minute = minutes_since_midnight(reading)
    open_label = _format_minute(window.open_minute)

    if not is_trading_day(today, is_holiday, window):
        target = next_trading_day(today, is_holiday, window)
        return _plan(
            reading, target, window.open_minute, SessionState.OPEN,
            f"Market opens {_day_label(today, target)} at {open_label}",
        )

    if minute < window.open_minute:
        return _plan(
            reading, today, window.open_minute, SessionState.OPEN,
            f"Market opens today at {open_label}",
        )

    if minute < window.close_minute:
        return _plan(
            reading, today, window.close_minute, SessionState.FINAL_CAPTURE,
            f"Market closes today at {_format_minute(window.close_minute)}",
        )

    if minute == window.close_minute:
        return _plan(
            reading, today, window.final_capture_minute, SessionState.FINAL_CAPTURE,
            f"Final capture window at {_format_minute(window.final_capture_minute)}",
        )

    if minute == window.final_capture_minute:
        return _plan(
            reading, today, window.final_capture_minute + 1, SessionState.CLOSED,
            f"Final capture window ends at {_format_minute(window.final_capture_minute + 1)}",
        )

    target = next_trading_day(today, is_holiday, window)
    return _plan(
        reading, target, window.open_minute, SessionState.OPEN,
        f"Market opens {_day_label(today, target)} at {open_label}",
    )


def next_transition(
    reading: datetime,
    is_holiday: HolidayPredicate,
    window: SessionWindow = DEFAULT_SESSION_WINDOW,
    *,
    fallback_ms: int = SCHEDULER_FALLBACK_MS,
) -> TransitionPlan:
    """Compute when the session state next changes and what it changes to.

    Never raises and never returns a non-positive duration: on any internal
    failure a degraded plan due in *fallback_ms* is returned, predicting the
    current state, so the caller is always re-armed.
    """
    current = classify(reading, is_holiday, window)
    try:
        plan = _compute_plan(reading, is_holiday, window)
        if plan.milliseconds_until_change <= 0:
            raise ValueError(
                f"Non-positive duration {plan.milliseconds_until_change} ms at {reading}"
            )
    except Exception:
        logger.exception("Transition scheduler failed, using %d ms fallback", fallback_ms)
        return TransitionPlan(
            milliseconds_until_change=fallback_ms,
            predicted_next_state=current,
            description=f"Degraded: re-checking in {fallback_ms // 1000}s",
            degraded=True,
        )

    logger.debug(
        "Next change: %s (%s in %d ms)",
        plan.description,
        plan.predicted_next_state.name,
        plan.milliseconds_until_change,
    )
    return plan
