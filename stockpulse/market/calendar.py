"""NYSE holiday calendar and the fail-open holiday guard."""

import logging
from collections.abc import Callable, Iterable
from datetime import date

import holidays

logger = logging.getLogger(__name__)

HolidayPredicate = Callable[[date], bool]

UNSCHEDULED_CLOSURE = "Unscheduled closure"


class NyseHolidayCalendar:
    """NYSE full-day closures from the ``holidays`` financial calendar.

    ``extra_closures`` adds days the published calendar does not know about
    (national days of mourning, weather closures). Instances are callable so
    they can be passed anywhere a ``HolidayPredicate`` is expected.
    """

    def __init__(self, extra_closures: Iterable[date] = ()) -> None:
        self._holidays = holidays.NYSE()
        self._extra_closures = frozenset(extra_closures)

    def __call__(self, d: date) -> bool:
        return self.is_holiday(d)

    def is_holiday(self, d: date) -> bool:
        return d in self._extra_closures or d in self._holidays

    def holidays_in(self, year: int) -> list[tuple[date, str]]:
        """Return all closures for *year* sorted by date."""
        closures = dict(holidays.NYSE(years=year).items())
        for d in self._extra_closures:
            if d.year == year:
                closures.setdefault(d, UNSCHEDULED_CLOSURE)
        return sorted(closures.items())

    def next_holiday(self, after: date) -> tuple[date, str] | None:
        """Return the first closure strictly after *after*, looking into next year."""
        for year in (after.year, after.year + 1):
            for d, name in self.holidays_in(year):
                if d > after:
                    return d, name
        return None


def safe_is_holiday(predicate: HolidayPredicate, d: date) -> bool:
    """Ask *predicate* about *d*, treating any failure as "not a holiday".

    A calendar outage must never keep the market closed, so errors are logged
    and the day is treated as a normal trading day.
    """
    try:
        return bool(predicate(d))
    except Exception:
        logger.exception("Holiday check failed for %s; treating as a trading day", d)
        return False
