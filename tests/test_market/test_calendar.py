"""Tests for the NYSE holiday calendar."""

from datetime import date

import pytest

from stockpulse.market.calendar import (
    UNSCHEDULED_CLOSURE,
    NyseHolidayCalendar,
    safe_is_holiday,
)


@pytest.fixture
def calendar():
    return NyseHolidayCalendar()


class TestPublishedHolidays:
    @pytest.mark.parametrize(
        "d",
        [
            date(2026, 1, 1),    # New Year's Day
            date(2026, 1, 19),   # Martin Luther King Jr. Day
            date(2026, 4, 3),    # Good Friday
            date(2026, 11, 26),  # Thanksgiving
            date(2026, 12, 25),  # Christmas
        ],
    )
    def test_closed(self, calendar, d):
        assert calendar.is_holiday(d) is True
        assert calendar(d) is True

    @pytest.mark.parametrize(
        "d",
        [
            date(2026, 10, 19),  # ordinary Monday
            date(2026, 11, 27),  # day after Thanksgiving, early close only
            date(2026, 10, 12),  # Columbus Day, exchange stays open
        ],
    )
    def test_open(self, calendar, d):
        assert calendar.is_holiday(d) is False

    def test_holidays_in_year_sorted(self, calendar):
        closures = calendar.holidays_in(2026)
        days = [d for d, _ in closures]
        assert days == sorted(days)
        assert date(2026, 12, 25) in days
        assert all(d.year == 2026 for d in days)

    def test_next_holiday_after_date(self, calendar):
        d, name = calendar.next_holiday(date(2026, 10, 19))
        assert d == date(2026, 11, 26)
        assert "Thanksgiving" in name

    def test_next_holiday_rolls_into_next_year(self, calendar):
        d, _ = calendar.next_holiday(date(2026, 12, 25))
        assert d == date(2027, 1, 1)


class TestExtraClosures:
    def test_extra_closure_is_holiday(self):
        calendar = NyseHolidayCalendar(extra_closures=[date(2026, 10, 21)])
        assert calendar.is_holiday(date(2026, 10, 21)) is True
        assert calendar.is_holiday(date(2026, 10, 22)) is False

    def test_extra_closure_listed_for_its_year(self):
        calendar = NyseHolidayCalendar(extra_closures=[date(2026, 10, 21)])
        closures = dict(calendar.holidays_in(2026))
        assert closures[date(2026, 10, 21)] == UNSCHEDULED_CLOSURE
        assert date(2026, 10, 21) not in dict(calendar.holidays_in(2027))

    def test_extra_closure_is_next_holiday(self):
        calendar = NyseHolidayCalendar(extra_closures=[date(2026, 10, 21)])
        assert calendar.next_holiday(date(2026, 10, 19)) == (
            date(2026, 10, 21),
            UNSCHEDULED_CLOSURE,
        )


class TestSafeIsHoliday:
    def test_passes_through_answer(self):
        assert safe_is_holiday(lambda d: True, date(2026, 10, 19)) is True
        assert safe_is_holiday(lambda d: False, date(2026, 10, 19)) is False

    def test_failure_treated_as_trading_day(self, caplog):
        def broken(d):
            raise ConnectionError("calendar unreachable")

        with caplog.at_level("ERROR", logger="stockpulse.market.calendar"):
            assert safe_is_holiday(broken, date(2026, 10, 19)) is False

        record = caplog.records[-1]
        assert record.levelname == "ERROR"
        assert "2026-10-19" in record.getMessage()
        assert record.exc_info is not None
