"""Tests for gradebook.unlock.calendar."""

from __future__ import annotations

import datetime
import zoneinfo

import pytest

from gradebook.unlock.calendar import business_days_elapsed

MONDAY = datetime.date(2026, 10, 12)


def _d(days: int) -> datetime.date:
    return MONDAY + datetime.timedelta(days=days)


class TestBusinessDaysElapsed(object):
    @pytest.mark.parametrize(
        "start, now, expected",
        [
            (MONDAY, MONDAY, 0),
            (MONDAY, _d(1), 1),
            (MONDAY, _d(3), 3),
            (MONDAY, _d(4), 4),
            # the weekend adds nothing
            (MONDAY, _d(6), 4),
            (MONDAY, _d(7), 5),
            (_d(4), _d(7), 1),
            (_d(5), _d(6), 0),
            (_d(5), _d(7), 0),
            (MONDAY, _d(14), 10),
        ],
    )
    def test_counts_weekdays_after_start_day(self, start: datetime.date, now: datetime.date, expected: int) -> None:
        assert business_days_elapsed(start, now) == expected

    def test_now_before_start_is_zero(self) -> None:
        assert business_days_elapsed(_d(3), MONDAY) == 0

    def test_time_of_day_is_ignored(self) -> None:
        start = datetime.datetime(2026, 10, 12, 23, 59)
        now = datetime.datetime(2026, 10, 13, 0, 1)
        assert business_days_elapsed(start, now) == 1

    def test_instants_are_reckoned_in_timezone(self) -> None:
        tz = zoneinfo.ZoneInfo("America/Santiago")
        # Tuesday 02:00 UTC is still Monday evening in Santiago
        start = datetime.datetime(2026, 10, 12, 12, 0, tzinfo=datetime.UTC)
        now = datetime.datetime(2026, 10, 13, 2, 0, tzinfo=datetime.UTC)
        assert business_days_elapsed(start, now) == 1
        assert business_days_elapsed(start, now, tz) == 0

    def test_mixes_dates_and_datetimes(self) -> None:
        now = datetime.datetime(2026, 10, 15, 8, 0, tzinfo=datetime.UTC)
        assert business_days_elapsed(MONDAY, now) == 3
