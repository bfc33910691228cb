"""Tests for business-week utilities."""

from datetime import date, datetime, timedelta

import pytest
import pytz

from time_utils import (
    LOCAL_TZ, format_week_range, is_same_week, navigate_week, parse_date,
    week_bounds, week_start, weeks_between,
)


class TestWeekBounds:

    def test_wednesday_maps_to_previous_saturday(self):
        bounds = week_bounds(date(2025, 11, 12))
        assert bounds.start == datetime(2025, 11, 8, 0, 0, 0)
        assert bounds.end == datetime(2025, 11, 14, 23, 59, 59, 999999)

    def test_saturday_starts_its_own_week(self):
        assert week_start(date(2025, 11, 8)) == date(2025, 11, 8)

    def test_friday_late_evening_stays_in_week(self):
        bounds = week_bounds(datetime(2025, 11, 14, 23, 59, 59))
        assert bounds.start.date() == date(2025, 11, 8)
        assert bounds.start.weekday() == 5
        assert bounds.end.weekday() == 4

    def test_bounds_are_idempotent(self):
        for offset in range(14):
            d = datetime(2025, 11, 1, 15, 30) + timedelta(days=offset)
            start = week_bounds(d).start
            assert week_bounds(start).start == start

    def test_aware_datetime_uses_local_timezone(self):
        # 2025-11-08 01:00 UTC is still Friday evening in Buenos Aires (UTC-3)
        moment = pytz.utc.localize(datetime(2025, 11, 8, 1, 0))
        bounds = week_bounds(moment)
        assert bounds.start.tzinfo is not None
        assert bounds.start.date() == date(2025, 11, 1)
        assert bounds.start == LOCAL_TZ.localize(datetime(2025, 11, 1))


class TestWeekNavigation:

    def test_weeks_between_is_absolute(self):
        a, b = date(2025, 11, 1), date(2025, 11, 20)
        assert weeks_between(a, b) == 2
        assert weeks_between(b, a) == 2

    def test_weeks_between_same_week(self):
        assert weeks_between(date(2025, 11, 8), date(2025, 11, 14)) == 0

    def test_navigate_week(self):
        d = date(2025, 11, 12)
        assert navigate_week(d, "next") == date(2025, 11, 19)
        assert navigate_week(d, "prev") == date(2025, 11, 5)
        assert navigate_week(d, -1) == date(2025, 11, 5)

    def test_navigate_week_rejects_unknown_direction(self):
        with pytest.raises(ValueError):
            navigate_week(date(2025, 11, 12), "sideways")

    def test_is_same_week(self):
        assert is_same_week(date(2025, 11, 8), date(2025, 11, 14))
        assert not is_same_week(date(2025, 11, 14), date(2025, 11, 15))


class TestFormatting:

    def test_format_week_range(self):
        bounds = week_bounds(date(2025, 11, 12))
        assert format_week_range(bounds.start, bounds.end) == "08/11 - 14/11"

    def test_parse_date_accepts_both_separators(self):
        assert parse_date("2025-11-12") == date(2025, 11, 12)
        assert parse_date("2025/11/12") == date(2025, 11, 12)
        assert parse_date("2025-11-12T10:00:00Z") == date(2025, 11, 12)
