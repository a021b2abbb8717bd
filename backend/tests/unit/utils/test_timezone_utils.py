#!/usr/bin/env python3
"""
Tests for store-local time arithmetic, DST handling and business hours.
"""

from datetime import datetime, timezone

import pytest

from ldgrowth.exceptions import TimezoneOperationError
from ldgrowth.models.store_model import BusinessHours
from ldgrowth.utils.time_utils import validate_timezone
from ldgrowth.utils.timezone_utils import (
    adjust_to_business_day,
    adjust_to_business_hours,
    get_end_of_day,
    get_start_of_day,
    get_store_business_hours,
    is_dst,
    is_within_business_hours,
    retreat_to_business_hours,
    to_store_local_time,
    to_utc,
)

NEW_YORK = "America/New_York"
HOURS = BusinessHours(start=9, end=17)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.mark.unit
class TestConversions:
    def test_local_and_utc_are_inverse(self):
        instant = utc(2025, 3, 9, 6, 30)  # 01:30 EST, half an hour before the DST jump

        local = to_store_local_time(instant, NEW_YORK)

        assert local.hour == 1
        assert to_utc(local, NEW_YORK) == instant

    def test_naive_input_to_utc_is_local_wall_time(self):
        assert to_utc(datetime(2025, 7, 1, 9, 0), NEW_YORK) == utc(2025, 7, 1, 13, 0)

    def test_start_and_end_of_local_day(self):
        # 02:00 UTC on the 15th is still the 14th in New York
        instant = utc(2025, 5, 15, 2, 0)

        assert get_start_of_day(instant, NEW_YORK) == utc(2025, 5, 14, 4, 0)
        end = get_end_of_day(instant, NEW_YORK)
        assert to_store_local_time(end, NEW_YORK).date().isoformat() == "2025-05-14"
        assert end > get_start_of_day(instant, NEW_YORK)

    def test_invalid_timezone_raises_with_context(self):
        with pytest.raises(TimezoneOperationError) as exc_info:
            to_store_local_time(utc(2025, 1, 1), "Mars/Olympus_Mons")

        assert exc_info.value.context["function"] == "to_store_local_time"
        assert exc_info.value.context["store_timezone"] == "Mars/Olympus_Mons"


@pytest.mark.unit
class TestDaylightSaving:
    @pytest.mark.parametrize(
        "instant,store_timezone,expected",
        [
            (utc(2025, 7, 1, 12), NEW_YORK, True),
            (utc(2025, 1, 15, 12), NEW_YORK, False),
            (utc(2025, 1, 15, 12), "Australia/Sydney", True),
            (utc(2025, 7, 1, 12), "Australia/Sydney", False),
            (utc(2025, 7, 1, 12), "Asia/Tokyo", False),
        ],
    )
    def test_is_dst(self, instant, store_timezone, expected):
        assert is_dst(instant, store_timezone) is expected

    def test_business_hours_follow_dst(self):
        winter = get_store_business_hours(utc(2025, 1, 15, 12), NEW_YORK, HOURS)
        summer = get_store_business_hours(utc(2025, 7, 15, 12), NEW_YORK, HOURS)

        assert winter.start == utc(2025, 1, 15, 14)
        assert summer.start == utc(2025, 7, 15, 13)
        assert summer.end == utc(2025, 7, 15, 21)


@pytest.mark.unit
class TestBusinessHours:
    """2025-05-16 is a Friday; New York is UTC-4 in May."""

    def test_saturday_moves_to_monday_same_local_time(self):
        saturday_noon = utc(2025, 5, 17, 16)

        assert adjust_to_business_hours(saturday_noon, NEW_YORK, HOURS) == utc(
            2025, 5, 19, 16
        )

    def test_saturday_night_moves_to_tuesday_opening(self):
        saturday_night = utc(2025, 5, 18, 2)  # 22:00 local on Saturday

        assert adjust_to_business_hours(saturday_night, NEW_YORK, HOURS) == utc(
            2025, 5, 20, 13
        )

    def test_before_opening_clamps_to_opening(self):
        assert adjust_to_business_hours(utc(2025, 5, 14, 10), NEW_YORK, HOURS) == utc(
            2025, 5, 14, 13
        )

    def test_friday_after_closing_moves_to_monday(self):
        friday_evening = utc(2025, 5, 16, 23)

        assert adjust_to_business_hours(friday_evening, NEW_YORK, HOURS) == utc(
            2025, 5, 19, 13
        )

    def test_inside_hours_is_unchanged(self):
        instant = utc(2025, 5, 14, 15, 30)

        assert adjust_to_business_hours(instant, NEW_YORK, HOURS) == instant
        assert is_within_business_hours(instant, NEW_YORK, HOURS)

    def test_closing_hour_is_inclusive(self):
        assert is_within_business_hours(utc(2025, 5, 14, 21), NEW_YORK, HOURS)
        assert not is_within_business_hours(utc(2025, 5, 14, 21, 1), NEW_YORK, HOURS)

    def test_weekend_is_never_within_hours(self):
        assert not is_within_business_hours(utc(2025, 5, 17, 15), NEW_YORK, HOURS)

    def test_retreat_from_sunday_to_friday_closing(self):
        assert retreat_to_business_hours(utc(2025, 5, 18, 15), NEW_YORK, HOURS) == utc(
            2025, 5, 16, 21
        )

    def test_retreat_from_monday_early_morning(self):
        assert retreat_to_business_hours(utc(2025, 5, 19, 11), NEW_YORK, HOURS) == utc(
            2025, 5, 16, 21
        )

    def test_adjust_to_business_day_keeps_local_time(self):
        assert adjust_to_business_day(utc(2025, 5, 18, 15), NEW_YORK) == utc(
            2025, 5, 19, 15
        )

    @pytest.mark.parametrize("hour", range(0, 24, 3))
    def test_adjusted_dates_are_always_within_hours(self, hour):
        for day in range(12, 19):
            adjusted = adjust_to_business_hours(utc(2025, 5, day, hour), NEW_YORK, HOURS)
            assert is_within_business_hours(adjusted, NEW_YORK, HOURS)


@pytest.mark.unit
class TestValidateTimezone:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("America/New_York", True),
            ("Australia/Sydney", True),
            ("UTC", True),
            ("Mars/Olympus_Mons", False),
            ("", False),
            (None, False),
        ],
    )
    def test_validate_timezone(self, name, expected):
        assert validate_timezone(name) is expected
