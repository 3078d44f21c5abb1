"""Tests for timestamp helpers."""
from datetime import date, datetime, timedelta, timezone

import pytest

from wealth_tracker.dates import format_period, format_timestamp, parse_timestamp, years_between


class TestTimestamps:
    def test_parse_z_suffix(self):
        parsed = parse_timestamp("2024-06-30T23:59:59.999Z")

        assert parsed == datetime(2024, 6, 30, 23, 59, 59, 999000, tzinfo=timezone.utc)
        assert parsed.utcoffset() == timedelta(0)

    def test_offsets_are_converted_to_utc(self):
        parsed = parse_timestamp("2024-07-01T09:30:00+10:00")

        assert parsed == datetime(2024, 6, 30, 23, 30, tzinfo=timezone.utc)

    def test_naive_values_are_taken_as_utc(self):
        assert parse_timestamp(datetime(2024, 1, 1)) == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert parse_timestamp(date(2024, 1, 1)) == datetime(2024, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_values(self, value):
        assert parse_timestamp(value) is None

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday-ish")

    def test_format_uses_milliseconds_and_z(self):
        moment = datetime(2024, 7, 1, 0, 0, 0, 123456, tzinfo=timezone.utc)

        assert format_timestamp(moment) == "2024-07-01T00:00:00.123Z"
        assert format_timestamp(None) is None

    def test_years_between_uses_julian_year(self):
        start = datetime(2020, 1, 1, tzinfo=timezone.utc)

        assert years_between(start, start + timedelta(days=365.25)) == 1.0


class TestFormatPeriod:
    @pytest.mark.parametrize(
        "start, end, expected",
        [
            (date(2024, 1, 1), date(2024, 1, 1), "0 days"),
            (date(2024, 1, 1), date(2024, 1, 2), "1 day"),
            (date(2023, 1, 1), date(2024, 3, 1), "1 year and 2 months"),
            (date(2022, 1, 1), date(2024, 2, 4), "2 years, 1 month and 3 days"),
        ],
    )
    def test_format_period(self, start, end, expected):
        assert format_period(start, end) == expected
