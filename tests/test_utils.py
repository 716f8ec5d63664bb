"""Tests for the utils module."""

from datetime import date, datetime, timedelta, timezone

import pytest

from quietly.errors import ValidationError
from quietly.utils import (
    ensure_utc,
    get_timezone,
    local_date,
    month_bounds,
    parse_iso,
    start_of_day,
    to_iso,
    utc_now,
    week_bounds,
    year_bounds,
)

PLUS_TWO = timezone(timedelta(hours=2))


class TestTimestamps:
    """Tests for stored timestamp helpers."""

    def test_utc_now_whole_seconds(self):
        now = utc_now()
        assert now.tzinfo == timezone.utc
        assert now.microsecond == 0

    def test_ensure_utc_naive(self):
        assert ensure_utc(datetime(2024, 1, 1, 12)) == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)

    def test_ensure_utc_converts(self):
        value = datetime(2024, 1, 1, 12, tzinfo=PLUS_TWO)
        assert ensure_utc(value).hour == 10

    def test_to_iso_fixed_width(self):
        value = datetime(2024, 3, 15, 10, 0, 0, 999, tzinfo=timezone.utc)
        assert to_iso(value) == "2024-03-15T10:00:00+00:00"

    def test_to_iso_normalizes_offset(self):
        value = datetime(2024, 3, 15, 12, 0, tzinfo=PLUS_TWO)
        assert to_iso(value) == "2024-03-15T10:00:00+00:00"

    def test_to_iso_sorts_chronologically(self):
        values = [datetime(2024, 3, 15, h, tzinfo=PLUS_TWO) for h in (9, 1, 23)]
        assert sorted(to_iso(v) for v in values) == [to_iso(v) for v in sorted(values)]

    def test_parse_iso(self):
        parsed = parse_iso("2024-03-15T10:00:00+00:00")
        assert parsed == datetime(2024, 3, 15, 10, tzinfo=timezone.utc)

    def test_parse_iso_empty(self):
        assert parse_iso(None) is None
        assert parse_iso("") is None


class TestTimezones:
    """Tests for timezone resolution and calendar helpers."""

    def test_utc(self):
        assert get_timezone("UTC") is timezone.utc
        assert get_timezone("utc") is timezone.utc

    def test_unknown(self):
        with pytest.raises(ValidationError, match="Mars/Olympus_Mons"):
            get_timezone("Mars/Olympus_Mons")

    def test_local_date(self):
        value = datetime(2024, 3, 15, 23, 30, tzinfo=timezone.utc)
        assert local_date(value, timezone.utc) == date(2024, 3, 15)
        assert local_date(value, PLUS_TWO) == date(2024, 3, 16)

    def test_start_of_day(self):
        assert start_of_day(date(2024, 3, 16), PLUS_TWO) == datetime(
            2024, 3, 15, 22, tzinfo=timezone.utc
        )

    def test_week_bounds_on_sunday(self):
        sunday = datetime(2024, 3, 17, 18, tzinfo=timezone.utc)
        start, end = week_bounds(sunday, timezone.utc)
        assert start == datetime(2024, 3, 11, tzinfo=timezone.utc)
        assert end == datetime(2024, 3, 18, tzinfo=timezone.utc)

    def test_month_bounds_february_leap_year(self):
        start, end = month_bounds(datetime(2024, 2, 29, 12, tzinfo=timezone.utc), timezone.utc)
        assert (end - start).days == 29

    def test_year_bounds(self):
        start, end = year_bounds(datetime(2024, 6, 1, tzinfo=timezone.utc), PLUS_TWO)
        assert start == datetime(2023, 12, 31, 22, tzinfo=timezone.utc)
        assert end == datetime(2024, 12, 31, 22, tzinfo=timezone.utc)
