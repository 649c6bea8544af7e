"""
Tests for app/services/timesheets/helpers.py - task ids, dates and hours.
"""
from datetime import date, datetime

import pytest


class TestTaskIds:
    """Task id formatting."""

    def test_format_pads_to_three_digits(self):
        from app.services.timesheets.helpers import format_task_number

        assert format_task_number(7) == "TASK007"
        assert format_task_number(42) == "TASK042"

    def test_format_keeps_longer_numbers(self):
        from app.services.timesheets.helpers import format_task_number

        assert format_task_number(150) == "TASK150"
        assert format_task_number(1234) == "TASK1234"

    def test_generate_task_id_follows_current_count(self):
        from app.services.timesheets.helpers import generate_task_id

        assert generate_task_id(0) == "TASK001"
        assert generate_task_id(9) == "TASK010"


class TestRequestNumber:
    """Six digit request numbers."""

    def test_request_number_has_six_digits(self):
        from app.services.timesheets.helpers import generate_request_number

        for _ in range(50):
            number = generate_request_number()
            assert 100000 <= number <= 999999


class TestTransformDate:
    """Date normalisation to YYYY-MM-DD."""

    def test_iso_string_passes_through(self):
        from app.services.timesheets.helpers import transform_date_to_yyyy_mm_dd

        assert transform_date_to_yyyy_mm_dd("2025-03-01") == "2025-03-01"

    def test_day_first_when_first_part_exceeds_twelve(self):
        from app.services.timesheets.helpers import transform_date_to_yyyy_mm_dd

        assert transform_date_to_yyyy_mm_dd("25/03/2025") == "2025-03-25"

    def test_month_first_when_ambiguous(self):
        from app.services.timesheets.helpers import transform_date_to_yyyy_mm_dd

        assert transform_date_to_yyyy_mm_dd("03/04/2025") == "2025-03-04"

    def test_date_and_datetime_objects(self):
        from app.services.timesheets.helpers import transform_date_to_yyyy_mm_dd

        assert transform_date_to_yyyy_mm_dd(date(2024, 2, 29)) == "2024-02-29"
        assert transform_date_to_yyyy_mm_dd(datetime(2024, 2, 29, 18, 30)) == "2024-02-29"

    @pytest.mark.parametrize("value", [None, "", "not-a-date", "2025-13-01", "31/31/2025", "1/2"])
    def test_invalid_input_returns_none(self, value):
        from app.services.timesheets.helpers import transform_date_to_yyyy_mm_dd

        assert transform_date_to_yyyy_mm_dd(value) is None

    def test_parse_date_returns_date(self):
        from app.services.timesheets.helpers import parse_date

        assert parse_date("2025-01-15") == date(2025, 1, 15)
        assert parse_date("garbage") is None


class TestHours:
    """Hour conversions."""

    def test_convert_hours_to_decimal(self):
        from app.services.timesheets.helpers import convert_hours_to_decimal

        assert convert_hours_to_decimal("08:30") == 8.5
        assert convert_hours_to_decimal("7:15") == 7.25
        assert convert_hours_to_decimal("6.5") == 6.5
        assert convert_hours_to_decimal(4) == 4.0

    def test_convert_invalid_hours_is_zero(self):
        from app.services.timesheets.helpers import convert_hours_to_decimal

        assert convert_hours_to_decimal("abc") == 0.0
        assert convert_hours_to_decimal(None) == 0.0

    def test_decimal_to_hours(self):
        from app.services.timesheets.helpers import decimal_to_hours

        assert decimal_to_hours(8.5) == "08:30"
        assert decimal_to_hours(0.25) == "00:15"

    @pytest.mark.parametrize("value,expected", [
        ("00:30", "30 mins"),
        ("01:00", "1 hr"),
        ("01:45", "1 hr 45 mins"),
        ("02:00", "2 hrs"),
        ("03:10", "3 hrs 10 mins"),
    ])
    def test_format_hours_readable(self, value, expected):
        from app.services.timesheets.helpers import format_hours_readable

        assert format_hours_readable(value) == expected


class TestDates:
    """Long dates and week boundaries."""

    @pytest.mark.parametrize("day,expected", [
        (date(2025, 3, 1), "1st March 2025"),
        (date(2025, 3, 2), "2nd March 2025"),
        (date(2025, 3, 3), "3rd March 2025"),
        (date(2025, 3, 11), "11th March 2025"),
        (date(2025, 3, 22), "22nd March 2025"),
    ])
    def test_format_long_date(self, day, expected):
        from app.services.timesheets.helpers import format_long_date

        assert format_long_date(day) == expected

    def test_week_boundaries_monday_to_sunday(self):
        from app.services.timesheets.helpers import week_boundaries

        # 2025-03-05 is a Wednesday
        assert week_boundaries(date(2025, 3, 5)) == (date(2025, 3, 3), date(2025, 3, 9))
        assert week_boundaries(date(2025, 3, 3)) == (date(2025, 3, 3), date(2025, 3, 9))
        assert week_boundaries(date(2025, 3, 9)) == (date(2025, 3, 3), date(2025, 3, 9))
