"""Tests for schedule date helpers and status classification."""

from datetime import date

import pytest

from proflow.timeline.dates import (
    add_days,
    classify_status,
    end_date,
    format_for_display,
    today_iso,
)
from proflow.timeline.schemas import ItemStatus


class TestAddDays:
    """Tests for ISO date arithmetic."""

    def test_add_positive_days(self):
        """Test adding days within a month."""
        assert add_days("2024-03-05", 5) == "2024-03-10"

    def test_add_days_month_rollover(self):
        """Test rollover into the next month and year."""
        assert add_days("2024-01-30", 3) == "2024-02-02"
        assert add_days("2024-12-30", 5) == "2025-01-04"

    def test_add_days_leap_year(self):
        """Test February in a leap year."""
        assert add_days("2024-02-28", 1) == "2024-02-29"
        assert add_days("2023-02-28", 1) == "2023-03-01"

    def test_add_negative_days(self):
        """Test subtracting days."""
        assert add_days("2024-03-01", -1) == "2024-02-29"

    def test_accepts_date_objects(self):
        """Test date inputs are accepted."""
        assert add_days(date(2024, 3, 5), 0) == "2024-03-05"

    def test_accepts_datetime_strings(self):
        """Test ISO datetime strings use their date part."""
        assert add_days("2024-03-05T10:30:00", 1) == "2024-03-06"

    @pytest.mark.parametrize("start", ["2024-01-31", "2024-02-29", "2023-12-31", "2000-03-01"])
    @pytest.mark.parametrize("days", [0, 1, 29, 365, -400])
    def test_round_trip(self, start: str, days: int):
        """Test adding then subtracting returns the original date."""
        assert add_days(add_days(start, days), -days) == start

    def test_invalid_date_raises(self):
        """Test unparseable input raises ValueError."""
        with pytest.raises(ValueError):
            add_days("not a date", 1)


class TestFormatForDisplay:
    """Tests for day/month display formatting."""

    def test_formats_day_month(self):
        """Test ISO dates render as dd/mm."""
        assert format_for_display("2024-03-05") == "05/03"
        assert format_for_display("2024-12-25") == "25/12"

    def test_empty_returns_empty(self):
        """Test empty and None inputs."""
        assert format_for_display("") == ""
        assert format_for_display(None) == ""

    def test_unparseable_returned_unchanged(self):
        """Test garbage is passed through without raising."""
        assert format_for_display("sometime soon") == "sometime soon"
        assert format_for_display("2024-13-45") == "2024-13-45"


class TestClassifyStatus:
    """Tests for status classification."""

    TODAY = date(2024, 3, 10)

    def test_completed_wins_over_dates(self, make_item):
        """Test progress 100 is completed even when long overdue."""
        item = make_item(start_date="2020-01-01", duration=1, progress=100)
        assert classify_status(item, self.TODAY) == ItemStatus.COMPLETED

    def test_progress_above_100_is_completed(self, make_item):
        """Test progress beyond 100 still counts as completed."""
        item = make_item(start_date="2030-01-01", progress=150)
        assert classify_status(item, self.TODAY) == ItemStatus.COMPLETED

    def test_overdue(self, make_item):
        """Test end date strictly before today."""
        item = make_item(start_date="2024-03-01", duration=5, progress=50)
        assert end_date(item) == "2024-03-06"
        assert classify_status(item, self.TODAY) == ItemStatus.OVERDUE

    def test_active_within_range(self, make_item):
        """Test today inside [start, end]."""
        item = make_item(start_date="2024-03-08", duration=5)
        assert classify_status(item, self.TODAY) == ItemStatus.ACTIVE

    def test_active_on_boundaries(self, make_item):
        """Test start day and end day are both active."""
        starts_today = make_item(start_date="2024-03-10", duration=3)
        ends_today = make_item(start_date="2024-03-07", duration=3)
        assert classify_status(starts_today, self.TODAY) == ItemStatus.ACTIVE
        assert classify_status(ends_today, self.TODAY) == ItemStatus.ACTIVE

    def test_upcoming(self, make_item):
        """Test items starting after today."""
        item = make_item(start_date="2024-03-11", duration=3)
        assert classify_status(item, self.TODAY) == ItemStatus.UPCOMING

    def test_unparseable_start_is_upcoming(self, make_item):
        """Test classification stays total for bad dates."""
        item = make_item(start_date="??")
        assert classify_status(item, self.TODAY) == ItemStatus.UPCOMING

    def test_defaults_to_today(self, make_item):
        """Test the reference date defaults to today."""
        item = make_item(start_date=today_iso(), duration=2)
        assert classify_status(item) == ItemStatus.ACTIVE
