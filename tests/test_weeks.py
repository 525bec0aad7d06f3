"""Tests for weekly_tracker/weeks.py."""
from datetime import date, datetime, timedelta

import pytest

from weekly_tracker.weeks import (
    WeekLabels, iso_week_number, label_for, week_bounds, week_options, week_range_label,
)


class TestLabelFor:

    def test_first_day_of_2024_is_week_one(self):
        assert label_for(date(2024, 1, 1)) == WeekLabels("Week 1 - January 2024", "January")

    @pytest.mark.parametrize("value", ["2024-01-01", datetime(2024, 1, 1, 15, 30), " 2024-01-01 "])
    def test_accepts_strings_and_datetimes(self, value):
        assert label_for(value).week_label == "Week 1 - January 2024"

    def test_is_deterministic(self):
        assert label_for("2024-06-12") == label_for("2024-06-12")

    def test_year_end_date_keeps_its_own_month_and_year(self):
        # Mon 30 Dec 2024 sits in ISO week 1 of 2025
        assert label_for(date(2024, 12, 30)) == WeekLabels("Week 1 - December 2024", "December")

    def test_new_year_date_in_previous_iso_year(self):
        # Fri 1 Jan 2021 belongs to 2020-W53
        assert label_for(date(2021, 1, 1)).week_label == "Week 53 - January 2021"

    @pytest.mark.parametrize("value", ["", None, "not a date", "2024-13-45"])
    def test_unreadable_input_gives_empty_labels(self, value):
        assert label_for(value) == WeekLabels("", "")

    def test_week_number_matches_iso_calendar(self):
        day = date(2018, 12, 1)
        while day < date(2027, 2, 1):
            assert iso_week_number(day) == day.isocalendar()[1], day
            day += timedelta(days=1)


class TestWeekRange:

    def test_monday_to_sunday_span(self):
        assert week_range_label(date(2024, 12, 11)) == "Dec 9 - Dec 15"

    def test_span_crossing_the_year(self):
        assert week_range_label("2024-12-31") == "Dec 30 - Jan 5"
        assert week_bounds("2024-12-31") == (date(2024, 12, 30), date(2025, 1, 5))

    def test_sunday_belongs_to_the_week_before(self):
        assert week_range_label(date(2024, 12, 15)) == "Dec 9 - Dec 15"

    def test_empty_input(self):
        assert week_range_label("") == ""


class TestWeekOptions:

    def test_window_is_newest_first(self):
        opts = week_options(date(2024, 12, 11))
        assert len(opts) == 15
        assert opts[0].value == "2024-12-26"
        assert opts[-1].value == "2024-09-19"

    def test_current_week_option(self):
        current = week_options(date(2024, 12, 11))[2]
        assert current.value == "2024-12-12"
        assert current.week_no == 50
        assert current.label == "Week 50 (Dec 9 - Dec 15)"
        assert label_for(current.value).week_label == "Week 50 - December 2024"
