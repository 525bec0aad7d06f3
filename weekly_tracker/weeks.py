# weekly_tracker/weeks.py
"""Week and month labels stamped on reports.

Two week notions live here and they are not interchangeable:

* ``label_for`` numbers weeks ISO-style (the week belongs to the year of its
  Thursday) but prints the month and year of the date it was given. A report
  dated Mon 30 Dec 2024 is therefore labelled "Week 1 - December 2024".
  Stored reports already carry labels in this form, so it must not change.
* ``week_range_label`` is the plain Monday-Sunday span around a date and is
  only used for display.
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta

import pandas as pd

PAST_WEEKS = 12
FUTURE_WEEKS = 2


@dataclass(frozen=True)
class WeekLabels:
    week_label: str
    month_label: str


@dataclass(frozen=True)
class WeekOption:
    label: str
    value: str
    week_no: int


def to_date(value):
    """Coerce a date, datetime or date string to ``date``; None if it can't be read."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    parsed = pd.to_datetime(text, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date()


def _thursday_of(d: date) -> date:
    return d - timedelta(days=d.weekday()) + timedelta(days=3)


def iso_week_number(d: date) -> int:
    thursday = _thursday_of(d)
    jan_1 = date(thursday.year, 1, 1)
    first_thursday = jan_1 + timedelta(days=(3 - jan_1.weekday()) % 7)
    return 1 + round((thursday - first_thursday).days / 7)


def label_for(value) -> WeekLabels:
    d = to_date(value)
    if d is None:
        return WeekLabels("", "")
    month = calendar.month_name[d.month]
    return WeekLabels(
        week_label=f"Week {iso_week_number(d)} - {month} {d.year}",
        month_label=month,
    )


def week_bounds(value):
    """(monday, sunday) of the calendar week containing the date."""
    d = to_date(value)
    if d is None:
        return None
    monday = d - timedelta(days=d.weekday())
    return monday, monday + timedelta(days=6)


def week_range_label(value) -> str:
    bounds = week_bounds(value)
    if bounds is None:
        return ""
    monday, sunday = bounds
    return (f"{calendar.month_abbr[monday.month]} {monday.day} - "
            f"{calendar.month_abbr[sunday.month]} {sunday.day}")


def week_options(today=None, past=PAST_WEEKS, future=FUTURE_WEEKS) -> list:
    """Selectable weeks around ``today``, newest first.

    Each option's value is the ISO date of that week's Thursday.
    """
    today = to_date(today) or date.today()
    opts = []
    for i in range(-past, future + 1):
        thursday = _thursday_of(today + timedelta(weeks=i))
        week_no = iso_week_number(thursday)
        opts.append(WeekOption(
            label=f"Week {week_no} ({week_range_label(thursday)})",
            value=thursday.isoformat(),
            week_no=week_no,
        ))
    return list(reversed(opts))
