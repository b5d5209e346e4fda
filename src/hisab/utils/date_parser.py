"""Date parsing and day normalization utilities.

Every component that compares or stores dates goes through ``normalize_date``
so that a "day" means the same local calendar day everywhere.
"""

from datetime import date, datetime, timedelta
from typing import Union

from dateutil import parser as date_parser

DateLike = Union[date, datetime, int, float, str]

ONE_DAY = timedelta(days=1)


def today() -> date:
    """Return the current local day."""
    return date.today()


def normalize_date(value: DateLike) -> date:
    """Truncate a date-like value to its local calendar day.

    Accepts ``date``/``datetime`` objects, epoch timestamps in milliseconds
    (the format older backups use) and any string ``parse_date`` understands.

    Raises:
        ValueError: If the value cannot be interpreted as a day
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Cannot interpret {value!r} as a date")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000).date()
    if isinstance(value, str):
        return parse_date(value)
    raise ValueError(f"Cannot interpret {value!r} as a date")


def next_day(day: date) -> date:
    return day + ONE_DAY


def previous_day(day: date) -> date:
    return day - ONE_DAY


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and the
    relative words "today", "yesterday" and "tomorrow".

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    current = today()

    relative_dates = {
        "today": current,
        "yesterday": current - ONE_DAY,
        "tomorrow": current + ONE_DAY,
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
