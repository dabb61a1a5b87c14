"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

PERIODS = ("daily", "weekly", "monthly", "yearly")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and the
    relative words "today", "yesterday" and "tomorrow".

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def period_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get the start and end of the budget period containing a day.

    Args:
        period: daily, weekly (Monday to Sunday), monthly or yearly
        today: Reference day, defaults to the current date

    Returns:
        Tuple of (start_date, end_date), both inclusive

    Raises:
        ValueError: If period string is not recognized
    """
    today = today or date.today()
    if period == "daily":
        return (today, today)
    if period == "weekly":
        start_date = today - timedelta(days=today.weekday())
        return (start_date, start_date + timedelta(days=6))
    if period == "monthly":
        start_date = today.replace(day=1)
        return (start_date, start_date + relativedelta(months=1) - timedelta(days=1))
    if period == "yearly":
        return (today.replace(month=1, day=1), today.replace(month=12, day=31))
    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
