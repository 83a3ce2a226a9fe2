"""Date parsing utilities.

``normalize_date`` is the single place where stored or imported date values
are interpreted. It never goes through timezone-aware conversions, so a value
such as "2025-03-01" always stays on March 1st.
"""

from datetime import date, datetime, timedelta
from typing import Union

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from budgetline.domain.errors import UnparseableDateError, unparseable_date


def _strip_time(value: str) -> str:
    if "T" in value:
        return value.split("T", 1)[0]
    if " " in value:
        return value.split(" ", 1)[0]
    return value


def _to_date(year: str, month: str, day: str, original: object) -> date:
    if not (year.isdigit() and month.isdigit() and day.isdigit()) or len(year) != 4:
        raise UnparseableDateError(unparseable_date(original))
    try:
        return date(int(year), int(month), int(day))
    except ValueError as e:
        raise UnparseableDateError(f"{unparseable_date(original)}: {e}") from e


def normalize_date(value: Union[date, datetime, str, None]) -> date:
    """Normalize a stored date value to a calendar date.

    Supported forms:
    - date and datetime objects (the calendar date is kept as-is)
    - "YYYY-MM-DD" and "YYYY-MM" (year-first, the day defaults to 1)
    - "MM-DD-YYYY" and "MM/DD/YYYY" (month-first, single digits allowed)

    A dash-delimited value is year-first when its first segment has four
    characters, month-first otherwise. Trailing time components are ignored.

    Args:
        value: Date-like value

    Returns:
        Date object

    Raises:
        UnparseableDateError: If the value is not a recognised calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise UnparseableDateError(unparseable_date(value))

    text = _strip_time(value.strip())

    if "-" in text:
        parts = text.split("-")
        if len(parts[0]) == 4:
            if len(parts) == 3:
                return _to_date(parts[0], parts[1], parts[2], value)
            if len(parts) == 2:
                return _to_date(parts[0], parts[1], "1", value)
        elif len(parts) == 3:
            return _to_date(parts[2], parts[0], parts[1], value)
    elif "/" in text:
        parts = text.split("/")
        if len(parts) == 3:
            return _to_date(parts[2], parts[0], parts[1], value)

    raise UnparseableDateError(unparseable_date(value))


def parse_date(date_str: str) -> date:
    """Parse user-entered date text into a date object.

    Supports the stored forms handled by ``normalize_date`` plus relative
    dates ("today", "yesterday", "last month", "this year", ...) and free-form
    absolute dates such as "January 15, 2025".

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    try:
        return normalize_date(date_str)
    except UnparseableDateError:
        pass

    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
    elif date_str.startswith("next "):
        period = date_str[5:]
        if period == "month":
            return (today + relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) + relativedelta(years=1)

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_month(month_str: str) -> tuple[int, int]:
    """Parse a "YYYY-MM" (or any supported date) string into (month, year).

    Raises:
        ValueError: If the value cannot be parsed
    """
    parsed = parse_date(month_str)
    return parsed.month, parsed.year
