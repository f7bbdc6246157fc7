"""
Tolerant date handling.

Program and log dates are stored as strings.  Two shapes are accepted:
an internet date-time with a UTC offset (``2024-03-01T08:15:00.000Z``,
fractional seconds optional) and a full date (``2024-03-01``).  Date-times
resolve to their UTC calendar date.  Anything else is treated as "no date"
so legacy or malformed records never raise.
"""

import re
from datetime import date, datetime, timedelta, timezone

_DATETIME_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
)
_FULL_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date(value: str | None) -> date | None:
    """
    Parse an ISO-8601-like string to a calendar date.

    Args:
        value: Date or date-time string

    Returns:
        The calendar date, or None if the string matches neither format
    """
    if not value:
        return None

    text = value.strip()
    # strptime's %z accepts "Z" since 3.7
    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).astimezone(timezone.utc).date()
        except ValueError:
            continue

    if not _FULL_DATE_RE.match(text):
        return None
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        return None


def format_date(value: date) -> str:
    """Render a date as YYYY-MM-DD."""
    return value.strftime("%Y-%m-%d")


def days_between(start: date, end: date) -> int:
    """Whole calendar days from start to end (negative if end is earlier)."""
    return (end - start).days


def add_days(value: str, days: int) -> str | None:
    """Shift a date string by whole days; None if the input does not parse."""
    parsed = parse_date(value)
    if parsed is None:
        return None
    return format_date(parsed + timedelta(days=days))
