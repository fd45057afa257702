"""
Calendar date helpers for reference and entry dates.

The remote service speaks ISO-8601 dates; some endpoints return full
timestamps where a calendar date is meant, so parsing only looks at the
date portion.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Union

DateLike = Union[date, datetime, str]


def parse_date(value: DateLike) -> date:
    """
    Coerce a date, datetime or ISO string into a calendar date.

    Args:
        value: Date value, datetime, or ISO string ("2024-03-01" or
            "2024-03-01T00:00:00")

    Returns:
        Calendar date

    Raises:
        ValueError: If the string is not an ISO date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    return date.fromisoformat(text[:10])


def parse_optional_date(value: Optional[DateLike]) -> Optional[date]:
    """Parse a date that the remote service may leave empty."""
    if value is None or value == "":
        return None
    return parse_date(value)


def next_entry_date(reference_date: DateLike, offset_days: int = 1) -> date:
    """
    Entry date for trades simulated from a ranking snapshot.

    Args:
        reference_date: Date of the ranking snapshot
        offset_days: Days between the snapshot and the entry

    Returns:
        Entry date
    """
    return parse_date(reference_date) + timedelta(days=offset_days)


def to_iso(value: Optional[date]) -> Optional[str]:
    """Format a date for the wire, passing None through."""
    return value.isoformat() if value is not None else None
