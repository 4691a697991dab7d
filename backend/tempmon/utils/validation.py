"""
Input Validation Utilities
===========================

Helpers for turning query parameters into values the store can use:
ISO-8601 timestamps, time windows, and pagination bounds.

All timestamps inside the app are naive UTC. Anything with an offset is
converted to UTC first, anything without one is taken as UTC already.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from tempmon.errors import ValidationError


def utcnow() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to naive UTC.

    Args:
        value: Aware or naive datetime

    Returns:
        The same instant, in UTC, without tzinfo
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_timestamp(value: Optional[str], parameter: str) -> Optional[datetime]:
    """
    Parse an ISO-8601 query parameter.

    Args:
        value: Raw parameter value (None or "" means "not given")
        parameter: Parameter name, used in the error message

    Returns:
        Naive UTC datetime, or None if the parameter was not given

    Raises:
        ValidationError: If the value is not an ISO-8601 timestamp
    """
    if value is None or not value.strip():
        return None

    text = value.strip()
    # fromisoformat() before 3.11 does not accept a trailing "Z"
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(
            f"Invalid {parameter}: '{value}' is not an ISO-8601 timestamp",
            parameter=parameter,
        )
    return to_naive_utc(parsed)


def resolve_time_window(
    start: Optional[datetime],
    end: Optional[datetime],
    window_hours: int = 24,
) -> tuple[datetime, datetime]:
    """
    Fill in a missing time window.

    A missing end means "now"; a missing start means `window_hours`
    before now. Both bounds are inclusive.

    A filled-in bound can land on the wrong side of the other one (an old
    endTime on its own, a future startTime on its own). That window is
    returned as is and matches nothing; see `is_empty_window`.

    Raises:
        ValidationError: If both bounds were given and start is after end
    """
    both_given = start is not None and end is not None
    now = utcnow()
    if end is None:
        end = now
    if start is None:
        start = now - timedelta(hours=window_hours)

    start = to_naive_utc(start)
    end = to_naive_utc(end)
    if both_given and start > end:
        raise ValidationError(
            f"startTime ({start.isoformat()}) is after endTime ({end.isoformat()})",
            parameter="startTime",
        )
    return start, end


def is_empty_window(start: datetime, end: datetime) -> bool:
    """True if no timestamp can satisfy start <= timestamp <= end."""
    return start > end


def validate_pagination(limit: int, offset: int) -> None:
    """
    Check limit/offset bounds.

    Raises:
        ValidationError: If limit is below 1 or offset is negative
    """
    if limit < 1:
        raise ValidationError(f"Invalid limit: {limit}. Must be 1 or more.", parameter="limit")
    if offset < 0:
        raise ValidationError(f"Invalid offset: {offset}. Must be 0 or more.", parameter="offset")
