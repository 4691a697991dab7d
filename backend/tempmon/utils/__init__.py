"""
Utility modules for the measurement API.
"""

from tempmon.utils.validation import (
    utcnow,
    to_naive_utc,
    parse_iso_timestamp,
    resolve_time_window,
    is_empty_window,
    validate_pagination,
)

__all__ = [
    "utcnow",
    "to_naive_utc",
    "parse_iso_timestamp",
    "resolve_time_window",
    "is_empty_window",
    "validate_pagination",
]
