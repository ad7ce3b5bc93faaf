"""Utility functions package."""

from .helpers import (
    combine,
    local_now,
    normalize_time,
    parse_date,
    parse_time,
    weekday_index,
)

__all__ = [
    "combine",
    "local_now",
    "normalize_time",
    "parse_date",
    "parse_time",
    "weekday_index",
]
