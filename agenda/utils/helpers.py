"""Helper utility functions."""

import logging
import math
from datetime import date, datetime, time
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def parse_time(value: Union[str, time]) -> time:
    """
    Parse a time-of-day string.

    Accepts "HH:MM" and "HH:MM:SS" (as returned by Postgres ``time``
    columns). Seconds and microseconds are dropped so that comparisons
    happen at minute precision.

    Raises:
        ValueError: If the value is not a valid time of day
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)

    text = str(value).strip()
    parts = text.split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts[:2]):
        raise ValueError(f"Invalid time: {value!r}")

    hour, minute = int(parts[0]), int(parts[1])
    return time(hour, minute)


def normalize_time(value: Union[str, time]) -> str:
    """Normalize a time value to "HH:MM"."""
    return parse_time(value).strftime("%H:%M")


def parse_date(value: Union[str, date]) -> date:
    """
    Parse an ISO calendar date ("YYYY-MM-DD").

    Raises:
        ValueError: If the value is not an ISO date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


def combine(appointment_date: Union[str, date], appointment_time: Union[str, time]) -> datetime:
    """Build the naive local datetime of an appointment."""
    return datetime.combine(parse_date(appointment_date), parse_time(appointment_time))


def minutes_of_day(value: Union[str, time]) -> int:
    """Minutes since midnight for a time value."""
    t = parse_time(value)
    return t.hour * 60 + t.minute


def format_minutes(minutes: int) -> str:
    """Format minutes since midnight as "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def weekday_index(value: Union[str, date]) -> int:
    """
    Day of week with Sunday as 0 and Saturday as 6.

    This is the convention used for ``working_days`` in stored profiles,
    unlike ``date.weekday()`` which starts on Monday.
    """
    return (parse_date(value).weekday() + 1) % 7


def local_now(timezone: str = "UTC", reference: Optional[datetime] = None) -> datetime:
    """
    Current wall-clock time in the clinic timezone, without tzinfo.

    Appointment dates and times are stored naive in clinic local time, so
    every comparison is made against a naive local ``now``.

    Args:
        timezone: IANA timezone name
        reference: Aware datetime to convert instead of reading the clock
    """
    try:
        tz = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {timezone!r}, using UTC")
        tz = ZoneInfo("UTC")

    current = reference or datetime.now(tz)
    if current.tzinfo is None:
        return current
    return current.astimezone(tz).replace(tzinfo=None)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding up."""
    return int(math.floor(value + 0.5))
