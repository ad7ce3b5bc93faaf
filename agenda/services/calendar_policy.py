"""
Calendar policy: which dates a professional can be booked on.

Holidays are deliberately not consulted here. They are shown as a marker
on the agenda but a clinic may choose to work on them.
"""

from datetime import date, timedelta
from typing import AbstractSet, Optional

from ..utils.helpers import weekday_index
from .exceptions import RejectionReason


def is_past_date(target: date, today: date) -> bool:
    """True if ``target`` is strictly before ``today``."""
    return target < today


def is_working_day(target: date, working_days: AbstractSet[int]) -> bool:
    """True if the weekday of ``target`` (Sunday=0) is a working day."""
    return weekday_index(target) in working_days


def is_beyond_window(target: date, today: date, max_advance_days: Optional[int]) -> bool:
    """True if ``target`` is more than ``max_advance_days`` after ``today``."""
    return max_advance_days is not None and target > today + timedelta(days=max_advance_days)


def check_date(
    target: date,
    working_days: AbstractSet[int],
    today: date,
    max_advance_days: Optional[int] = None,
) -> Optional[RejectionReason]:
    """
    Return why ``target`` cannot be booked, or None if it can.

    Past dates are reported first, then non-working days, then dates
    beyond the professional's booking window.
    """
    if is_past_date(target, today):
        return RejectionReason.IN_PAST
    if not is_working_day(target, working_days):
        return RejectionReason.NOT_WORKING_DAY
    if is_beyond_window(target, today, max_advance_days):
        return RejectionReason.BEYOND_BOOKING_WINDOW
    return None


def is_bookable_date(
    target: date,
    working_days: AbstractSet[int],
    today: date,
    max_advance_days: Optional[int] = None,
) -> bool:
    """
    Whether ``target`` can be booked.

    Same-day bookings are allowed. With no working days nothing is
    bookable; callers surface that as a configuration error.
    """
    return check_date(target, working_days, today, max_advance_days) is None
