from datetime import date

import pytest

from agenda.services.calendar_policy import check_date, is_bookable_date
from agenda.services.exceptions import RejectionReason
from agenda.utils.helpers import weekday_index

WEEKDAYS = frozenset({1, 2, 3, 4, 5})
TODAY = date(2024, 6, 10)  # Monday


def test_weekday_index_starts_on_sunday() -> None:
    assert weekday_index(date(2024, 6, 9)) == 0
    assert weekday_index(date(2024, 6, 10)) == 1
    assert weekday_index(date(2024, 6, 15)) == 6


def test_same_day_is_bookable() -> None:
    assert is_bookable_date(TODAY, WEEKDAYS, TODAY) is True


def test_past_date_is_not_bookable() -> None:
    assert check_date(date(2024, 6, 7), WEEKDAYS, TODAY) == RejectionReason.IN_PAST


def test_non_working_day_is_not_bookable() -> None:
    assert check_date(date(2024, 6, 16), WEEKDAYS, TODAY) == RejectionReason.NOT_WORKING_DAY


def test_past_is_reported_before_non_working_day() -> None:
    # Sunday in the past
    assert check_date(date(2024, 6, 9), WEEKDAYS, TODAY) == RejectionReason.IN_PAST


@pytest.mark.parametrize("offset_days", range(7))
def test_only_working_weekdays_are_bookable(offset_days: int) -> None:
    target = date(2024, 6, 16 + offset_days)

    assert is_bookable_date(target, WEEKDAYS, TODAY) == (weekday_index(target) in WEEKDAYS)


def test_holiday_on_working_day_stays_bookable() -> None:
    # Natal 2025 falls on a Thursday
    christmas = date(2025, 12, 25)

    assert is_bookable_date(christmas, WEEKDAYS, date(2025, 12, 1)) is True


def test_no_working_days_means_nothing_is_bookable() -> None:
    assert is_bookable_date(date(2024, 6, 11), frozenset(), TODAY) is False


def test_date_beyond_booking_window_is_refused() -> None:
    assert check_date(date(2024, 6, 17), WEEKDAYS, TODAY, max_advance_days=7) is None
    assert check_date(date(2024, 6, 18), WEEKDAYS, TODAY, max_advance_days=7) == RejectionReason.BEYOND_BOOKING_WINDOW


def test_non_working_day_is_reported_before_booking_window() -> None:
    assert check_date(date(2024, 6, 23), WEEKDAYS, TODAY, max_advance_days=7) == RejectionReason.NOT_WORKING_DAY


def test_no_booking_window_means_no_limit() -> None:
    assert is_bookable_date(date(2030, 6, 11), WEEKDAYS, TODAY) is True
